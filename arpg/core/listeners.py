"""Listener registration with explicit unsubscribe handles."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by every ``subscribe``; ``cancel()`` detaches it."""

    __slots__ = ("_detach", "_active")

    def __init__(self, detach: Callable[[], None]) -> None:
        self._detach = detach
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._detach()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc) -> None:
        self.cancel()


class Listeners(Generic[T]):
    """Ordered callbacks invoked synchronously with one payload."""

    __slots__ = ("_callbacks", "_name")

    def __init__(self, name: str = "listeners") -> None:
        self._callbacks: list[Callable[[T], None]] = []
        self._name = name

    def __len__(self) -> int:
        return len(self._callbacks)

    def add(self, callback: Callable[[T], None]) -> Subscription:
        self._callbacks.append(callback)

        def _detach() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return Subscription(_detach)

    def notify(self, payload: T) -> None:
        # Copy so a callback may unsubscribe itself mid-notify.
        for cb in list(self._callbacks):
            try:
                cb(payload)
            except Exception:
                logger.exception("%s callback %r failed", self._name, cb)

    def clear(self) -> None:
        self._callbacks.clear()
