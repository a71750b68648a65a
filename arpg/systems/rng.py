"""Domain-separated deterministic RNG using xxhash.

Formula: RNG_Value = Hash(WorldSeed, Domain, Key, Counter)

The same seed always reproduces the same loot rolls and drop plans, no
matter how many other systems drew random numbers in between.
"""

from __future__ import annotations

import struct
from typing import Protocol

import xxhash

from arpg.core.enums import Domain


class RandomSource(Protocol):
    """Anything with ``random() -> float in [0, 1)``; ``random.Random`` qualifies."""

    def random(self) -> float: ...


class DeterministicRNG:
    """Stateless domain-separated pseudo-random number generator.

    Each call is a pure function of (seed, domain, key, counter).
    """

    __slots__ = ("_seed",)

    _MAX_UINT64 = (1 << 64) - 1

    def __init__(self, seed: int) -> None:
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def _hash(self, domain: Domain, key: int, counter: int) -> int:
        payload = struct.pack("<qiqq", self._seed, domain.value, key, counter)
        return xxhash.xxh64(payload).intdigest()

    def next_float(self, domain: Domain, key: int, counter: int) -> float:
        """Return a deterministic float in [0.0, 1.0)."""
        return self._hash(domain, key, counter) / (self._MAX_UINT64 + 1)

    def next_int(self, domain: Domain, key: int, counter: int, low: int, high: int) -> int:
        """Return a deterministic integer in [low, high] inclusive."""
        f = self.next_float(domain, key, counter)
        return low + int(f * (high - low + 1))

    def stream(self, domain: Domain, key: int = 0) -> RandomStream:
        return RandomStream(self, domain, key)


class RandomStream:
    """Sequential view over a DeterministicRNG domain: draw after draw."""

    __slots__ = ("_rng", "_domain", "_key", "_counter")

    def __init__(self, rng: DeterministicRNG, domain: Domain, key: int = 0) -> None:
        self._rng = rng
        self._domain = domain
        self._key = key
        self._counter = 0

    @property
    def draws(self) -> int:
        return self._counter

    def random(self) -> float:
        value = self._rng.next_float(self._domain, self._key, self._counter)
        self._counter += 1
        return value


def rand_int(source: RandomSource, low: int, high: int) -> int:
    """Uniform integer in [low, high] inclusive from any RandomSource."""
    return int(source.random() * (high - low + 1)) + low
