"""Damage rule strategy pattern.

Every hit volume carries a DamageRule deciding how much raw damage lands on
a victim and whether the victim's defense reduces it. To add a new rule
(e.g. percent-of-max-hp):
  1. Create a new DamageRule subclass.
  2. Build volumes with it; the resolver needs no changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from arpg.core.stats import apply_damage, effective_damage

if TYPE_CHECKING:
    from arpg.core.stats import Stats


# ---------------------------------------------------------------------------
# Abstract rule
# ---------------------------------------------------------------------------

class DamageRule(ABC):
    """Base class for damage rules.

    Subclass and implement:
      - name: short identifier used in logs and snapshots
      - raw_amount(): damage before the defense formula
      - defense_applies: whether the defense formula is used
    """

    name: str = "base"
    defense_applies: bool = True

    @abstractmethod
    def raw_amount(self, victim: Stats) -> int:
        """Raw damage this rule deals to *victim*."""

    def preview(self, victim: Stats) -> int:
        return effective_damage(victim, self.raw_amount(victim), self.defense_applies)

    def apply(self, victim: Stats) -> int:
        """Mutate *victim* and return its new hp."""
        return apply_damage(victim, self.raw_amount(victim), self.defense_applies)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ---------------------------------------------------------------------------
# Fixed damage: defense formula max(1, amount - defense)
# ---------------------------------------------------------------------------

class FixedDamage(DamageRule):
    """A fixed amount, optionally reduced by defense (always at least 1)."""

    name = "fixed"

    def __init__(self, amount: int, defense_applies: bool = True) -> None:
        self.amount = amount
        self.defense_applies = defense_applies

    def raw_amount(self, victim: Stats) -> int:
        return self.amount

    def __repr__(self) -> str:
        return f"FixedDamage({self.amount}, defense_applies={self.defense_applies})"


# ---------------------------------------------------------------------------
# Lethal damage: the victim's whole remaining hp, defense ignored
# ---------------------------------------------------------------------------

class LethalDamage(DamageRule):
    """Kills outright regardless of defense."""

    name = "lethal"
    defense_applies = False

    def raw_amount(self, victim: Stats) -> int:
        return victim.hp
