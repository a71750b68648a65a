"""Action system: damage rules and combat resolution."""

from arpg.actions.combat import CombatResolver
from arpg.actions.damage import DamageRule, FixedDamage, LethalDamage

__all__ = ["CombatResolver", "DamageRule", "FixedDamage", "LethalDamage"]
