"""Stat model: the attribute bag every combatant carries, and its mutators.

The mutators keep ``0 <= hp <= max_hp`` and ``0 <= mana <= max_mana`` and do
nothing else. Emitting change notifications and checking for death
(``hp <= 0``) is the caller's job.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(slots=True)
class Stats:
    """Mutable combat statistics for a player or enemy."""

    # --- Vitals ---
    hp: int = 100
    max_hp: int = 100
    mana: float = 0.0
    max_mana: float = 0.0

    # --- Combat ---
    attack: int = 10
    defense: int = 0
    speed: float = 100.0
    damage: int = 10            # Fixed contact / AI attack damage (enemies)

    # --- Enemy behavior tunables ---
    chase_distance: float = 0.0
    xp_reward: int = 10
    loot_table: str = ""

    # --- Progression (player) ---
    level: int = 1
    xp: int = 0
    xp_to_next: int = 100

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def copy(self) -> Stats:
        return Stats(**asdict(self))

    def to_dict(self) -> dict[str, int | float | str]:
        return asdict(self)


def effective_damage(stats: Stats, raw_amount: int, defense_applies: bool) -> int:
    """Damage that *raw_amount* would actually deal to *stats*."""
    raw = max(int(raw_amount), 0)
    if defense_applies:
        return max(1, raw - stats.defense)
    return raw


def apply_damage(stats: Stats, raw_amount: int, defense_applies: bool) -> int:
    """Subtract damage from hp and return the new hp.

    With *defense_applies* the hit is reduced by defense but always deals at
    least 1; without it the raw amount lands unmodified (environmental and
    one-shot effects).
    """
    dealt = effective_damage(stats, raw_amount, defense_applies)
    stats.hp = max(0, min(stats.hp - dealt, stats.max_hp))
    return stats.hp


def heal(stats: Stats, amount: int) -> int:
    """Restore hp, clamped to max_hp. Returns the amount actually healed."""
    before = stats.hp
    stats.hp = max(0, min(stats.hp + max(int(amount), 0), stats.max_hp))
    return stats.hp - before


def restore_mana(stats: Stats, amount: float) -> float:
    """Restore mana, clamped to max_mana. Returns the amount actually restored."""
    before = stats.mana
    stats.mana = max(0.0, min(stats.mana + max(amount, 0.0), stats.max_mana))
    return stats.mana - before


def spend_mana(stats: Stats, cost: float) -> bool:
    """Deduct *cost* mana if available. Never partially spends."""
    if stats.mana < cost:
        return False
    stats.mana -= cost
    return True


def gain_xp(
    stats: Stats,
    amount: int,
    scale: float = 1.5,
    growth_hp: int = 10,
    growth_attack: int = 2,
    growth_defense: int = 1,
) -> int:
    """Add xp and apply any level-ups. Returns the number of levels gained.

    Surplus xp carries into the next level. Each level raises the threshold
    by *scale*, grows max_hp/attack/defense and fully heals.
    """
    if amount <= 0:
        return 0
    stats.xp += amount
    levels = 0
    while stats.xp_to_next > 0 and stats.xp >= stats.xp_to_next:
        stats.xp -= stats.xp_to_next
        stats.level += 1
        stats.xp_to_next = int(stats.xp_to_next * scale)
        stats.max_hp += growth_hp
        stats.attack += growth_attack
        stats.defense += growth_defense
        stats.hp = stats.max_hp
        levels += 1
    return levels
