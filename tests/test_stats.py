"""Tests for the stat model: damage, healing, mana and leveling."""

from arpg.core.stats import (
    Stats,
    apply_damage,
    effective_damage,
    gain_xp,
    heal,
    restore_mana,
    spend_mana,
)


def _stats(**overrides) -> Stats:
    base = dict(hp=100, max_hp=100, mana=50.0, max_mana=100.0, attack=10, defense=5)
    base.update(overrides)
    return Stats(**base)


class TestDamage:
    def test_defense_reduces_damage(self):
        s = _stats()
        assert apply_damage(s, 20, defense_applies=True) == 85

    def test_defense_never_reduces_below_one(self):
        s = _stats(defense=50)
        assert apply_damage(s, 10, defense_applies=True) == 99

    def test_raw_damage_ignores_defense(self):
        s = _stats(defense=50)
        assert apply_damage(s, 10, defense_applies=False) == 90

    def test_hp_clamped_at_zero(self):
        s = _stats()
        assert apply_damage(s, 500, defense_applies=False) == 0
        assert not s.alive

    def test_zero_raw_without_defense_deals_nothing(self):
        s = _stats()
        assert apply_damage(s, 0, defense_applies=False) == 100

    def test_negative_raw_is_treated_as_zero(self):
        s = _stats()
        assert effective_damage(s, -5, defense_applies=False) == 0
        assert effective_damage(s, -5, defense_applies=True) == 1

    def test_effective_damage_does_not_mutate(self):
        s = _stats()
        assert effective_damage(s, 30, defense_applies=True) == 25
        assert s.hp == 100


class TestHealAndMana:
    def test_heal_clamps_to_max(self):
        s = _stats(hp=90)
        assert heal(s, 50) == 10
        assert s.hp == 100

    def test_heal_negative_is_noop(self):
        s = _stats(hp=40)
        assert heal(s, -10) == 0
        assert s.hp == 40

    def test_restore_mana_clamps(self):
        s = _stats(mana=95.0)
        assert restore_mana(s, 30.0) == 5.0
        assert s.mana == 100.0

    def test_spend_mana_all_or_nothing(self):
        s = _stats(mana=5.0)
        assert spend_mana(s, 10.0) is False
        assert s.mana == 5.0
        assert spend_mana(s, 5.0) is True
        assert s.mana == 0.0


class TestLeveling:
    def test_level_up_carries_surplus(self):
        s = _stats(hp=10, xp=0, xp_to_next=100)
        gained = gain_xp(s, 130)
        assert gained == 1
        assert s.level == 2
        assert s.xp == 30
        assert s.xp_to_next == 150
        assert s.max_hp == 110
        assert s.attack == 12
        assert s.defense == 6
        assert s.hp == s.max_hp

    def test_multiple_levels_in_one_grant(self):
        s = _stats(xp_to_next=100)
        assert gain_xp(s, 250) == 2
        assert s.level == 3
        assert s.xp == 0
        assert s.xp_to_next == 225

    def test_non_positive_grant_is_ignored(self):
        s = _stats()
        assert gain_xp(s, 0) == 0
        assert s.xp == 0

    def test_copy_is_independent(self):
        s = _stats()
        c = s.copy()
        c.hp = 1
        assert s.hp == 100
        assert c.to_dict()["hp"] == 1
