"""Tests for Automatic Bonus Progression and the other overlay formulas."""

import pytest

from pathsheet.game.character.variants import (
    STANDARD_RULES,
    VariantRules,
    abp_bonuses,
    abp_striking_dice,
    armor_item_bonus,
    class_hit_points,
    weapon_item_bonus,
    weapon_striking_dice,
)

ABP = VariantRules(automatic_bonus_progression=True)


class TestAutomaticBonusProgression:
    """Tests for the level-indexed ABP tables."""

    @pytest.mark.parametrize(
        ("level", "potency", "resilient"),
        [(1, 0, 0), (4, 1, 0), (8, 2, 1), (12, 3, 2), (16, 4, 3), (20, 5, 4)],
    )
    def test_table_rows(self, level, potency, resilient):
        """Potency and resilient values at their milestone levels."""
        row = abp_bonuses(level)
        assert (row.potency, row.resilient) == (potency, resilient)

    def test_off_table(self):
        """Levels outside 1-20 give nothing."""
        assert abp_bonuses(0).potency == 0
        assert abp_bonuses(25).resilient == 0

    def test_striking_approximation(self):
        """level // 6, capped at 3."""
        assert [abp_striking_dice(level) for level in (5, 6, 12, 18, 20)] == [0, 1, 2, 3, 3]

    def test_armor_bonus_replaces_stored(self):
        """ABP and stored item bonuses never add together."""
        assert armor_item_bonus(STANDARD_RULES, 8, 2) == 2
        assert armor_item_bonus(ABP, 8, 2) == 3

    def test_weapon_bonuses(self):
        """Potency and striking come from ABP or from the runes."""
        assert weapon_item_bonus(STANDARD_RULES, 12, 1) == 1
        assert weapon_item_bonus(ABP, 12, 1) == 3
        assert weapon_striking_dice(STANDARD_RULES, 12, 1) == 1
        assert weapon_striking_dice(ABP, 12, 1) == 2


class TestDualClass:
    """Tests for the class HP overlay."""

    def test_single_class(self):
        """Without a second class the primary HP is used."""
        assert class_hit_points(8) == 8

    def test_better_of_two(self):
        """Dual Class takes the larger class HP."""
        assert class_hit_points(8, 10) == 10
        assert class_hit_points(12, 6) == 12


class TestVariantRulesRecord:
    """Tests for the overlay configuration value."""

    def test_defaults_off(self):
        """Every overlay is off by default."""
        assert not any(STANDARD_RULES.model_dump().values())

    def test_wire_names(self):
        """The wire format uses camelCase flag names."""
        wire = VariantRules(free_archetype=True).to_wire()
        assert wire["freeArchetype"] is True
        assert set(wire) == {
            "freeArchetype",
            "dualClass",
            "ancestryParagon",
            "automaticBonusProgression",
            "gradualAbilityBoosts",
            "proficiencyWithoutLevel",
        }
