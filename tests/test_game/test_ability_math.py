"""Tests for ability modifiers, proficiency bonuses, and boosts."""

import pytest

from pathsheet.game.character.attributes import (
    Proficiency,
    ProficiencyRank,
    ability_modifier,
    apply_ability_boost,
    best_rank,
    clamp_level,
    proficiency_bonus,
    to_rank,
)


class TestAbilityModifier:
    """Tests for the (score - 10) // 2 modifier."""

    def test_modifier_reference_values(self):
        """Average, high, and low scores map to the published modifiers."""
        assert ability_modifier(10) == 0
        assert ability_modifier(18) == 4
        assert ability_modifier(7) == -2

    def test_modifier_formula(self):
        """Modifier follows floor((score - 10) / 2) for every score, including negatives."""
        for score in range(-5, 31):
            assert ability_modifier(score) == (score - 10) // 2

    def test_modifier_has_no_floor(self):
        """Very low scores give large negative modifiers."""
        assert ability_modifier(1) == -5
        assert ability_modifier(0) == -5


class TestProficiencyBonus:
    """Tests for level + rank proficiency, with and without level."""

    def test_trained_at_level_five(self):
        """Trained at level 5 is 5 + 2."""
        assert proficiency_bonus(5, Proficiency.TRAINED) == 7

    def test_without_level_variant(self):
        """Proficiency Without Level drops the level term for any level."""
        for level in (1, 5, 20):
            assert proficiency_bonus(level, Proficiency.TRAINED, without_level=True) == 2

    def test_untrained_is_zero(self):
        """Untrained never adds level."""
        assert proficiency_bonus(10, Proficiency.UNTRAINED) == 0
        assert proficiency_bonus(10, Proficiency.UNTRAINED, without_level=True) == 0

    @pytest.mark.parametrize(
        ("rank", "expected"),
        [("trained", 5), ("expert", 7), ("master", 9), ("legendary", 11)],
    )
    def test_ranks_by_name(self, rank, expected):
        """Rank names resolve to 2/4/6/8."""
        assert proficiency_bonus(3, rank) == expected

    def test_numeric_rank(self):
        """Numeric ranks are accepted too."""
        assert proficiency_bonus(4, 4) == 8


class TestProficiencyRanks:
    """Tests for rank ordering and coercion."""

    def test_ranks_are_ordered(self):
        """untrained < trained < expert < master < legendary."""
        ordered = [to_rank(name) for name in ("untrained", "trained", "expert", "master", "legendary")]
        assert ordered == sorted(ordered)
        assert [int(rank) for rank in ordered] == [0, 2, 4, 6, 8]

    def test_unknown_rank_is_untrained(self):
        """Unknown names and numbers fall back to untrained."""
        assert to_rank("grandmaster") == ProficiencyRank.UNTRAINED
        assert to_rank(3) == ProficiencyRank.UNTRAINED
        assert to_rank(None) == ProficiencyRank.UNTRAINED

    def test_best_rank(self):
        """best_rank picks the highest rank given."""
        assert best_rank("trained", "master", "expert") == ProficiencyRank.MASTER
        assert best_rank() == ProficiencyRank.UNTRAINED


class TestAbilityBoost:
    """Tests for single ability boosts."""

    def test_boost_below_eighteen(self):
        """+2 below 18."""
        assert apply_ability_boost(10) == 12
        assert apply_ability_boost(16) == 18

    def test_boost_at_eighteen_and_above(self):
        """+1 from 18 upward."""
        assert apply_ability_boost(18) == 19
        assert apply_ability_boost(19) == 20


class TestClampLevel:
    """Tests for the 1-20 level range."""

    def test_clamp(self):
        """Levels outside 1-20 are pulled back into range."""
        assert clamp_level(0) == 1
        assert clamp_level(25) == 20
        assert clamp_level(7) == 7
