"""Tests for Armor Class and shields."""

from pathsheet.game.character.base import with_changes
from pathsheet.game.rules.registry import RuleCatalog
from pathsheet.game.rules.tables import ShieldDef
from pathsheet.game.systems.defense import (
    _reinforced,
    derive_armor_class,
    derive_defenses,
    shield_stats,
)


class TestArmorClass:
    """base + Dex (capped) + armor + proficiency + item bonus."""

    def test_fighter(self, fighter):
        """10 + 1 (Dex capped at 1) + 4 + 7 + 1."""
        assert derive_armor_class(fighter) == 23

    def test_defaults_are_neutral(self, bard):
        """No armor: no cap and no armor bonus; untrained adds nothing."""
        assert derive_armor_class(bard) == 12

    def test_proficiency_without_level(self, fighter):
        """The variant drops level from the proficiency term."""
        character = with_changes(fighter, variant_rules={"proficiency_without_level": True})
        assert derive_armor_class(character) == 18

    def test_automatic_bonus_progression(self, fighter):
        """ABP replaces the stored item bonus; it never adds to it."""
        character = with_changes(
            fighter, level=8, variant_rules={"automatic_bonus_progression": True}
        )
        # 10 + 1 + 4 + (8 + 2) + ABP 3
        assert derive_armor_class(character) == 28

    def test_armor_customization(self, fighter):
        """Equipped armor customization adjusts the Dex cap and armor bonus."""
        armor = {
            "id": "armor-1",
            "name": "Breastplate",
            "equipmentId": "breastplate",
            "customization": {"kind": "armor", "dexCapOverride": 2, "bonusAC": 1},
        }
        character = with_changes(
            fighter,
            equipment=[*fighter.model_dump()["equipment"], armor],
            equipped_armor="armor-1",
        )
        assert derive_armor_class(character) == 25


class TestDefenses:
    """Tests for the situational breakdown."""

    def test_breakdown_matches_armor_class(self, fighter, catalog):
        """The breakdown's armor class equals derive_armor_class."""
        breakdown = derive_defenses(fighter, catalog)
        assert breakdown.armor_class == derive_armor_class(fighter)
        assert breakdown.dexterity == 1
        assert breakdown.dex_cap == 1
        assert breakdown.effective == 23

    def test_raised_shield(self, fighter, catalog):
        """A raised shield adds its circumstance bonus."""
        raised = with_changes(fighter, shield_state={"current_hp": 20, "raised": True})
        breakdown = derive_defenses(raised, catalog)
        assert breakdown.buffs.circumstance == 2
        assert breakdown.effective == 25

    def test_broken_shield_gives_nothing(self, fighter, catalog):
        """A broken shield can't be raised for AC."""
        broken = with_changes(fighter, shield_state={"current_hp": 10, "raised": True})
        assert derive_defenses(broken, catalog).effective == 23

    def test_conditions_and_buffs(self, fighter, catalog):
        """Condition penalties and AC buffs adjust the effective value."""
        character = with_changes(
            fighter,
            conditions=[{"id": "frightened", "value": 1}, {"id": "off-guard"}],
            buffs=[
                {"id": "b", "name": "Shield spell", "bonus": 1, "type": "circumstance", "selector": "ac"}
            ],
        )
        breakdown = derive_defenses(character, catalog)
        assert breakdown.condition_penalty == -3
        assert breakdown.effective == 23 + 1 - 3


class TestShields:
    """Tests for shield hardness and HP."""

    def test_plain_shield(self, fighter, catalog):
        """Catalog values with full HP by default."""
        shield = shield_stats(fighter, catalog)
        assert (shield.hardness, shield.max_hp, shield.current_hp) == (5, 20, 20)
        assert shield.broken_threshold == 10
        assert not shield.broken
        assert not shield.raised

    def test_reinforcing_rune(self, fighter, catalog):
        """Minor reinforcing: +3 hardness (max 8), +44 HP (max 64)."""
        equipment = fighter.model_dump()["equipment"]
        equipment[1]["runes"] = {"kind": "shield", "reinforcing_rune": 1}
        shield = shield_stats(with_changes(fighter, equipment=equipment), catalog)
        assert shield.hardness == 8
        assert shield.max_hp == 64
        assert shield.broken_threshold == 32

    def test_reinforcing_never_lowers(self):
        """Values already past a tier's ceiling stay put."""
        assert _reinforced(10, 3, 8) == 10
        assert _reinforced(3, 3, 8) == 6
        assert _reinforced(6, 3, 8) == 8

    def test_customization_overrides(self, fighter, catalog):
        """Customization overrides hardness and HP; current is clamped to max."""
        equipment = fighter.model_dump()["equipment"]
        equipment[1]["customization"] = {
            "kind": "shield",
            "hardness_override": 7,
            "max_hp_override": 30,
            "current_hp": 45,
        }
        shield = shield_stats(with_changes(fighter, equipment=equipment), catalog)
        assert (shield.hardness, shield.max_hp, shield.current_hp) == (7, 30, 30)

    def test_no_shield(self, bard, catalog):
        """No equipped shield means no stats."""
        assert shield_stats(bard, catalog) is None

    def test_catalog_broken_threshold(self, fighter):
        """The catalog threshold is used as-is and scales with max HP."""
        catalog = RuleCatalog(
            shields=[ShieldDef(id="steel-shield", name="Sturdy Shield", hardness=5, hp=20, broken_threshold=5)]
        )
        hurt = with_changes(fighter, shield_state={"current_hp": 8})
        shield = shield_stats(hurt, catalog)
        assert shield.broken_threshold == 5
        assert not shield.broken

        equipment = fighter.model_dump()["equipment"]
        equipment[1]["customization"] = {"kind": "shield", "max_hp_override": 40}
        shield = shield_stats(with_changes(fighter, equipment=equipment), catalog)
        assert shield.broken_threshold == 10

    def test_threshold_defaults_to_half(self, fighter):
        """Without a catalog threshold, half of max HP breaks the shield."""
        catalog = RuleCatalog(shields=[ShieldDef(id="steel-shield", name="Plain", hp=12)])
        assert shield_stats(fighter, catalog).broken_threshold == 6
