"""Tests for character records, item and pet variants, and migration."""

from pathsheet.game.character.base import with_changes
from pathsheet.game.character.items import (
    ArmorCustomization,
    EquippedItem,
    ShieldCustomization,
    ShieldRunes,
    WeaponRunes,
)
from pathsheet.game.character.pets import AnimalCompanion, Eidolon, Familiar
from pathsheet.game.character.record import Character, create_empty_character, migrate_character


class TestEmptyCharacter:
    """Tests for new blank characters."""

    def test_defaults(self):
        """Scores default to 10 and collections start empty."""
        character = create_empty_character("Ezren")
        assert character.name == "Ezren"
        assert character.level == 1
        assert character.ability_scores.strength == 10
        assert character.ability_scores.charisma == 10
        assert character.hit_points.current == 0
        assert character.armor_class.base == 10
        assert character.equipment == ()
        assert character.pets == ()
        assert not any(character.variant_rules.model_dump().values())

    def test_ids_are_unique(self):
        """Every new character gets its own id."""
        assert create_empty_character().id != create_empty_character().id


class TestImmutability:
    """Tests for copy-on-write updates."""

    def test_with_changes_leaves_original(self, fighter):
        """with_changes returns a new record and leaves the input untouched."""
        leveled = with_changes(fighter, level=6)
        assert leveled.level == 6
        assert fighter.level == 5

    def test_with_changes_validates_nested_dicts(self, fighter):
        """Nested dictionaries become records."""
        updated = with_changes(fighter, variant_rules={"free_archetype": True})
        assert updated.variant_rules.free_archetype is True

    def test_level_is_clamped(self):
        """Out-of-range levels are clamped on validation."""
        assert Character(level=0).level == 1
        assert Character(level=42).level == 20


class TestWireFormat:
    """Tests for the camelCase JSON shape."""

    def test_camel_case_keys(self, fighter):
        """Records serialize with camelCase keys."""
        wire = fighter.to_wire()
        assert "variantRules" in wire
        assert "abilityScores" in wire
        assert wire["abilityScores"]["str"] == 18
        assert wire["equipment"][0]["equipmentId"] == "longsword"

    def test_wire_round_trip(self, fighter):
        """A wire payload validates back into an equal record."""
        assert Character.model_validate(fighter.to_wire()) == fighter


class TestItemVariants:
    """Tests for tagged rune and customization payloads."""

    def test_weapon_runes_inferred(self):
        """Legacy rune payloads with a striking rune are weapon runes."""
        item = EquippedItem.model_validate(
            {"id": "a", "name": "Axe", "runes": {"potencyRune": 1, "strikingRune": "striking"}}
        )
        assert isinstance(item.runes, WeaponRunes)
        assert item.weapon_runes.striking_rune == "striking"

    def test_shield_runes_inferred(self):
        """A reinforcing rune marks shield runes."""
        item = EquippedItem.model_validate(
            {"id": "s", "name": "Shield", "runes": {"reinforcingRune": 2}}
        )
        assert isinstance(item.runes, ShieldRunes)
        assert item.weapon_runes is None

    def test_shield_weapon_runes(self):
        """Weapon runes etched on a shield boss are exposed as weapon runes."""
        item = EquippedItem.model_validate(
            {
                "id": "s",
                "name": "Spiked Shield",
                "runes": {"kind": "shield", "weaponRunes": {"potencyRune": 1}},
            }
        )
        assert item.weapon_runes is not None
        assert item.weapon_runes.potency_rune == 1

    def test_customizations_inferred(self):
        """Customization kind comes from its keys."""
        armor = EquippedItem.model_validate(
            {"id": "a", "name": "Plate", "customization": {"bonusAC": 1}}
        )
        shield = EquippedItem.model_validate(
            {"id": "s", "name": "Shield", "customization": {"maxHPOverride": 30}}
        )
        assert isinstance(armor.customization, ArmorCustomization)
        assert armor.customization.bonus_ac == 1
        assert isinstance(shield.customization, ShieldCustomization)
        assert shield.customization.max_hp_override == 30

    def test_coins_inferred_from_name(self):
        """Items named like coins are treated as coins unless flagged otherwise."""
        coins = EquippedItem.model_validate({"id": "c", "name": "Gold Coins", "quantity": 300})
        moneta = EquippedItem.model_validate({"id": "m", "name": "Moneta d'oro"})
        flagged = EquippedItem.model_validate({"id": "f", "name": "Coin purse", "isCoins": False})
        assert coins.is_coins
        assert moneta.is_coins
        assert flagged.is_coins is False

    def test_two_handed(self):
        """Wielding with two hands marks the item two-handed."""
        item = EquippedItem(id="x", name="Bastard Sword", wielded={"hands": 2})
        assert item.is_two_handed


class TestPetVariants:
    """Tests for the pet union and legacy pet payloads."""

    def test_discriminated_on_type(self):
        """The type tag selects the pet class."""
        character = Character.model_validate(
            {
                "pets": [
                    {"type": "familiar", "id": "f", "name": "Hoot"},
                    {"type": "animal-companion", "id": "w", "name": "Fang", "companionType": "wolf"},
                    {"type": "eidolon", "id": "e", "name": "Seraph", "eidolonType": "angel"},
                ]
            }
        )
        assert [type(pet) for pet in character.pets] == [Familiar, AnimalCompanion, Eidolon]

    def test_legacy_data_payload_flattened(self):
        """Older pets kept their fields under ``data``."""
        character = Character.model_validate(
            {
                "pets": [
                    {
                        "type": "eidolon",
                        "id": "e",
                        "name": "Seraph",
                        "data": {"type": "angel", "sharesHP": True},
                    },
                    {
                        "type": "animal-companion",
                        "id": "w",
                        "name": "Fang",
                        "data": {"companionType": "wolf", "stage": "mature"},
                    },
                ]
            }
        )
        eidolon, companion = character.pets
        assert eidolon.eidolon_type == "angel"
        assert eidolon.shares_hp is True
        assert companion.companion_type == "wolf"
        assert companion.stage == "mature"


class TestMigration:
    """Tests for upgrading stored payloads."""

    def test_fills_variant_rules(self):
        """Missing variant-rule flags default to off; present ones survive."""
        character = migrate_character({"variantRules": {"freeArchetype": True}})
        assert character.variant_rules.free_archetype is True
        assert character.variant_rules.dual_class is False
        assert character.variant_rules.proficiency_without_level is False

    def test_missing_variant_rules_block(self):
        """Records from before variant rules get the standard set."""
        character = migrate_character({"name": "Old"})
        assert not any(character.variant_rules.model_dump().values())

    def test_retired_class_ids(self):
        """Retired class ids map to their current id."""
        character = migrate_character({"classId": "IiG7DgeLWYrSNXuX"})
        assert character.class_id == "kineticist"

    def test_slot_type_from_source(self):
        """Feats without a slot type take it from their source."""
        character = migrate_character(
            {
                "feats": [
                    {"featId": "toughness", "level": 3, "source": "general"},
                    {"featId": "power-attack", "level": 1, "source": "class", "slotType": "archetype"},
                ]
            }
        )
        assert character.feats[0].slot_type == "general"
        assert character.feats[1].slot_type == "archetype"

    def test_level_clamped(self):
        """Stored levels outside 1-20 are clamped."""
        assert migrate_character({"level": 23}).level == 20
        assert migrate_character({"level": -1}).level == 1

    def test_coin_counts_preserved(self):
        """Coin quantities survive migration."""
        character = migrate_character(
            {"equipment": [{"id": "c", "name": "Silver coins", "quantity": 250}]}
        )
        assert character.equipment[0].quantity == 250
        assert character.equipment[0].is_coins

    def test_migration_is_stable(self, fighter):
        """Migrating a current record changes nothing."""
        assert migrate_character(fighter.to_wire()) == fighter
