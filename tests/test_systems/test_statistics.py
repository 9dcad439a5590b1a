"""Tests for ability score recalculation, saves, skills, and spellcasting."""

from pathsheet.game.character.base import with_changes
from pathsheet.game.character.record import Character
from pathsheet.game.systems.statistics import (
    ability_modifiers,
    derive_perception,
    derive_saves,
    derive_skills,
    derive_spellcasting,
    recalculate_ability_scores,
)


def elf_wizard(level=1, level_up=None, gradual=False):
    return Character.model_validate(
        {
            "ancestryId": "elf",
            "classId": "wizard",
            "level": level,
            "abilityBoosts": {
                "ancestry": ["str"],
                "background": ["str", "dex"],
                "class": "str",
                "free": ["str", "con", "wis", "cha"],
                "levelUp": level_up or {},
            },
            "variantRules": {"gradualAbilityBoosts": gradual},
        }
    )


class TestRecalculateAbilityScores:
    """Scores are rebuilt from 10 using every recorded boost and flaw."""

    def test_creation_boosts(self, catalog):
        """Ancestry fixed boosts and flaws, then chosen boosts."""
        scores = recalculate_ability_scores(elf_wizard(), catalog).ability_scores
        assert (scores.strength, scores.dexterity, scores.constitution) == (18, 14, 10)
        assert (scores.intelligence, scores.wisdom, scores.charisma) == (12, 12, 12)

    def test_level_up_boosts(self, catalog):
        """Boosts at or above 18 add only 1."""
        character = elf_wizard(level=5, level_up={5: ["str", "dex", "con", "wis"]})
        scores = recalculate_ability_scores(character, catalog).ability_scores
        assert scores.strength == 19
        assert scores.dexterity == 16
        assert scores.constitution == 12
        assert scores.wisdom == 14

    def test_future_level_boosts_ignored(self, catalog):
        """Boosts recorded for levels not yet reached don't apply."""
        character = elf_wizard(level=4, level_up={5: ["str", "dex", "con", "wis"]})
        assert recalculate_ability_scores(character, catalog).ability_scores.dexterity == 14

    def test_off_schedule_level_ignored(self, catalog):
        """A level-3 boost only counts with gradual boosts."""
        standard = elf_wizard(level=3, level_up={3: ["dex"]})
        gradual = elf_wizard(level=3, level_up={3: ["dex"]}, gradual=True)
        assert recalculate_ability_scores(standard, catalog).ability_scores.dexterity == 14
        assert recalculate_ability_scores(gradual, catalog).ability_scores.dexterity == 16

    def test_input_unchanged(self, catalog):
        """Recalculation returns a new character."""
        character = elf_wizard()
        recalculate_ability_scores(character, catalog)
        assert character.ability_scores.strength == 10

    def test_modifiers(self, fighter):
        """Modifiers follow (score - 10) // 2."""
        mods = ability_modifiers(fighter.ability_scores)
        assert (mods.strength, mods.dexterity, mods.wisdom, mods.charisma) == (4, 2, 1, 0)


class TestSaves:
    """ability + proficiency for each save."""

    def test_fighter(self, fighter):
        """Expert Fortitude and Reflex, trained Will at level 5."""
        saves = derive_saves(fighter)
        assert saves["fortitude"].total == 11
        assert saves["reflex"].total == 11
        assert saves["will"].total == 8

    def test_buffs_and_conditions(self, fighter, catalog):
        """All-save buffs and frightened apply to every save; clumsy only to Reflex."""
        character = with_changes(
            fighter,
            buffs=[{"id": "h", "name": "Heroism", "bonus": 1, "type": "status", "selector": "all-saves"}],
            conditions=[{"id": "frightened", "value": 1}, {"id": "clumsy", "value": 2}],
        )
        saves = derive_saves(character, catalog)
        assert saves["fortitude"].total == 11
        assert saves["reflex"].total == 9
        assert saves["will"].base == 8

    def test_perception(self, fighter, catalog):
        """Expert Perception with Wisdom 12; blinded is -4."""
        assert derive_perception(fighter).total == 10
        blinded = with_changes(fighter, conditions=[{"id": "blinded"}])
        assert derive_perception(blinded, catalog).total == 6


class TestSkills:
    """Tests for skill modifiers."""

    def test_fighter_skills(self, fighter):
        """Untrained adds nothing, not even level."""
        skills = derive_skills(fighter)
        assert skills["Athletics"].total == 13
        assert skills["Intimidation"].total == 7
        assert skills["Stealth"].total == 2

    def test_skill_buffs_by_name(self, fighter):
        """Buffs select skills by lowercased name."""
        character = with_changes(
            fighter,
            buffs=[{"id": "g", "name": "Guidance", "bonus": 1, "type": "status", "selector": "skill-athletics"}],
        )
        skills = derive_skills(character)
        assert skills["Athletics"].total == 14
        assert skills["Stealth"].total == 2

    def test_ability_based_condition(self, fighter, catalog):
        """Enfeebled hits Strength skills only."""
        character = with_changes(fighter, conditions=[{"id": "enfeebled", "value": 2}])
        skills = derive_skills(character, catalog)
        assert skills["Athletics"].total == 11
        assert skills["Intimidation"].total == 7


class TestSpellcasting:
    """Tests for spell attack and DC."""

    def test_bard(self, bard):
        """Charisma 18, trained at level 3: +9 and DC 19."""
        stats = derive_spellcasting(bard)
        assert stats.attack.total == 9
        assert stats.dc == 19

    def test_dc_buffs(self, bard):
        """spell-dc buffs raise only the DC."""
        character = with_changes(
            bard,
            buffs=[{"id": "d", "name": "Aura", "bonus": 1, "type": "status", "selector": "spell-dc"}],
        )
        stats = derive_spellcasting(character)
        assert stats.attack.total == 9
        assert stats.dc == 20

    def test_non_caster(self, fighter):
        """No spellcasting block means no spell stats."""
        assert derive_spellcasting(fighter) is None
