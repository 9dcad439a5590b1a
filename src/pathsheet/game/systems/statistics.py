"""Ability scores, saves, perception, skills, and spellcasting numbers."""

from dataclasses import dataclass

import structlog

from pathsheet.game.character.attributes import (
    ABILITY_FIELDS,
    AbilityModifiers,
    AbilityName,
    Proficiency,
    ability_modifier,
    apply_ability_boost,
    proficiency_bonus,
)
from pathsheet.game.character.base import with_changes
from pathsheet.game.character.leveling import has_ability_boost_at_level
from pathsheet.game.character.record import AbilityScores, Character
from pathsheet.game.rules.registry import RuleCatalog

from .modifiers import ModifierTotal, condition_penalties, stack_buffs

logger = structlog.get_logger(__name__)

SAVE_ABILITIES = {
    "fortitude": AbilityName.CON,
    "reflex": AbilityName.DEX,
    "will": AbilityName.WIS,
}

SPELL_DC_BASE = 10


@dataclass(frozen=True)
class Statistic:
    """A check modifier before and after situational adjustments."""

    ability: int
    proficiency: int
    buffs: ModifierTotal
    condition_penalty: int

    @property
    def base(self) -> int:
        return self.ability + self.proficiency

    @property
    def total(self) -> int:
        return self.base + self.buffs.total + self.condition_penalty


def ability_modifiers(scores: AbilityScores) -> AbilityModifiers:
    return AbilityModifiers(
        **{field: ability_modifier(getattr(scores, field)) for field in ABILITY_FIELDS.values()}
    )


def recalculate_ability_scores(character: Character, catalog: RuleCatalog) -> Character:
    """
    Rebuild ability scores from 10 using every recorded boost and flaw.

    Order: ancestry flaws, fixed ancestry boosts, chosen ancestry boosts,
    background, class, free boosts, then level-up boosts for levels the
    character has reached and the leveling schedule actually grants.
    """
    scores = {ability: 10 for ability in AbilityName}
    boosts = character.ability_boosts

    ancestry = catalog.ancestry(character.ancestry_id)
    if ancestry is not None:
        for flaw in ancestry.flaws:
            scores[AbilityName(flaw)] -= 2
        for boost in ancestry.boosts:
            if boost != "free":
                scores[AbilityName(boost)] = apply_ability_boost(scores[AbilityName(boost)])
    elif character.ancestry_id:
        logger.warning("ancestry_not_found", ancestry_id=character.ancestry_id)

    for flaw in boosts.ancestry_flaws:
        scores[flaw] -= 2

    chosen = [*boosts.ancestry, *boosts.background]
    if catalog.class_def(character.class_id) is not None:
        chosen.append(boosts.class_boost)
    chosen.extend(boosts.free)

    gradual = character.variant_rules.gradual_ability_boosts
    for level in sorted(boosts.level_up):
        if level > character.level:
            continue
        if not has_ability_boost_at_level(level, gradual):
            logger.debug("level_up_boost_ignored", character_id=character.id, level=level)
            continue
        chosen.extend(boosts.level_up[level])

    for ability in chosen:
        scores[ability] = apply_ability_boost(scores[ability])

    return with_changes(
        character,
        ability_scores=AbilityScores(
            **{ABILITY_FIELDS[ability]: value for ability, value in scores.items()}
        ),
    )


def _statistic(
    character: Character,
    ability: str,
    rank: Proficiency,
    selector: str,
    penalty: int,
) -> Statistic:
    return Statistic(
        ability=ability_modifier(character.ability_scores.get(ability)),
        proficiency=proficiency_bonus(
            character.level, rank, character.variant_rules.proficiency_without_level
        ),
        buffs=stack_buffs(character.buffs, selector),
        condition_penalty=penalty,
    )


def derive_saves(character: Character, catalog: RuleCatalog | None = None) -> dict[str, Statistic]:
    """Fortitude, Reflex and Will."""
    penalties = condition_penalties(character.conditions, catalog)
    return {
        save: _statistic(
            character,
            ability,
            getattr(character.saves, save),
            save,
            penalties.save(ability),
        )
        for save, ability in SAVE_ABILITIES.items()
    }


def derive_perception(character: Character, catalog: RuleCatalog | None = None) -> Statistic:
    penalties = condition_penalties(character.conditions, catalog)
    return _statistic(
        character,
        AbilityName.WIS,
        character.perception,
        "perception",
        penalties.perception_check(),
    )


def derive_skills(character: Character, catalog: RuleCatalog | None = None) -> dict[str, Statistic]:
    """Skill modifiers keyed by skill name; buffs target ``skill-<name>`` selectors."""
    penalties = condition_penalties(character.conditions, catalog)
    return {
        skill.name: _statistic(
            character,
            skill.ability,
            skill.proficiency,
            f"skill-{skill.name.lower()}",
            penalties.skill(skill.ability),
        )
        for skill in character.skills
    }


@dataclass(frozen=True)
class SpellStats:
    attack: Statistic
    dc: int


def derive_spellcasting(
    character: Character, catalog: RuleCatalog | None = None
) -> SpellStats | None:
    """Spell attack modifier and spell DC, or None for non-casters."""
    spellcasting = character.spellcasting
    if spellcasting is None:
        return None
    penalties = condition_penalties(character.conditions, catalog)
    attack = _statistic(
        character,
        spellcasting.key_ability,
        spellcasting.proficiency,
        "spell-attack",
        penalties.attack_roll(),
    )
    dc_buffs = stack_buffs(character.buffs, "spell-dc")
    return SpellStats(attack=attack, dc=SPELL_DC_BASE + attack.base + dc_buffs.total)
