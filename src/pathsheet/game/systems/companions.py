"""
Familiar, animal companion, and eidolon statistics.

Pets store only what the player chose. Everything numeric is recomputed
from the master's level and Constitution, so a pet keeps up as the master
levels without any stored stat going stale.
"""

from dataclasses import dataclass, field

import structlog

from pathsheet.game.character.attributes import (
    AbilityName,
    Proficiency,
    ability_modifier,
    proficiency_bonus,
)
from pathsheet.game.character.pets import AnimalCompanion, Eidolon, Familiar, Pet
from pathsheet.game.character.record import Character
from pathsheet.game.rules.registry import RuleCatalog
from pathsheet.game.rules.tables import (
    AnimalCompanionTemplate,
    CompanionSaves,
    CompanionStage,
    EidolonTemplate,
    TemplateAttack,
)

from .defense import derive_armor_class
from .offense import upgrade_damage_dice
from .statistics import derive_saves

logger = structlog.get_logger(__name__)

FAMILIAR_HP_PER_LEVEL = 5
COMPANION_HP_PER_LEVEL = 8
PET_PERCEPTION_BASE = 5

# Companion save proficiencies: Fortitude and Reflex expert, Will trained
_COMPANION_SAVE_RANKS = {
    "fortitude": Proficiency.EXPERT,
    "reflex": Proficiency.EXPERT,
    "will": Proficiency.TRAINED,
}


@dataclass(frozen=True)
class PetStrike:
    name: str
    attack_bonus: int
    damage: str
    damage_type: str
    traits: tuple[str, ...] = ()


@dataclass(frozen=True)
class FamiliarStats:
    level: int
    max_hp: int
    armor_class: int
    fortitude: int
    reflex: int
    will: int
    perception: int
    stealth: int
    ability_count: int
    abilities: tuple[str, ...] = ()
    kind: str = "familiar"


@dataclass(frozen=True)
class CompanionStats:
    level: int
    max_hp: int | None
    current_hp: int | None
    armor_class: int
    fortitude: int
    reflex: int
    will: int
    perception: int
    speed: dict[str, int] = field(default_factory=dict)
    strikes: tuple[PetStrike, ...] = ()
    size: str = "medium"
    evolution_points: int | None = None
    shares_hp: bool = False
    kind: str = "animal-companion"


def _spellcasting_modifier(master: Character) -> int:
    ability = master.spellcasting.key_ability if master.spellcasting else AbilityName.CHA
    return ability_modifier(master.ability_scores.get(ability))


def _companion_hp(starting_hp: int, level: int, con_mod: int, stage: CompanionStage) -> int:
    return starting_hp + level * COMPANION_HP_PER_LEVEL + con_mod + stage.hp


def _stored_current(pet: AnimalCompanion | Eidolon, maximum: int) -> int:
    if pet.hit_points is None or pet.hit_points.current <= 0:
        return maximum
    return min(pet.hit_points.current, maximum)


def _strikes(
    attacks: list[TemplateAttack], level: int, stage: CompanionStage
) -> tuple[PetStrike, ...]:
    return tuple(
        PetStrike(
            name=attack.name,
            attack_bonus=attack.attack_bonus + level + stage.attack,
            damage=upgrade_damage_dice(attack.damage, stage.damage_steps),
            damage_type=attack.damage_type,
            traits=tuple(attack.traits),
        )
        for attack in attacks
    )


def _saves(saves: CompanionSaves, level: int, master: Character) -> dict[str, int]:
    without_level = master.variant_rules.proficiency_without_level
    return {
        name: getattr(saves, name) + proficiency_bonus(level, rank, without_level)
        for name, rank in _COMPANION_SAVE_RANKS.items()
    }


def familiar_stats(familiar: Familiar, master: Character) -> FamiliarStats:
    """
    A familiar uses its master's level, AC, and saves.

    Perception and Stealth are the master's level plus spellcasting ability
    modifier; HP is 5 per master level and is never tracked separately.
    """
    saves = derive_saves(master)
    check = master.level + _spellcasting_modifier(master)
    return FamiliarStats(
        level=master.level,
        max_hp=FAMILIAR_HP_PER_LEVEL * master.level,
        armor_class=derive_armor_class(master),
        fortitude=saves["fortitude"].base,
        reflex=saves["reflex"].base,
        will=saves["will"].base,
        perception=check,
        stealth=check,
        ability_count=familiar.master_abilities_count,
        abilities=familiar.selected_abilities,
    )


def animal_companion_stats(
    companion: AnimalCompanion, master: Character, catalog: RuleCatalog
) -> CompanionStats:
    """Animal companion one level below its master (minimum 1), scaled by stage."""
    template = catalog.animal_companion(companion.companion_type)
    if template is None:
        logger.warning("companion_template_not_found", companion_type=companion.companion_type)
        template = AnimalCompanionTemplate(id=companion.companion_type, name=companion.name)

    level = max(1, master.level - 1)
    stage = catalog.companion_stage(companion.stage)
    con_mod = ability_modifier(master.ability_scores.constitution)
    maximum = _companion_hp(template.starting_hp, level, con_mod, stage)
    saves = _saves(template.saves, level, master)

    return CompanionStats(
        level=level,
        max_hp=maximum,
        current_hp=_stored_current(companion, maximum),
        armor_class=template.base_ac + level // 4 + stage.ac,
        fortitude=saves["fortitude"],
        reflex=saves["reflex"],
        will=saves["will"],
        perception=PET_PERCEPTION_BASE + level,
        speed=dict(template.speed),
        strikes=_strikes(template.attacks, level, stage),
        size=template.size,
    )


def eidolon_stats(eidolon: Eidolon, master: Character, catalog: RuleCatalog) -> CompanionStats:
    """
    Eidolon at its summoner's level.

    With ``shares_hp`` the eidolon has no HP of its own; ``max_hp`` and
    ``current_hp`` are None and the summoner's pool is used instead.
    """
    template = catalog.eidolon(eidolon.eidolon_type)
    if template is None:
        logger.warning("eidolon_template_not_found", eidolon_type=eidolon.eidolon_type)
        template = EidolonTemplate(id=eidolon.eidolon_type, name=eidolon.name)

    level = master.level
    stage = catalog.companion_stage("young")
    con_mod = ability_modifier(master.ability_scores.constitution)
    saves = _saves(CompanionSaves(), level, master)

    maximum: int | None = None
    current: int | None = None
    if not eidolon.shares_hp:
        maximum = _companion_hp(template.starting_hp, level, con_mod, stage)
        current = _stored_current(eidolon, maximum)

    return CompanionStats(
        level=level,
        max_hp=maximum,
        current_hp=current,
        armor_class=template.base_ac + level // 4,
        fortitude=saves["fortitude"],
        reflex=saves["reflex"],
        will=saves["will"],
        perception=PET_PERCEPTION_BASE + level,
        speed=dict(template.speed),
        strikes=_strikes(template.attacks, level, stage),
        size=template.size,
        evolution_points=template.evolution_points + level // 2,
        shares_hp=eidolon.shares_hp,
        kind="eidolon",
    )


def derive_companion_stats(
    pet: Pet, master: Character, catalog: RuleCatalog
) -> FamiliarStats | CompanionStats:
    """Stat block for any pet, dispatched on its variant."""
    if isinstance(pet, Familiar):
        return familiar_stats(pet, master)
    if isinstance(pet, AnimalCompanion):
        return animal_companion_stats(pet, master, catalog)
    if isinstance(pet, Eidolon):
        return eidolon_stats(pet, master, catalog)
    raise TypeError(f"Unknown pet variant: {type(pet).__name__}")
