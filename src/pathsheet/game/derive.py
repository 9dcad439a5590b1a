"""
Public derivation entry points.

Every function here is pure: it reads a character record and the rule
catalog and returns a fresh value. ``derive_snapshot`` runs all of them
for one character.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from pathsheet.game.character.items import EquippedItem
from pathsheet.game.character.leveling import FeatSlot, all_feat_slots_up_to_level
from pathsheet.game.character.record import Character, HitPoints
from pathsheet.game.character.variants import STANDARD_RULES, VariantRules
from pathsheet.game.rules.registry import RuleCatalog
from pathsheet.game.rules.tables import WeaponDef
from pathsheet.game.systems import bulk, companions, defense, focus, hit_points, offense
from pathsheet.game.systems.bulk import BulkResult
from pathsheet.game.systems.companions import CompanionStats, FamiliarStats
from pathsheet.game.systems.defense import DefenseBreakdown, ShieldStats
from pathsheet.game.systems.offense import WeaponStats
from pathsheet.game.systems.statistics import (
    SpellStats,
    Statistic,
    derive_perception,
    derive_saves,
    derive_skills,
    derive_spellcasting,
)

logger = structlog.get_logger(__name__)


def derive_hit_points(character: Character, catalog: RuleCatalog) -> HitPoints:
    return hit_points.derive_hit_points(character, catalog)


def derive_armor_class(character: Character) -> int:
    return defense.derive_armor_class(character)


def derive_weapon_stats(
    character: Character,
    weapon: WeaponDef,
    equipped_item: EquippedItem | None = None,
    two_handed: bool | None = None,
    catalog: RuleCatalog | None = None,
) -> WeaponStats:
    return offense.derive_weapon_stats(character, weapon, equipped_item, two_handed, catalog)


def derive_bulk(
    character: Character, inventory: Sequence[EquippedItem] | None = None
) -> BulkResult:
    return bulk.derive_bulk(character, inventory)


def derive_focus_points(character: Character, catalog: RuleCatalog | None = None) -> int:
    return focus.max_focus_points(character, catalog)


def derive_feat_slots(level: int, rules: VariantRules = STANDARD_RULES) -> list[FeatSlot]:
    return all_feat_slots_up_to_level(level, rules)


def derive_companion_stats(
    pet: companions.Pet, master: Character, catalog: RuleCatalog
) -> FamiliarStats | CompanionStats:
    return companions.derive_companion_stats(pet, master, catalog)


@dataclass(frozen=True)
class WeaponLine:
    item_id: str
    name: str
    stats: WeaponStats


@dataclass(frozen=True)
class Snapshot:
    """Every derived number for one character."""

    character: Character
    hit_points: HitPoints
    armor_class: int
    defenses: DefenseBreakdown
    shield: ShieldStats | None
    saves: dict[str, Statistic]
    perception: Statistic
    skills: dict[str, Statistic]
    spellcasting: SpellStats | None
    focus_points: int
    bulk: BulkResult
    feat_slots: list[FeatSlot]
    weapons: list[WeaponLine] = field(default_factory=list)
    pets: list[FamiliarStats | CompanionStats] = field(default_factory=list)


def weapon_lines(character: Character, catalog: RuleCatalog) -> list[WeaponLine]:
    """Stats for every wielded item that resolves to a catalog weapon."""
    lines = []
    for item in character.equipment:
        if item.wielded is None:
            continue
        weapon = catalog.weapon(item.equipment_id)
        if weapon is None:
            continue
        custom = item.weapon_customization
        name = custom.custom_name if custom and custom.custom_name else item.name
        lines.append(
            WeaponLine(
                item_id=item.id,
                name=name,
                stats=offense.derive_weapon_stats(character, weapon, item, catalog=catalog),
            )
        )
    return lines


def derive_snapshot(character: Character, catalog: RuleCatalog) -> Snapshot:
    """Run every derivation for ``character``; the HP pool is repaired first."""
    repaired = hit_points.derive_hit_points(character, catalog)
    character = character.model_copy(update={"hit_points": repaired})

    snapshot = Snapshot(
        character=character,
        hit_points=repaired,
        armor_class=defense.derive_armor_class(character),
        defenses=defense.derive_defenses(character, catalog),
        shield=defense.shield_stats(character, catalog),
        saves=derive_saves(character, catalog),
        perception=derive_perception(character, catalog),
        skills=derive_skills(character, catalog),
        spellcasting=derive_spellcasting(character, catalog),
        focus_points=focus.max_focus_points(character, catalog),
        bulk=bulk.derive_bulk(character),
        feat_slots=all_feat_slots_up_to_level(character.level, character.variant_rules),
        weapons=weapon_lines(character, catalog),
        pets=[companions.derive_companion_stats(pet, character, catalog) for pet in character.pets],
    )
    logger.debug("snapshot_derived", character_id=character.id, level=character.level)
    return snapshot
