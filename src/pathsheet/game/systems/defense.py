"""Armor Class and shield statistics."""

from dataclasses import dataclass

import structlog

from pathsheet.game.character.attributes import ability_modifier, proficiency_bonus
from pathsheet.game.character.items import (
    ArmorCustomization,
    EquippedItem,
    ShieldCustomization,
    ShieldRunes,
)
from pathsheet.game.character.record import Buff, Character
from pathsheet.game.character.variants import armor_item_bonus
from pathsheet.game.rules.registry import RuleCatalog
from pathsheet.game.rules.tables import ShieldDef

from .modifiers import ModifierTotal, condition_penalties, stack_buffs

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DefenseBreakdown:
    """Every term of the Armor Class plus situational adjustments."""

    base: int
    dexterity: int
    dex_cap: int | None
    armor_bonus: int
    proficiency: int
    item_bonus: int
    armor_class: int
    buffs: ModifierTotal
    condition_penalty: int

    @property
    def effective(self) -> int:
        return self.armor_class + self.buffs.total + self.condition_penalty


@dataclass(frozen=True)
class ShieldStats:
    name: str
    ac_bonus: int
    hardness: int
    max_hp: int
    current_hp: int
    broken_threshold: int
    broken: bool
    raised: bool


def _equipped(character: Character, item_id: str | None) -> EquippedItem | None:
    if not item_id:
        return None
    for item in character.equipment:
        if item.id == item_id:
            return item
    return None


def _armor_customization(character: Character) -> ArmorCustomization | None:
    armor = _equipped(character, character.equipped_armor)
    if armor is not None and isinstance(armor.customization, ArmorCustomization):
        return armor.customization
    return None


def _defense_terms(character: Character) -> tuple[int, int | None, int, int, int]:
    config = character.armor_class
    rules = character.variant_rules
    custom = _armor_customization(character)

    dex_cap = config.dex_cap
    armor_bonus = config.ac_bonus or 0
    if custom is not None:
        if custom.dex_cap_override is not None:
            dex_cap = custom.dex_cap_override
        armor_bonus += custom.bonus_ac

    dexterity = ability_modifier(character.ability_scores.dexterity)
    if dex_cap is not None:
        dexterity = min(dexterity, dex_cap)

    proficiency = proficiency_bonus(
        character.level, config.proficiency, rules.proficiency_without_level
    )
    item_bonus = armor_item_bonus(rules, character.level, config.item_bonus)
    return dexterity, dex_cap, armor_bonus, proficiency, item_bonus


def derive_armor_class(character: Character) -> int:
    """
    Armor Class: base + Dex (capped) + armor bonus + proficiency + item bonus.

    The item bonus comes from Automatic Bonus Progression when that variant
    is on, otherwise from the stored equipment bonus. Never both.
    """
    dexterity, _, armor_bonus, proficiency, item_bonus = _defense_terms(character)
    return character.armor_class.base + dexterity + armor_bonus + proficiency + item_bonus


def derive_defenses(
    character: Character, catalog: RuleCatalog | None = None
) -> DefenseBreakdown:
    """Armor Class breakdown, adjusted for buffs, a raised shield, and conditions."""
    dexterity, dex_cap, armor_bonus, proficiency, item_bonus = _defense_terms(character)
    base = character.armor_class.base

    buffs = list(character.buffs)
    shield = shield_stats(character, catalog)
    if shield is not None and shield.raised and not shield.broken:
        buffs.append(
            Buff(
                id="raised-shield",
                name=shield.name,
                bonus=shield.ac_bonus,
                type="circumstance",
                selector="ac",
            )
        )

    penalties = condition_penalties(character.conditions, catalog)
    return DefenseBreakdown(
        base=base,
        dexterity=dexterity,
        dex_cap=dex_cap,
        armor_bonus=armor_bonus,
        proficiency=proficiency,
        item_bonus=item_bonus,
        armor_class=base + dexterity + armor_bonus + proficiency + item_bonus,
        buffs=stack_buffs(buffs, "ac"),
        condition_penalty=penalties.armor_class(),
    )


def _reinforced(base: int, increase: int, ceiling: int) -> int:
    # reinforcing never lowers a value already above its ceiling
    return max(base, min(base + increase, ceiling))


def _broken_threshold(shield: ShieldDef, max_hp: int) -> int:
    """Catalog threshold (half HP when unset), scaled when max HP changes."""
    threshold = shield.broken_threshold or shield.hp // 2
    if shield.hp > 0 and max_hp != shield.hp:
        return threshold * max_hp // shield.hp
    return threshold


def shield_stats(character: Character, catalog: RuleCatalog | None) -> ShieldStats | None:
    """
    Hardness and HP of the equipped shield, including reinforcing runes.

    Returns None when no shield is equipped or its catalog entry is unknown.
    """
    item = _equipped(character, character.equipped_shield)
    if item is None or catalog is None:
        return None
    shield = catalog.shield(item.equipment_id)
    if shield is None:
        logger.warning("shield_not_found", equipment_id=item.equipment_id, item_id=item.id)
        return None

    hardness = shield.hardness
    max_hp = shield.hp
    if isinstance(item.runes, ShieldRunes) and item.runes.reinforcing_rune:
        tier = catalog.reinforcing_rune(item.runes.reinforcing_rune)
        if tier is not None:
            hardness = _reinforced(hardness, tier.hardness_increase, tier.max_hardness)
            max_hp = _reinforced(max_hp, tier.hp_increase, tier.max_hp)

    custom = item.customization if isinstance(item.customization, ShieldCustomization) else None
    broken_flag = False
    current_hp: int | None = None
    if custom is not None:
        if custom.hardness_override is not None:
            hardness = custom.hardness_override
        if custom.max_hp_override is not None:
            max_hp = custom.max_hp_override
        current_hp = custom.current_hp
        broken_flag = custom.broken

    state = character.shield_state
    if state is not None:
        current_hp = state.current_hp
    if current_hp is None:
        current_hp = max_hp
    current_hp = max(0, min(current_hp, max_hp))

    broken_threshold = _broken_threshold(shield, max_hp)
    return ShieldStats(
        name=(custom.custom_name if custom and custom.custom_name else item.name),
        ac_bonus=shield.ac_bonus,
        hardness=hardness,
        max_hp=max_hp,
        current_hp=current_hp,
        broken_threshold=broken_threshold,
        broken=broken_flag or current_hp <= broken_threshold,
        raised=state.raised if state is not None else False,
    )
