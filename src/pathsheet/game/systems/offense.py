"""
Weapon attack bonus, Multiple Attack Penalty, and damage breakdown.

The damage breakdown is structured: every component carries its dice and
flat modifier, so the per-type formula is assembled from numbers rather than
re-parsed from display strings.
"""

import re
from dataclasses import dataclass, field
from typing import Literal

import structlog

from pathsheet.game.character.attributes import (
    ProficiencyRank,
    ability_modifier,
    best_rank,
    proficiency_bonus,
)
from pathsheet.game.character.items import EquippedItem, WeaponCustomization, WeaponRunes
from pathsheet.game.character.record import Character
from pathsheet.game.character.variants import weapon_item_bonus, weapon_striking_dice
from pathsheet.game.rules.registry import RuleCatalog
from pathsheet.game.rules.tables import PropertyRuneDef, WeaponDef

from .modifiers import ModifierTotal, condition_penalties, stack_buffs

logger = structlog.get_logger(__name__)

ComponentKind = Literal[
    "base", "rune-striking", "rune-property", "ability", "bonus", "buff", "conditional"
]

STRIKING_DICE = {"striking": 1, "greaterStriking": 2, "majorStriking": 3}
STRIKING_NAMES = {1: "Striking", 2: "Greater Striking", 3: "Major Striking"}

# Damage that only applies against creatures of an opposed alignment or sanctification
CONDITIONAL_DAMAGE_TYPES = frozenset(
    {"holy", "unholy", "chaotic", "lawful", "good", "evil", "axiomatic", "anarchic"}
)
CONDITION_LABELS = {
    "holy": "vs unholy",
    "unholy": "vs holy",
    "chaotic": "vs lawful",
    "lawful": "vs chaotic",
    "good": "vs evil",
    "evil": "vs good",
    "axiomatic": "vs chaotic",
    "anarchic": "vs lawful",
}

ABILITY_LABELS = {
    "str": "Strength",
    "dex": "Dexterity",
    "con": "Constitution",
    "int": "Intelligence",
    "wis": "Wisdom",
    "cha": "Charisma",
}

_BASE_DICE = re.compile(r"^(\d+)d(\d+)$")
_FORMULA = re.compile(r"^(\d+)d(\d+)([+-]\d+)?$")

# Companion damage upgrade ladders, one step per entry
_DICE_UPGRADES = {
    "1d4": ("1d4", "1d6", "1d8", "2d6", "2d8"),
    "1d6": ("1d6", "1d8", "2d6", "2d8", "3d6"),
    "1d8": ("1d8", "2d6", "2d8", "3d6", "3d8"),
    "1d10": ("1d10", "2d6", "2d8", "3d6", "3d8"),
    "1d12": ("1d12", "2d8", "3d8", "4d8", "4d10"),
    "2d4": ("2d4", "2d6", "2d8", "3d6", "3d8"),
    "2d6": ("2d6", "2d8", "3d6", "3d8", "4d8"),
    "2d8": ("2d8", "3d6", "3d8", "4d8", "4d10"),
}


@dataclass(frozen=True)
class DiceFormula:
    count: int
    size: int
    modifier: int = 0


def parse_damage_formula(formula: str) -> DiceFormula | None:
    """Parse "2d6+3" style formulas; None when the text doesn't match."""
    match = _FORMULA.match(formula.replace(" ", ""))
    if not match:
        return None
    return DiceFormula(
        count=int(match.group(1)),
        size=int(match.group(2)),
        modifier=int(match.group(3)) if match.group(3) else 0,
    )


def upgrade_damage_dice(damage: str, steps: int) -> str:
    """
    Step a damage formula up its upgrade ladder (1d6 -> 1d8 -> 2d6 ...).

    A flat modifier is carried over. Formulas off the ladder come back as-is.
    """
    parsed = parse_damage_formula(damage)
    if parsed is None or steps <= 0:
        return damage
    ladder = _DICE_UPGRADES.get(f"{parsed.count}d{parsed.size}")
    if ladder is None:
        return damage
    dice = ladder[min(steps, len(ladder) - 1)]
    if parsed.modifier:
        return f"{dice}{signed(parsed.modifier)}"
    return dice


def signed(value: int) -> str:
    """Render a modifier with an explicit sign ("+0" for zero)."""
    return f"+{value}" if value >= 0 else str(value)


@dataclass(frozen=True)
class MAPValues:
    """Multiple Attack Penalty for the first, second and third attack."""

    first: int = 0
    second: int = -5
    third: int = -10


def calculate_map(agile: bool) -> MAPValues:
    if agile:
        return MAPValues(first=0, second=-4, third=-8)
    return MAPValues()


def format_attack_with_map(attack_bonus: int, penalties: MAPValues) -> str:
    """Render the three-attack ladder, e.g. "+8/+3/-2"."""
    return "/".join(
        signed(attack_bonus + penalty)
        for penalty in (penalties.first, penalties.second, penalties.third)
    )


@dataclass(frozen=True)
class DamageComponent:
    label: str
    kind: ComponentKind
    damage_type: str | None = None
    dice_count: int = 0
    die_size: int = 0
    modifier: int = 0
    conditional_id: str | None = None
    active: bool = True
    source: str | None = None

    @property
    def value(self) -> str:
        """Display text: "1d8", "+3", or "2d6+1"."""
        if self.dice_count and self.modifier:
            return f"{self.dice_count}d{self.die_size}{signed(self.modifier)}"
        if self.dice_count:
            return f"{self.dice_count}d{self.die_size}"
        return signed(self.modifier)


@dataclass(frozen=True)
class DamageBreakdown:
    """Damage split into ordered categories, with the striking-inclusive total."""

    base: tuple[DamageComponent, ...] = ()
    runes: tuple[DamageComponent, ...] = ()
    modifier: tuple[DamageComponent, ...] = ()
    buffs: tuple[DamageComponent, ...] = ()
    conditional: tuple[DamageComponent, ...] = ()
    total: str = ""

    def components(self) -> list[DamageComponent]:
        return [*self.base, *self.runes, *self.modifier, *self.buffs, *self.conditional]

    def active_components(self) -> list[DamageComponent]:
        return [component for component in self.components() if component.active]


def combine_damage(breakdown: DamageBreakdown) -> str:
    """
    One formula per damage type from all active components.

    Dice of the same size within a type are merged ("1d8" + "2d8" ->
    "3d8"). The type name is appended except for untyped "physical" damage.
    Falls back to ``breakdown.total`` when nothing is active.
    """
    grouped: dict[str, tuple[dict[int, int], list[int]]] = {}
    for component in breakdown.active_components():
        damage_type = component.damage_type or "physical"
        dice, modifiers = grouped.setdefault(damage_type, ({}, []))
        if component.dice_count:
            dice[component.die_size] = dice.get(component.die_size, 0) + component.dice_count
        modifiers.append(component.modifier)

    parts = []
    for damage_type, (dice, modifiers) in grouped.items():
        flat = sum(modifiers)
        terms = [f"{count}d{size}" for size, count in dice.items()]
        if not terms and not flat:
            continue
        formula = " + ".join(terms)
        if not terms:
            formula = str(flat)
        elif flat > 0:
            formula = f"{formula} + {flat}"
        elif flat < 0:
            formula = f"{formula} - {abs(flat)}"
        parts.append(formula if damage_type == "physical" else f"{formula} {damage_type}")

    return " + ".join(parts) if parts else breakdown.total


@dataclass(frozen=True)
class WeaponStats:
    attack_bonus: int
    map: MAPValues
    damage: DamageBreakdown
    damage_type: str
    proficiency_rank: ProficiencyRank
    proficiency_bonus: int
    item_bonus: int
    ability_modifier: int
    attack_buffs: ModifierTotal = field(default_factory=ModifierTotal)
    condition_penalty: int = 0

    @property
    def map_display(self) -> str:
        return format_attack_with_map(self.attack_bonus, self.map)

    @property
    def effective_attack_bonus(self) -> int:
        return self.attack_bonus + self.attack_buffs.total + self.condition_penalty


def _traits(weapon: WeaponDef) -> set[str]:
    return {trait.lower() for trait in weapon.traits}


def _is_thrown(traits: set[str]) -> bool:
    return any(trait == "thrown" or trait.startswith("thrown-") for trait in traits)


def is_pure_ranged(weapon: WeaponDef) -> bool:
    """Ranged weapon without the thrown trait."""
    return bool(weapon.range) and not _is_thrown(_traits(weapon))


def weapon_ability_modifier(character: Character, weapon: WeaponDef) -> tuple[int, str]:
    """
    Ability contribution for a weapon, with its label.

    Strength for melee and thrown weapons; nothing for other ranged weapons,
    except half Strength (rounded down) with the propulsive trait.
    """
    strength = ability_modifier(character.ability_scores.strength)
    if is_pure_ranged(weapon):
        if "propulsive" in _traits(weapon):
            return strength // 2, "Propulsive (half Strength)"
        return 0, ""
    return strength, ABILITY_LABELS["str"]


def attack_ability_modifier(
    character: Character, weapon: WeaponDef, customization: WeaponCustomization | None = None
) -> int:
    """Attack ability modifier, honoring an explicit override on the weapon."""
    override = customization.attack_ability_override if customization else None
    if override and override != "auto":
        return ability_modifier(character.ability_scores.get(override))
    return weapon_ability_modifier(character, weapon)[0]


def weapon_proficiency_rank(character: Character, weapon: WeaponDef) -> ProficiencyRank:
    """Best proficiency among entries for the weapon's id, category, or "all"."""
    keys = {weapon.id.lower(), weapon.category.lower(), "all"}
    return best_rank(
        *(
            entry.proficiency
            for entry in character.weapon_proficiencies
            if entry.category.lower() in keys
        )
    )


def is_conditional_rune(rune: PropertyRuneDef) -> bool:
    """Runes whose extra damage depends on the target's alignment or sanctification."""
    if rune.damage is None:
        return False
    if rune.damage.type.lower() in CONDITIONAL_DAMAGE_TYPES:
        return True
    return any(trait.lower() in CONDITIONAL_DAMAGE_TYPES for trait in rune.traits)


def _condition_label(rune: PropertyRuneDef) -> str:
    if rune.damage is not None and rune.damage.type.lower() in CONDITION_LABELS:
        return CONDITION_LABELS[rune.damage.type.lower()]
    for trait in rune.traits:
        if trait.lower() in CONDITION_LABELS:
            return CONDITION_LABELS[trait.lower()]
    return "conditional"


def _rune_dice(rune: PropertyRuneDef) -> DiceFormula | None:
    if rune.damage is None:
        return None
    parsed = parse_damage_formula(rune.damage.dice)
    if parsed is None:
        logger.warning("rune_damage_unparsed", rune_id=rune.id, dice=rune.damage.dice)
    return parsed


def _striking_rune_dice(runes: WeaponRunes | None, catalog: RuleCatalog | None) -> int:
    if runes is None or runes.striking_rune is None:
        return 0
    if catalog is not None:
        return catalog.striking_dice(runes.striking_rune)
    return STRIKING_DICE.get(runes.striking_rune, 0)


def derive_damage_breakdown(
    character: Character,
    weapon: WeaponDef,
    two_handed: bool = False,
    equipped_item: EquippedItem | None = None,
    catalog: RuleCatalog | None = None,
) -> DamageBreakdown:
    """
    Break a weapon's damage into base, rune, modifier, buff, and conditional parts.

    A base damage string that isn't plain dice ("1d8") yields an empty
    breakdown whose total is that string, unchanged.
    """
    match = _BASE_DICE.match(weapon.damage.strip())
    if not match:
        logger.warning("weapon_damage_unparsed", weapon_id=weapon.id, damage=weapon.damage)
        return DamageBreakdown(total=weapon.damage)

    runes = equipped_item.weapon_runes if equipped_item else None
    custom = equipped_item.weapon_customization if equipped_item else None
    damage_type = (custom.custom_damage_type if custom else None) or weapon.damage_type
    rules = character.variant_rules

    dice_count = int(match.group(1))
    die_size = int(match.group(2))
    if two_handed:
        for trait in _traits(weapon):
            if trait.startswith("two-hand-d") and trait[len("two-hand-d"):].isdigit():
                die_size = int(trait[len("two-hand-d"):])

    base = [
        DamageComponent(
            label="Base Weapon",
            kind="base",
            damage_type=damage_type,
            dice_count=dice_count,
            die_size=die_size,
        )
    ]

    rune_parts: list[DamageComponent] = []
    conditional: list[DamageComponent] = []

    striking = weapon_striking_dice(rules, character.level, _striking_rune_dice(runes, catalog))
    if striking > 0:
        rune_parts.append(
            DamageComponent(
                label="Striking Rune",
                kind="rune-striking",
                damage_type=damage_type,
                dice_count=striking,
                die_size=die_size,
                source=STRIKING_NAMES.get(striking),
            )
        )

    property_runes = runes.property_runes if runes else ()
    for rune_id in property_runes:
        rune = catalog.property_rune(rune_id) if catalog else None
        if rune is None or rune.damage is None:
            continue
        dice = _rune_dice(rune)
        if dice is None:
            continue
        if is_conditional_rune(rune):
            conditional.append(
                DamageComponent(
                    label=f"{rune.name} ({_condition_label(rune)})",
                    kind="conditional",
                    damage_type=rune.damage.type,
                    dice_count=dice.count,
                    die_size=dice.size,
                    modifier=dice.modifier,
                    conditional_id=rune_id,
                    active=rune_id in character.active_conditional_damage,
                    source=rune.name,
                )
            )
        else:
            rune_parts.append(
                DamageComponent(
                    label=rune.name,
                    kind="rune-property",
                    damage_type=rune.damage.type,
                    dice_count=dice.count,
                    die_size=dice.size,
                    modifier=dice.modifier,
                    conditional_id=rune_id,
                    source=rune.name,
                )
            )

    modifiers: list[DamageComponent] = []
    ability, ability_label = weapon_ability_modifier(character, weapon)
    if ability != 0:
        modifiers.append(
            DamageComponent(label=ability_label, kind="ability", damage_type=damage_type, modifier=ability)
        )

    custom_bonus = custom.bonus_damage if custom else 0
    if custom_bonus != 0:
        modifiers.append(
            DamageComponent(label="Custom Bonus", kind="bonus", damage_type=damage_type, modifier=custom_bonus)
        )

    damage_buffs = stack_buffs(character.buffs, "damage")
    buff_parts = [
        DamageComponent(label=label, kind="buff", damage_type=damage_type, modifier=value)
        for label, value in (
            ("Status Bonus", damage_buffs.status),
            ("Circumstance Bonus", damage_buffs.circumstance),
            ("Item Bonus", damage_buffs.item),
            ("Penalty", damage_buffs.untyped),
        )
        if value != 0
    ]

    total_dice = f"{dice_count + striking}d{die_size}"
    flat = ability + custom_bonus + damage_buffs.total
    if flat > 0:
        total = f"{total_dice} + {flat}"
    elif flat < 0:
        total = f"{total_dice} - {abs(flat)}"
    else:
        total = total_dice

    return DamageBreakdown(
        base=tuple(base),
        runes=tuple(rune_parts),
        modifier=tuple(modifiers),
        buffs=tuple(buff_parts),
        conditional=tuple(conditional),
        total=total,
    )


def derive_weapon_stats(
    character: Character,
    weapon: WeaponDef,
    equipped_item: EquippedItem | None = None,
    two_handed: bool | None = None,
    catalog: RuleCatalog | None = None,
) -> WeaponStats:
    """
    Attack bonus, MAP ladder, and damage breakdown for one weapon.

    Attack bonus = ability + proficiency + potency (or the ABP potency
    bonus) + custom bonus. ``two_handed`` defaults to how the item is wielded.
    """
    runes = equipped_item.weapon_runes if equipped_item else None
    custom = equipped_item.weapon_customization if equipped_item else None
    if two_handed is None:
        two_handed = equipped_item.is_two_handed if equipped_item else False

    rules = character.variant_rules
    ability = attack_ability_modifier(character, weapon, custom)
    rank = weapon_proficiency_rank(character, weapon)
    prof = proficiency_bonus(character.level, rank, rules.proficiency_without_level)
    item_bonus = weapon_item_bonus(rules, character.level, runes.potency_rune if runes else 0)
    custom_bonus = custom.bonus_attack if custom else 0

    penalties = condition_penalties(character.conditions, catalog)
    return WeaponStats(
        attack_bonus=ability + prof + item_bonus + custom_bonus,
        map=calculate_map("agile" in _traits(weapon)),
        damage=derive_damage_breakdown(character, weapon, two_handed, equipped_item, catalog),
        damage_type=(custom.custom_damage_type if custom else None) or weapon.damage_type,
        proficiency_rank=rank,
        proficiency_bonus=prof,
        item_bonus=item_bonus,
        ability_modifier=ability,
        attack_buffs=stack_buffs(character.buffs, "attack"),
        condition_penalty=penalties.attack_roll(),
    )
