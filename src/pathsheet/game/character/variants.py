"""Optional rule overlays ("variant rules") and their formula changes.

Each flag on :class:`VariantRules` swaps one standard formula for its variant:

- ``free_archetype``: an extra archetype feat slot at every even level.
- ``dual_class``: a second class; class HP uses the better of the two.
- ``ancestry_paragon``: extra ancestry feat slots at 1, 3, 7, 11, 15 and 19.
- ``automatic_bonus_progression``: item bonuses come from a level table
  instead of potency, striking and resilient runes.
- ``gradual_ability_boosts``: one boost per level from 2 instead of four at
  every fifth level.
- ``proficiency_without_level``: proficiency bonus drops the level term.
"""

from dataclasses import dataclass

from .base import RecordModel


class VariantRules(RecordModel):
    """Overlay configuration passed into every derivation entry point."""

    free_archetype: bool = False
    dual_class: bool = False
    ancestry_paragon: bool = False
    automatic_bonus_progression: bool = False
    gradual_ability_boosts: bool = False
    proficiency_without_level: bool = False


STANDARD_RULES = VariantRules()


@dataclass(frozen=True)
class ABPBonuses:
    """Automatic Bonus Progression values for one level."""

    potency: int
    striking: int
    resilient: int


# Gamemastery Guide tables, indexed by level
_ABP_POTENCY = {
    1: 0, 2: 0, 3: 0, 4: 1, 5: 1, 6: 1, 7: 1, 8: 2, 9: 2, 10: 2,
    11: 2, 12: 3, 13: 3, 14: 3, 15: 3, 16: 4, 17: 4, 18: 4, 19: 4, 20: 5,
}
_ABP_STRIKING = {
    1: 0, 2: 0, 3: 0, 4: 0, 5: 0, 6: 0, 7: 1, 8: 1, 9: 1, 10: 1,
    11: 1, 12: 2, 13: 2, 14: 2, 15: 2, 16: 2, 17: 3, 18: 3, 19: 3, 20: 3,
}
_ABP_RESILIENT = {
    1: 0, 2: 0, 3: 0, 4: 0, 5: 0, 6: 0, 7: 0, 8: 1, 9: 1, 10: 1,
    11: 1, 12: 2, 13: 2, 14: 2, 15: 2, 16: 3, 17: 3, 18: 3, 19: 3, 20: 4,
}

ABP_STRIKING_CAP = 3


def abp_bonuses(level: int) -> ABPBonuses:
    """Look up the Automatic Bonus Progression row for a level (0s off-table)."""
    return ABPBonuses(
        potency=_ABP_POTENCY.get(level, 0),
        striking=_ABP_STRIKING.get(level, 0),
        resilient=_ABP_RESILIENT.get(level, 0),
    )


def abp_striking_dice(level: int) -> int:
    """Approximate extra weapon dice under ABP: ``level // 6``, capped at 3.

    This is the approximation the damage breakdown has always shown; it does
    not match the published striking table row for row (see ``abp_bonuses``).
    """
    return min(level // 6, ABP_STRIKING_CAP)


def armor_item_bonus(rules: VariantRules, level: int, stored_item_bonus: int) -> int:
    """AC item bonus: ABP potency + resilient, or the stored equipment bonus."""
    if rules.automatic_bonus_progression:
        abp = abp_bonuses(level)
        return abp.potency + abp.resilient
    return stored_item_bonus


def weapon_item_bonus(rules: VariantRules, level: int, potency_rune: int) -> int:
    """Attack item bonus: ABP potency, or the weapon's potency rune."""
    if rules.automatic_bonus_progression:
        return abp_bonuses(level).potency
    return potency_rune


def weapon_striking_dice(rules: VariantRules, level: int, rune_dice: int) -> int:
    """Extra weapon damage dice: ABP approximation, or the striking rune tier."""
    if rules.automatic_bonus_progression:
        return abp_striking_dice(level)
    return rune_dice


def class_hit_points(primary_hp: int, secondary_hp: int | None = None) -> int:
    """Class HP contribution; a second class (Dual Class) takes the better value."""
    if secondary_hp is None:
        return primary_hp
    return max(primary_hp, secondary_hp)
