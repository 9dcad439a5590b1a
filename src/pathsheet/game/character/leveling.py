"""Leveling schedule: feat slots, skill increases, and ability boosts per level.

The standard table is fixed. Variant rules contribute through overlays, small
pure functions that add slots to a level's standard slots. Overlays run in
the order of ``SLOT_OVERLAYS`` and never remove a standard slot.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Literal

from .variants import STANDARD_RULES, VariantRules

SlotKind = Literal["ancestry", "class", "general", "skill", "archetype"]

MAX_LEVEL = 20

# Levels granting four ability boosts under the standard rule
ABILITY_BOOST_LEVELS = (5, 10, 15, 20)
BOOSTS_PER_MILESTONE = 4

SKILL_INCREASE_LEVELS = (3, 5, 7, 9, 11, 13, 15, 17, 19)

ANCESTRY_PARAGON_LEVELS = (1, 3, 7, 11, 15, 19)


@dataclass(frozen=True)
class LevelFeatures:
    """What a single level grants under the standard rules."""

    ancestry_feat: bool = False
    class_feat: bool = False
    general_feat: bool = False
    skill_feat: bool = False
    skill_increase: bool = False
    ability_boost: bool = False


@dataclass(frozen=True)
class FeatSlot:
    type: SlotKind
    level: int


def _standard_features(level: int) -> LevelFeatures:
    return LevelFeatures(
        ancestry_feat=level in (1, 5, 9, 13, 17),
        class_feat=level == 1 or level % 2 == 0,
        general_feat=level in (3, 7, 11, 15, 19),
        skill_feat=level % 2 == 0,
        skill_increase=level in SKILL_INCREASE_LEVELS,
        ability_boost=level in ABILITY_BOOST_LEVELS,
    )


LEVEL_FEATURES: dict[int, LevelFeatures] = {
    level: _standard_features(level) for level in range(1, MAX_LEVEL + 1)
}

_NO_FEATURES = LevelFeatures()


def features_at_level(level: int) -> LevelFeatures:
    """Standard features granted at ``level``; nothing outside 1-20."""
    return LEVEL_FEATURES.get(level, _NO_FEATURES)


def _standard_slots(level: int) -> list[FeatSlot]:
    features = features_at_level(level)
    slots = []
    if features.ancestry_feat:
        slots.append(FeatSlot("ancestry", level))
    if features.class_feat:
        slots.append(FeatSlot("class", level))
    if features.general_feat:
        slots.append(FeatSlot("general", level))
    if features.skill_feat:
        slots.append(FeatSlot("skill", level))
    return slots


SlotOverlay = Callable[[int, VariantRules, Sequence[FeatSlot]], list[FeatSlot]]


def free_archetype_overlay(
    level: int, rules: VariantRules, existing: Sequence[FeatSlot]
) -> list[FeatSlot]:
    """Free Archetype: one archetype slot at every even level."""
    if rules.free_archetype and level % 2 == 0:
        return [FeatSlot("archetype", level)]
    return []


def ancestry_paragon_overlay(
    level: int, rules: VariantRules, existing: Sequence[FeatSlot]
) -> list[FeatSlot]:
    """Ancestry Paragon: an ancestry slot at its milestones, never a second one."""
    if not rules.ancestry_paragon or level not in ANCESTRY_PARAGON_LEVELS:
        return []
    if any(slot.type == "ancestry" for slot in existing):
        return []
    return [FeatSlot("ancestry", level)]


SLOT_OVERLAYS: tuple[SlotOverlay, ...] = (
    free_archetype_overlay,
    ancestry_paragon_overlay,
)


def all_feat_slots_up_to_level(
    level: int, rules: VariantRules = STANDARD_RULES
) -> list[FeatSlot]:
    """Every feat slot from level 1 through ``level``, in ascending level order.

    Within one level the standard slots come first, followed by overlay
    slots in overlay order.
    """
    slots: list[FeatSlot] = []
    for current in range(1, min(level, MAX_LEVEL) + 1):
        level_slots = _standard_slots(current)
        for overlay in SLOT_OVERLAYS:
            level_slots.extend(overlay(current, rules, level_slots))
        slots.extend(level_slots)
    return slots


def skill_increases_up_to_level(level: int) -> int:
    """Number of skill increases gained through ``level``."""
    return sum(1 for milestone in SKILL_INCREASE_LEVELS if milestone <= level)


def has_ability_boost_at_level(level: int, gradual: bool = False) -> bool:
    """Whether ``level`` grants ability boosts (every level from 2 when gradual)."""
    if gradual:
        return 2 <= level <= MAX_LEVEL
    return level in ABILITY_BOOST_LEVELS


def ability_boost_levels_up_to(level: int, gradual: bool = False) -> list[int]:
    """Levels through ``level`` that grant boosts.

    Level 1 is never listed; its boosts belong to character creation.
    """
    if gradual:
        return list(range(2, min(level, MAX_LEVEL) + 1))
    return [milestone for milestone in ABILITY_BOOST_LEVELS if milestone <= level]


def boosts_at_level(level: int, gradual: bool = False) -> int:
    """Number of boosts granted at exactly ``level``."""
    if not has_ability_boost_at_level(level, gradual):
        return 0
    return 1 if gradual else BOOSTS_PER_MILESTONE


def total_ability_boosts_up_to(level: int, gradual: bool = False) -> int:
    """Total leveling boosts through ``level`` (standard: 4 per milestone)."""
    if gradual:
        return max(0, min(level, MAX_LEVEL) - 1)
    return BOOSTS_PER_MILESTONE * len(ability_boost_levels_up_to(level))
