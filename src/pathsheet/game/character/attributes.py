"""Ability scores, modifiers, and proficiency math for Pathsheet.

This module is the single home of the ability/proficiency arithmetic. Variant
rule switches are explicit, optional parameters that default to the standard
rules, so every caller shares one implementation.
"""

from dataclasses import dataclass
from enum import IntEnum, StrEnum


class AbilityName(StrEnum):
    """The six ability scores, keyed by their wire-format abbreviations."""

    STR = "str"
    DEX = "dex"
    CON = "con"
    INT = "int"
    WIS = "wis"
    CHA = "cha"


ABILITY_NAMES = [ability.value for ability in AbilityName]

ABILITY_FIELDS = {
    AbilityName.STR: "strength",
    AbilityName.DEX: "dexterity",
    AbilityName.CON: "constitution",
    AbilityName.INT: "intelligence",
    AbilityName.WIS: "wisdom",
    AbilityName.CHA: "charisma",
}


class Proficiency(StrEnum):
    """Proficiency rank names as stored on a character record."""

    UNTRAINED = "untrained"
    TRAINED = "trained"
    EXPERT = "expert"
    MASTER = "master"
    LEGENDARY = "legendary"

    @property
    def rank(self) -> "ProficiencyRank":
        """Numeric rank for this proficiency name."""
        return ProficiencyRank[self.name]


class ProficiencyRank(IntEnum):
    """Ordinal proficiency scale; the values double as the raw bonus."""

    UNTRAINED = 0
    TRAINED = 2
    EXPERT = 4
    MASTER = 6
    LEGENDARY = 8

    @property
    def proficiency(self) -> Proficiency:
        """Name of this rank as stored on a character record."""
        return Proficiency[self.name]


@dataclass(frozen=True)
class AbilityModifiers:
    """Container for all six ability modifiers."""

    strength: int
    dexterity: int
    constitution: int
    intelligence: int
    wisdom: int
    charisma: int

    def get(self, ability: str) -> int:
        """Look up a modifier by ability abbreviation (e.g. "dex")."""
        return getattr(self, ABILITY_FIELDS[AbilityName(ability)])


def ability_modifier(score: int) -> int:
    """Calculate the ability modifier for a score.

    Valid for any integer; there is no lower bound on the result.

    Examples:
        >>> ability_modifier(10)
        0
        >>> ability_modifier(18)
        4
        >>> ability_modifier(7)
        -2
    """
    return (score - 10) // 2


def to_rank(value: "Proficiency | ProficiencyRank | str | int | None") -> ProficiencyRank:
    """Coerce a stored proficiency (name or number) into a ``ProficiencyRank``.

    Unknown values resolve to ``UNTRAINED``.
    """
    if isinstance(value, ProficiencyRank):
        return value
    if isinstance(value, Proficiency):
        return value.rank
    if isinstance(value, int):
        try:
            return ProficiencyRank(value)
        except ValueError:
            return ProficiencyRank.UNTRAINED
    if isinstance(value, str):
        try:
            return Proficiency(value.lower()).rank
        except ValueError:
            return ProficiencyRank.UNTRAINED
    return ProficiencyRank.UNTRAINED


def proficiency_bonus(
    level: int,
    rank: "ProficiencyRank | Proficiency | str | int",
    without_level: bool = False,
) -> int:
    """Calculate the proficiency bonus for a rank at a level.

    Args:
        level: Character level
        rank: Proficiency rank (name or numeric value)
        without_level: Proficiency Without Level variant; drops the level term

    Returns:
        0 when untrained, ``rank`` alone under the variant, else ``level + rank``
    """
    rank = to_rank(rank)
    if rank == ProficiencyRank.UNTRAINED:
        return 0
    if without_level:
        return int(rank)
    return level + int(rank)


def best_rank(*ranks: "ProficiencyRank | Proficiency | str | None") -> ProficiencyRank:
    """Return the highest of the given ranks."""
    return max((to_rank(r) for r in ranks), default=ProficiencyRank.UNTRAINED)


def apply_ability_boost(score: int) -> int:
    """Apply a single ability boost: +2 below 18, +1 from 18 upward."""
    if score < 18:
        return score + 2
    return score + 1


def clamp_level(level: int) -> int:
    """Clamp a character level into the playable range 1-20."""
    return max(1, min(20, level))
