"""Character records and the ability, proficiency and leveling rules behind them."""

from .attributes import (
    ABILITY_NAMES,
    AbilityModifiers,
    AbilityName,
    Proficiency,
    ProficiencyRank,
    ability_modifier,
    apply_ability_boost,
    proficiency_bonus,
)
from .base import RecordModel, with_changes
from .items import EquippedItem
from .pets import AnimalCompanion, Eidolon, Familiar, Pet
from .record import Character, create_empty_character, migrate_character
from .variants import STANDARD_RULES, VariantRules

__all__ = [
    "ABILITY_NAMES",
    "AbilityModifiers",
    "AbilityName",
    "AnimalCompanion",
    "Character",
    "Eidolon",
    "EquippedItem",
    "Familiar",
    "Pet",
    "Proficiency",
    "ProficiencyRank",
    "RecordModel",
    "STANDARD_RULES",
    "VariantRules",
    "ability_modifier",
    "apply_ability_boost",
    "create_empty_character",
    "migrate_character",
    "proficiency_bonus",
    "with_changes",
]
