"""
Static rule table models.

These are the read-only reference rows loaded from the bundled YAML catalog:
ancestries, classes, feats, equipment, runes, conditions, and companion
templates. Field names follow the YAML files (snake_case).
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from pathsheet.game.character.attributes import AbilityName, Proficiency


class TableRow(BaseModel):
    """Base for catalog rows: immutable, unknown keys rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., description="Stable catalog identifier")
    name: str = Field(..., description="Display name")


class AncestryDef(TableRow):
    """
    An ancestry.

    Attributes:
        hp: Ancestry hit points added once at level 1
        boosts: Fixed boosts; "free" entries are chosen by the player
        flaws: Fixed flaws applied at creation
    """

    hp: int = Field(default=0, description="Ancestry hit points")
    size: Literal["tiny", "small", "medium", "large"] = "medium"
    speed: int = Field(default=25, description="Land speed in feet")
    boosts: list[AbilityName | Literal["free"]] = Field(default_factory=list)
    flaws: list[AbilityName] = Field(default_factory=list)


class ClassProficiencies(BaseModel):
    """Proficiencies a class grants at level 1."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    perception: Proficiency = Proficiency.TRAINED
    fortitude: Proficiency = Proficiency.TRAINED
    reflex: Proficiency = Proficiency.TRAINED
    will: Proficiency = Proficiency.TRAINED
    attacks: dict[str, Proficiency] = Field(default_factory=dict)
    defenses: dict[str, Proficiency] = Field(default_factory=dict)
    class_dc: Proficiency = Proficiency.TRAINED


class ClassSpellcasting(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    tradition: Literal["arcane", "divine", "occult", "primal"]
    type: Literal["prepared", "spontaneous"]
    ability: AbilityName


class ClassDef(TableRow):
    """
    A class.

    Attributes:
        hp: Class hit points
        key_ability: Key ability options
        aliases: Opaque ids older records may carry for this class
    """

    hp: int = Field(default=0, description="Class hit points")
    key_ability: list[AbilityName] = Field(default_factory=list)
    proficiencies: ClassProficiencies = Field(default_factory=ClassProficiencies)
    spellcasting: ClassSpellcasting | None = None
    aliases: list[str] = Field(default_factory=list)


class FeatDef(TableRow):
    """A feat. ``id`` is the opaque catalog id; ``slug`` the readable key."""

    slug: str = Field(..., description="Human-readable stable key, e.g. 'additional-focus'")
    level: int = 1
    category: Literal["ancestry", "class", "general", "skill", "archetype", "bonus"] = "class"
    traits: list[str] = Field(default_factory=list)


class WeaponDef(TableRow):
    """
    A weapon.

    ``damage`` is the base dice (e.g. "1d8"); ``range`` is the range
    increment in feet, None for melee weapons.
    """

    category: Literal["simple", "martial", "advanced", "unarmed"] = "simple"
    group: str = ""
    damage: str = "1d4"
    damage_type: str = "bludgeoning"
    range: int | None = None
    traits: list[str] = Field(default_factory=list)
    bulk: float = 1.0
    hands: Literal[1, 2] = 1


class ArmorDef(TableRow):
    category: Literal["unarmored", "light", "medium", "heavy"] = "light"
    ac_bonus: int = 0
    dex_cap: int | None = None
    check_penalty: int = 0
    speed_penalty: int = 0
    strength: int | None = None
    bulk: float = 1.0


class ShieldDef(TableRow):
    ac_bonus: int = 2
    hardness: int = 0
    hp: int = 0
    broken_threshold: int = 0
    bulk: float = 1.0


class RuneDamage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    dice: str
    type: str
    persistent: bool = False


class PropertyRuneDef(TableRow):
    """A property rune; ``damage`` is set for runes that add damage dice."""

    item: Literal["weapon", "armor", "shield"] = "weapon"
    level: int = 1
    traits: list[str] = Field(default_factory=list)
    damage: RuneDamage | None = None


class StrikingRuneDef(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    value: Literal["striking", "greaterStriking", "majorStriking"]
    name: str
    dice: int


class ReinforcingRuneDef(BaseModel):
    """A reinforcing tier: increases shield hardness and HP up to a ceiling."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: int
    name: str
    hardness_increase: int
    max_hardness: int
    hp_increase: int
    max_hp: int


class FundamentalRunes(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    striking: list[StrikingRuneDef] = Field(default_factory=list)
    reinforcing: list[ReinforcingRuneDef] = Field(default_factory=list)


ConditionSelector = Literal[
    "all",
    "str-based",
    "dex-based",
    "con-based",
    "int-based",
    "wis-based",
    "cha-based",
    "attack",
    "ac",
    "saving-throw",
    "perception",
    "speed",
]


class ConditionPenaltyRule(BaseModel):
    """A penalty a condition imposes; ``value`` None means "minus the condition value"."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    selector: ConditionSelector
    value: int | None = None


class ConditionDef(TableRow):
    valued: bool = False
    default_value: int = 1
    rules: list[ConditionPenaltyRule] = Field(default_factory=list)


class TemplateAttack(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    action_cost: int | None = 1
    attack_bonus: int = 0
    damage: str = ""
    damage_type: str = ""
    traits: list[str] = Field(default_factory=list)


class CompanionSaves(BaseModel):
    """Ability modifiers a companion template adds to each save."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fortitude: int = 0
    reflex: int = 0
    will: int = 0


class AnimalCompanionTemplate(TableRow):
    size: Literal["tiny", "small", "medium", "large"] = "medium"
    speed: dict[str, int] = Field(default_factory=lambda: {"land": 25})
    starting_hp: int = 6
    base_ac: int = 16
    saves: CompanionSaves = Field(default_factory=CompanionSaves)
    attacks: list[TemplateAttack] = Field(default_factory=list)


class EidolonTemplate(TableRow):
    size: Literal["medium", "large"] = "medium"
    speed: dict[str, int] = Field(default_factory=lambda: {"land": 25})
    starting_hp: int = 10
    base_ac: int = 16
    evolution_points: int = 5
    attacks: list[TemplateAttack] = Field(default_factory=list)


class FamiliarAbilityDef(TableRow):
    description: str = ""
    type: Literal["passive", "action", "reaction", "free"] = "passive"


class CompanionStage(BaseModel):
    """Animal companion progression stage modifiers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    stage: Literal["young", "mature", "nimble", "savage"]
    hp: int = 0
    ac: int = 0
    attack: int = 0
    damage_steps: int = 0
