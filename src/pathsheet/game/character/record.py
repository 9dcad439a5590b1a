"""The character record and its migration from older saved formats."""

import uuid
from datetime import UTC, datetime
from typing import Any, Literal

import structlog
from pydantic import Field, field_validator

from .attributes import ABILITY_FIELDS, AbilityName, Proficiency, clamp_level
from .base import RecordModel
from .items import EquippedItem
from .pets import Pet
from .variants import VariantRules

logger = structlog.get_logger(__name__)

FeatSource = Literal["ancestry", "class", "general", "skill", "bonus"]
SlotType = Literal["ancestry", "class", "general", "skill", "archetype", "impulse"]
BonusType = Literal["status", "circumstance", "item", "penalty"]

# Retired class ids from older catalog exports
CLASS_ID_MIGRATIONS = {
    "IiG7DgeLWYrSNXuX": "kineticist",
    "RggQN3bX5SEcsffR": "kineticist",
}


class AbilityScores(RecordModel):
    strength: int = Field(default=10, alias="str")
    dexterity: int = Field(default=10, alias="dex")
    constitution: int = Field(default=10, alias="con")
    intelligence: int = Field(default=10, alias="int")
    wisdom: int = Field(default=10, alias="wis")
    charisma: int = Field(default=10, alias="cha")

    def get(self, ability: str) -> int:
        """Look up a score by ability abbreviation (e.g. "str")."""
        return getattr(self, ABILITY_FIELDS[AbilityName(ability)])


class AbilityBoosts(RecordModel):
    """Boost choices, kept separately so scores can be recomputed from them."""

    ancestry: tuple[AbilityName, ...] = ()
    ancestry_flaws: tuple[AbilityName, ...] = ()
    background: tuple[AbilityName, ...] = ()
    class_boost: AbilityName = Field(default=AbilityName.STR, alias="class")
    free: tuple[AbilityName, ...] = ()
    level_up: dict[int, tuple[AbilityName, ...]] = Field(default_factory=dict)


class HitPoints(RecordModel):
    current: int = 0
    max: int = 0
    temporary: int = 0


class SkillProficiency(RecordModel):
    name: str
    ability: AbilityName
    proficiency: Proficiency = Proficiency.UNTRAINED


class Saves(RecordModel):
    fortitude: Proficiency = Proficiency.UNTRAINED
    reflex: Proficiency = Proficiency.UNTRAINED
    will: Proficiency = Proficiency.UNTRAINED


class ArmorClass(RecordModel):
    """Armor-class configuration.

    ``ac_bonus`` is the equipped armor's own bonus and ``dex_cap`` its Dex
    cap; both are neutral when absent. ``item_bonus`` is the stored potency
    bonus, ignored under Automatic Bonus Progression.
    """

    base: int = 10
    proficiency: Proficiency = Proficiency.UNTRAINED
    item_bonus: int = 0
    ac_bonus: int | None = None
    dex_cap: int | None = None


class Speed(RecordModel):
    land: int = 25
    swim: int | None = None
    climb: int | None = None
    fly: int | None = None
    burrow: int | None = None


class CategoryProficiency(RecordModel):
    category: str
    proficiency: Proficiency = Proficiency.UNTRAINED


class CharacterFeat(RecordModel):
    feat_id: str
    level: int = 1
    source: FeatSource = "class"
    slot_type: SlotType | None = None
    choices: tuple[str, ...] = ()
    granted_by: str | None = None


class Buff(RecordModel):
    """A signed bonus or penalty; ``duration`` in rounds, None for permanent."""

    id: str
    name: str
    bonus: int
    type: BonusType
    selector: str
    duration: int | None = None
    source: str | None = None


class ActiveCondition(RecordModel):
    id: str
    value: int | None = None
    duration: int | None = None


class Currency(RecordModel):
    cp: int = 0
    sp: int = 0
    gp: int = 15
    pp: int = 0


class ShieldState(RecordModel):
    current_hp: int = 0
    raised: bool = False


class Resistance(RecordModel):
    id: str
    type: str
    value: int = 0


class Immunity(RecordModel):
    id: str
    type: str


class CustomResource(RecordModel):
    id: str
    name: str
    max: int = 0
    current: int = 0
    frequency: Literal["daily", "per-encounter"] = "daily"
    description: str | None = None


class FocusPool(RecordModel):
    current: int = 0
    max: int = 0


class Spellcasting(RecordModel):
    tradition: Literal["arcane", "divine", "occult", "primal"]
    spellcasting_type: Literal["prepared", "spontaneous"] = "spontaneous"
    key_ability: AbilityName = AbilityName.CHA
    proficiency: Proficiency = Proficiency.TRAINED
    known_spells: tuple[str, ...] = ()
    focus_pool: FocusPool | None = None
    focus_spells: tuple[str, ...] = ()


def _now() -> str:
    return datetime.now(UTC).isoformat()


class Character(RecordModel):
    """The persisted character record.

    Immutable: every edit builds a new record (see ``with_changes``).
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    player: str | None = None

    ancestry_id: str = ""
    heritage_id: str | None = None
    background_id: str = ""
    class_id: str = ""
    secondary_class_id: str | None = None
    level: int = 1

    ability_scores: AbilityScores = Field(default_factory=AbilityScores)
    ability_boosts: AbilityBoosts = Field(default_factory=AbilityBoosts)
    hit_points: HitPoints = Field(default_factory=HitPoints)
    hero_points: int = 1

    skills: tuple[SkillProficiency, ...] = ()
    saves: Saves = Field(default_factory=Saves)
    perception: Proficiency = Proficiency.TRAINED
    armor_class: ArmorClass = Field(default_factory=ArmorClass)
    speed: Speed = Field(default_factory=Speed)
    weapon_proficiencies: tuple[CategoryProficiency, ...] = ()
    armor_proficiencies: tuple[CategoryProficiency, ...] = ()

    feats: tuple[CharacterFeat, ...] = ()
    skill_increases: dict[int, str] = Field(default_factory=dict)

    equipment: tuple[EquippedItem, ...] = ()
    equipped_armor: str | None = None
    equipped_shield: str | None = None
    shield_state: ShieldState | None = None
    currency: Currency = Field(default_factory=Currency)

    conditions: tuple[ActiveCondition, ...] = ()
    buffs: tuple[Buff, ...] = ()
    active_conditional_damage: tuple[str, ...] = ()
    resistances: tuple[Resistance, ...] = ()
    immunities: tuple[Immunity, ...] = ()
    custom_resources: tuple[CustomResource, ...] = ()
    pets: tuple[Pet, ...] = ()

    variant_rules: VariantRules = Field(default_factory=VariantRules)
    spellcasting: Spellcasting | None = None

    notes: str | None = None
    created_at: str = Field(default_factory=_now)
    updated_at: str = Field(default_factory=_now)

    @field_validator("level")
    @classmethod
    def _clamp_level(cls, value: int) -> int:
        return clamp_level(value)

    def skill(self, name: str) -> SkillProficiency | None:
        """Find a skill entry by name, case-insensitively."""
        wanted = name.lower()
        for entry in self.skills:
            if entry.name.lower() == wanted:
                return entry
        return None


def create_empty_character(name: str = "") -> Character:
    """Create a blank level-1 character with every ability score at 10."""
    return Character(name=name)


def migrate_character(data: dict[str, Any]) -> Character:
    """Upgrade a stored character payload to the current record shape.

    Fills variant-rule flags added after the record was saved, maps retired
    class ids, and derives each feat's missing ``slotType`` from its source.
    Legacy pet ``data`` payloads are flattened by the pet records themselves.

    Args:
        data: Character payload as read from storage (camelCase keys)

    Returns:
        A validated Character
    """
    migrated = dict(data)
    changes: list[str] = []

    for key in ("classId", "secondaryClassId"):
        old = migrated.get(key)
        if old in CLASS_ID_MIGRATIONS:
            migrated[key] = CLASS_ID_MIGRATIONS[old]
            changes.append(key)

    rules = migrated.get("variantRules")
    if not isinstance(rules, dict):
        rules = {}
    defaults = VariantRules().to_wire()
    filled = {
        key: rules[key] if isinstance(rules.get(key), bool) else default
        for key, default in defaults.items()
    }
    if filled != rules:
        changes.append("variantRules")
    migrated["variantRules"] = filled

    feats = []
    for feat in migrated.get("feats") or []:
        if isinstance(feat, dict) and not feat.get("slotType"):
            feat = {**feat, "slotType": feat.get("source", "class")}
            if "slotType" not in changes:
                changes.append("slotType")
        feats.append(feat)
    migrated["feats"] = feats

    level = migrated.get("level")
    if isinstance(level, (int, float)) and not 1 <= level <= 20:
        changes.append("level")

    character = Character.model_validate(migrated)
    if changes:
        logger.debug("character_migrated", character_id=character.id, fields=changes)
    return character
