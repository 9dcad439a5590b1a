"""Equipped item records: containers, runes, and customizations.

Runes and customizations are discriminated on a ``kind`` tag so each
calculator handles exactly one shape. Records saved before the tag existed
are accepted; their kind is inferred from the keys they carry.
"""

from typing import Annotated, Any, Literal

from pydantic import Field, model_validator

from .base import RecordModel

StrikingRune = Literal["striking", "greaterStriking", "majorStriking"]
AbilityOverride = Literal["str", "dex", "con", "int", "wis", "cha", "auto"]

_WEAPON_RUNE_KEYS = {"strikingRune", "striking_rune"}
_ARMOR_RUNE_KEYS = {"resilientRune", "resilient_rune"}
_SHIELD_RUNE_KEYS = {"reinforcingRune", "reinforcing_rune", "weaponRunes", "weapon_runes"}

_WEAPON_CUSTOM_KEYS = {
    "bonusAttack", "bonus_attack", "bonusDamage", "bonus_damage",
    "customDamageType", "custom_damage_type", "attackAbilityOverride",
    "attack_ability_override", "material", "isLarge", "is_large",
}
_ARMOR_CUSTOM_KEYS = {
    "bonusAC", "bonus_ac", "checkPenaltyOverride", "check_penalty_override",
    "speedPenaltyOverride", "speed_penalty_override", "dexCapOverride", "dex_cap_override",
}
_SHIELD_CUSTOM_KEYS = {
    "hardnessOverride", "hardness_override", "maxHPOverride", "max_hp_override",
    "currentHP", "current_hp", "broken",
}


def _infer_kind(data: Any, weapon: set[str], armor: set[str], shield: set[str]) -> Any:
    if not isinstance(data, dict) or "kind" in data:
        return data
    keys = set(data)
    if keys & shield:
        kind = "shield"
    elif keys & armor:
        kind = "armor"
    else:
        kind = "weapon"
    return {**data, "kind": kind}


class WeaponRunes(RecordModel):
    """Potency, striking, and property runes etched on a weapon."""

    kind: Literal["weapon"] = "weapon"
    potency_rune: int = 0
    striking_rune: StrikingRune | None = None
    property_runes: tuple[str, ...] = ()


class ArmorRunes(RecordModel):
    """Potency, resilient, and property runes etched on armor."""

    kind: Literal["armor"] = "armor"
    potency_rune: int = 0
    resilient_rune: int = 0
    property_runes: tuple[str, ...] = ()


class ShieldRunes(RecordModel):
    """Reinforcing rune plus an optional set of weapon runes (shield boss/spikes)."""

    kind: Literal["shield"] = "shield"
    reinforcing_rune: int = 0
    property_runes: tuple[str, ...] = ()
    weapon_runes: WeaponRunes | None = None


ItemRunes = Annotated[WeaponRunes | ArmorRunes | ShieldRunes, Field(discriminator="kind")]


class WeaponCustomization(RecordModel):
    kind: Literal["weapon"] = "weapon"
    custom_name: str | None = None
    material: str | None = None
    is_large: bool = False
    bulk_override: float | None = None
    attack_ability_override: AbilityOverride | None = None
    bonus_attack: int = 0
    bonus_damage: int = 0
    custom_damage_type: str | None = None
    critical_specialization: bool = False


class ArmorCustomization(RecordModel):
    kind: Literal["armor"] = "armor"
    custom_name: str | None = None
    bonus_ac: int = Field(default=0, alias="bonusAC")
    check_penalty_override: int | None = None
    speed_penalty_override: int | None = None
    dex_cap_override: int | None = None


class ShieldCustomization(RecordModel):
    kind: Literal["shield"] = "shield"
    custom_name: str | None = None
    hardness_override: int | None = None
    max_hp_override: int | None = Field(default=None, alias="maxHPOverride")
    current_hp: int | None = Field(default=None, alias="currentHP")
    broken: bool = False


ItemCustomization = Annotated[
    WeaponCustomization | ArmorCustomization | ShieldCustomization,
    Field(discriminator="kind"),
]


class WieldState(RecordModel):
    hands: Literal[1, 2] = 1


class EquippedItem(RecordModel):
    """An item carried by a character.

    ``bulk`` is the item's own Bulk. For coin items it holds the coin count
    unless ``quantity`` is set. Containers declare ``is_container`` with an
    optional ``capacity`` and per-item ``bulk_reduction``; contained items
    point at their container through ``container_id``.
    """

    id: str
    name: str
    equipment_id: str | None = None
    bulk: float = 0.0
    quantity: int | None = None
    is_coins: bool = False
    invested: bool = False
    worn: bool = False
    wielded: WieldState | None = None
    container_id: str | None = None
    is_container: bool = False
    capacity: float | None = None
    bulk_reduction: float = 0.0
    runes: ItemRunes | None = None
    customization: ItemCustomization | None = None

    @model_validator(mode="before")
    @classmethod
    def _tag_legacy_payloads(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("runes") is not None:
            data["runes"] = _infer_kind(
                data["runes"], _WEAPON_RUNE_KEYS, _ARMOR_RUNE_KEYS, _SHIELD_RUNE_KEYS
            )
        if data.get("customization") is not None:
            data["customization"] = _infer_kind(
                data["customization"], _WEAPON_CUSTOM_KEYS, _ARMOR_CUSTOM_KEYS, _SHIELD_CUSTOM_KEYS
            )
        coins_flag = "isCoins" in data or "is_coins" in data
        if not coins_flag:
            name = str(data.get("name", "")).lower()
            data["is_coins"] = "coin" in name or "moneta" in name
        return data

    @property
    def weapon_runes(self) -> WeaponRunes | None:
        """Weapon runes for this item, including a shield's attached weapon runes."""
        if isinstance(self.runes, WeaponRunes):
            return self.runes
        if isinstance(self.runes, ShieldRunes):
            return self.runes.weapon_runes
        return None

    @property
    def weapon_customization(self) -> WeaponCustomization | None:
        if isinstance(self.customization, WeaponCustomization):
            return self.customization
        return None

    @property
    def is_two_handed(self) -> bool:
        return self.wielded is not None and self.wielded.hands == 2
