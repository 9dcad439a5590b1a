"""Pet records: familiars, animal companions, and eidolons.

Only what a player chooses is stored on a pet (type, stage, selected
abilities, current HP). Level-dependent numbers are derived from the master
by :mod:`pathsheet.game.systems.companions`.
"""

from typing import Annotated, Any, Literal

from pydantic import Field, model_validator

from .base import RecordModel


class PetAttack(RecordModel):
    name: str
    action_cost: int | None = 1
    attack_bonus: int = 0
    damage: str = ""
    damage_type: str = ""
    traits: tuple[str, ...] = ()


class PetAbility(RecordModel):
    id: str
    name: str
    description: str = ""
    type: Literal["passive", "action", "reaction", "free"] = "passive"
    action_cost: int | None = None


class PetHitPoints(RecordModel):
    current: int = 0
    max: int = 0


def _flatten_data(data: Any, renames: dict[str, str] | None = None) -> Any:
    """Lift a legacy ``data`` payload onto the pet record itself."""
    if not isinstance(data, dict) or not isinstance(data.get("data"), dict):
        return data
    nested = dict(data["data"])
    for old, new in (renames or {}).items():
        if old in nested:
            nested[new] = nested.pop(old)
    merged = {k: v for k, v in data.items() if k != "data"}
    for key, value in nested.items():
        merged.setdefault(key, value)
    return merged


class Familiar(RecordModel):
    """A familiar. Never tracks its own HP; everything derives from the master."""

    type: Literal["familiar"] = "familiar"
    id: str
    name: str
    notes: str | None = None
    abilities: tuple[PetAbility, ...] = ()
    selected_abilities: tuple[str, ...] = ()
    master_abilities_count: int = 2

    @model_validator(mode="before")
    @classmethod
    def _lift_legacy_data(cls, data: Any) -> Any:
        return _flatten_data(data)


class AnimalCompanion(RecordModel):
    type: Literal["animal-companion"] = "animal-companion"
    id: str
    name: str
    notes: str | None = None
    companion_type: str
    stage: Literal["young", "mature", "nimble", "savage"] = "young"
    specialization: Literal["undead", "construct"] | None = None
    hit_points: PetHitPoints | None = None

    @model_validator(mode="before")
    @classmethod
    def _lift_legacy_data(cls, data: Any) -> Any:
        return _flatten_data(data)


class Eidolon(RecordModel):
    """A summoner's eidolon.

    With ``shares_hp`` set the eidolon draws on the summoner's pool and any
    stored ``hit_points`` are ignored.
    """

    type: Literal["eidolon"] = "eidolon"
    id: str
    name: str
    notes: str | None = None
    eidolon_type: str
    shares_hp: bool = Field(default=False, alias="sharesHP")
    selected_evolutions: tuple[PetAbility, ...] = ()
    act_together_used: bool = False
    hit_points: PetHitPoints | None = None

    @model_validator(mode="before")
    @classmethod
    def _lift_legacy_data(cls, data: Any) -> Any:
        # legacy payloads keep the eidolon kind under data.type
        return _flatten_data(data, renames={"type": "eidolonType"})


Pet = Annotated[Familiar | AnimalCompanion | Eidolon, Field(discriminator="type")]
