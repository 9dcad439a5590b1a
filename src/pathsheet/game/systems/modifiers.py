"""Buff stacking and condition penalties.

Typed bonuses (status, circumstance, item) do not stack with themselves:
per type only the largest bonus and the worst penalty apply. Untyped
``penalty`` buffs always stack. Condition penalties come from the rule
catalog; for each selector the most severe value wins.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog

from pathsheet.game.character.attributes import AbilityName
from pathsheet.game.character.record import ActiveCondition, Buff
from pathsheet.game.rules.registry import RuleCatalog

logger = structlog.get_logger(__name__)

TYPED_BONUSES = ("status", "circumstance", "item")
SAVE_NAMES = ("fortitude", "reflex", "will")


@dataclass(frozen=True)
class ModifierTotal:
    """Net typed and untyped modifiers for one statistic."""

    status: int = 0
    circumstance: int = 0
    item: int = 0
    untyped: int = 0

    @property
    def total(self) -> int:
        return self.status + self.circumstance + self.item + self.untyped


def selector_matches(selector: str, stat: str) -> bool:
    """Whether a buff selector applies to ``stat`` (wildcards included)."""
    if selector == stat:
        return True
    if selector == "all-saves":
        return stat in SAVE_NAMES
    if selector.endswith("-*"):
        return stat.startswith(selector[:-1])
    return False


def is_active(buff: Buff) -> bool:
    """Buffs with no duration are permanent; a duration of 0 has expired."""
    return buff.duration is None or buff.duration > 0


def stack_buffs(buffs: Iterable[Buff], stat: str) -> ModifierTotal:
    """Apply the stacking rules to every active buff targeting ``stat``."""
    best: dict[str, int] = {kind: 0 for kind in TYPED_BONUSES}
    worst: dict[str, int] = {kind: 0 for kind in TYPED_BONUSES}
    untyped = 0

    for buff in buffs:
        if not is_active(buff) or not selector_matches(buff.selector, stat):
            continue
        if buff.type == "penalty":
            untyped += buff.bonus
        elif buff.bonus >= 0:
            best[buff.type] = max(best[buff.type], buff.bonus)
        else:
            worst[buff.type] = min(worst[buff.type], buff.bonus)

    return ModifierTotal(
        status=best["status"] + worst["status"],
        circumstance=best["circumstance"] + worst["circumstance"],
        item=best["item"] + worst["item"],
        untyped=untyped,
    )


def advance_round(buffs: Sequence[Buff]) -> tuple[Buff, ...]:
    """End a combat round: tick every timed buff down and drop the expired ones."""
    remaining = []
    for buff in buffs:
        if buff.duration is None:
            remaining.append(buff)
            continue
        duration = buff.duration - 1
        if duration > 0:
            remaining.append(buff.model_copy(update={"duration": duration}))
        else:
            logger.debug("buff_expired", buff_id=buff.id, name=buff.name)
    return tuple(remaining)


@dataclass(frozen=True)
class ConditionPenalties:
    """Most severe condition penalty per selector (all values <= 0)."""

    all: int = 0
    str_based: int = 0
    dex_based: int = 0
    con_based: int = 0
    int_based: int = 0
    wis_based: int = 0
    cha_based: int = 0
    attack: int = 0
    ac: int = 0
    saving_throw: int = 0
    perception: int = 0
    speed: int = 0

    def ability_based(self, ability: str) -> int:
        return getattr(self, f"{AbilityName(ability).value}_based")

    def skill(self, ability: str) -> int:
        return self.all + self.ability_based(ability)

    def armor_class(self) -> int:
        return self.all + self.dex_based + self.ac

    def perception_check(self) -> int:
        return self.all + self.wis_based + self.perception

    def save(self, ability: str) -> int:
        return self.all + self.saving_throw + self.ability_based(ability)

    def attack_roll(self) -> int:
        return self.all + self.attack

    @property
    def has_penalty(self) -> bool:
        return any(value < 0 for value in vars(self).values())


NO_PENALTIES = ConditionPenalties()


def condition_penalties(
    conditions: Iterable[ActiveCondition], catalog: RuleCatalog | None
) -> ConditionPenalties:
    """Collect penalties from active conditions.

    Conditions missing from the catalog contribute nothing.
    """
    if catalog is None:
        return NO_PENALTIES

    worst: dict[str, int] = {}
    for active in conditions:
        definition = catalog.condition(active.id)
        if definition is None:
            logger.warning("condition_not_found", condition_id=active.id)
            continue
        value = active.value if active.value is not None else definition.default_value
        for rule in definition.rules:
            penalty = -value if rule.value is None else rule.value
            key = rule.selector.replace("-", "_")
            worst[key] = min(worst.get(key, 0), penalty)

    return ConditionPenalties(**worst)
