"""Bulk and encumbrance.

Items either sit at the root of the inventory or point at a container
through ``container_id``. A container's contribution is its own Bulk plus
its contents, each reduced by the container's ``bulk_reduction`` and the
sum capped at its ``capacity``.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from pathsheet.game.character.attributes import ability_modifier
from pathsheet.game.character.items import EquippedItem
from pathsheet.game.character.record import Character

Encumbrance = Literal["normal", "encumbered", "overburdened"]

NEGLIGIBLE_BULK = 0.1
COINS_PER_BULK = 1000
BASE_BULK_LIMIT = 5


@dataclass(frozen=True)
class ContainerBulk:
    """Bulk carried in one container; ``container`` is None for the root."""

    container: EquippedItem | None
    items: tuple[EquippedItem, ...]
    bulk: float


@dataclass(frozen=True)
class BulkResult:
    total_bulk: float
    max_bulk: int
    encumbrance: Encumbrance
    containers: tuple[ContainerBulk, ...]


@dataclass(frozen=True)
class AddItemCheck:
    can_add: bool
    current_bulk: float
    new_bulk: float
    max_bulk: int


def _round(value: float) -> float:
    return round(value, 4)


def item_bulk(item: EquippedItem) -> float:
    """
    Effective Bulk of a single item.

    Coins convert at 1000 coins per Bulk (``quantity`` coins, or ``bulk``
    when no quantity is stored). Other items under 0.1 Bulk are negligible.
    """
    if item.is_coins:
        coins = item.quantity if item.quantity is not None else item.bulk
        return max(0.0, coins) / COINS_PER_BULK

    bulk = item.bulk
    custom = item.weapon_customization
    if custom is not None and custom.bulk_override is not None:
        bulk = custom.bulk_override
    return 0.0 if bulk < NEGLIGIBLE_BULK else bulk


def max_bulk(strength_score: int) -> int:
    """Bulk limit before becoming encumbered: Strength modifier + 5."""
    return ability_modifier(strength_score) + BASE_BULK_LIMIT


def encumbrance_level(total: float, limit: int) -> Encumbrance:
    if total > limit + 1:
        return "overburdened"
    if total > limit:
        return "encumbered"
    return "normal"


def _contents_bulk(container: EquippedItem, items: Sequence[EquippedItem]) -> float:
    reduced = sum(max(0.0, item_bulk(item) - container.bulk_reduction) for item in items)
    if container.capacity is not None:
        return min(reduced, container.capacity)
    return reduced


def derive_bulk(
    character: Character, inventory: Sequence[EquippedItem] | None = None
) -> BulkResult:
    """
    Total carried Bulk and encumbrance level.

    Args:
        character: The character (for Strength)
        inventory: Items to weigh; defaults to the character's equipment

    Returns:
        BulkResult with per-container breakdown (root first)
    """
    if inventory is None:
        inventory = character.equipment

    containers = {item.id: item for item in inventory if item.is_container}
    contents: dict[str, list[EquippedItem]] = {container_id: [] for container_id in containers}
    root: list[EquippedItem] = []

    for item in inventory:
        if item.is_container:
            continue
        if item.container_id in contents:
            contents[item.container_id].append(item)
        else:
            # no container, or one that no longer exists
            root.append(item)

    root_bulk = sum(item_bulk(item) for item in root)
    breakdown = [ContainerBulk(container=None, items=tuple(root), bulk=_round(root_bulk))]
    total = root_bulk

    for container_id, container in containers.items():
        items = contents[container_id]
        bulk = item_bulk(container) + _contents_bulk(container, items)
        breakdown.append(ContainerBulk(container=container, items=tuple(items), bulk=_round(bulk)))
        total += bulk

    limit = max_bulk(character.ability_scores.strength)
    total = _round(total)
    return BulkResult(
        total_bulk=total,
        max_bulk=limit,
        encumbrance=encumbrance_level(total, limit),
        containers=tuple(breakdown),
    )


def can_add_item(
    character: Character,
    inventory: Sequence[EquippedItem],
    item: EquippedItem,
    target_container_id: str | None = None,
) -> AddItemCheck:
    """
    Check whether adding ``item`` keeps the character within one Bulk of the limit.

    The insertion is simulated on a copy; ``inventory`` is left untouched.
    When a target container with a capacity is given, the item must also
    fit in the container's remaining capacity.
    """
    current = derive_bulk(character, inventory)
    candidate = item.model_copy(update={"container_id": target_container_id})
    simulated = derive_bulk(character, [*inventory, candidate])

    if target_container_id is not None:
        container = next(
            (entry for entry in inventory if entry.id == target_container_id and entry.is_container),
            None,
        )
        if container is not None and container.capacity is not None:
            held = [entry for entry in inventory if entry.container_id == target_container_id]
            needed = sum(
                max(0.0, item_bulk(entry) - container.bulk_reduction) for entry in [*held, candidate]
            )
            if needed > container.capacity:
                return AddItemCheck(
                    can_add=False,
                    current_bulk=current.total_bulk,
                    new_bulk=current.total_bulk,
                    max_bulk=current.max_bulk,
                )

    return AddItemCheck(
        can_add=simulated.total_bulk <= current.max_bulk + 1,
        current_bulk=current.total_bulk,
        new_bulk=simulated.total_bulk,
        max_bulk=current.max_bulk,
    )


_FRACTIONS = {
    0.2: "1/5",
    0.25: "1/4",
    0.3: "1/3",
    0.4: "2/5",
    0.5: "1/2",
    0.6: "3/5",
    0.7: "7/10",
    0.75: "3/4",
}


def format_bulk(bulk: float) -> str:
    """Render Bulk for display: "-" for negligible, "L" for light, fractions below 1."""
    if bulk <= 0:
        return "-"
    if bulk < 1:
        rounded = round(bulk, 2)
        if rounded <= NEGLIGIBLE_BULK:
            return "L"
        return _FRACTIONS.get(rounded, f"{rounded:g}")
    return f"{bulk:g}"


def get_containers(inventory: Sequence[EquippedItem]) -> list[EquippedItem]:
    return [item for item in inventory if item.is_container]


def get_items_in_container(
    inventory: Sequence[EquippedItem], container_id: str
) -> list[EquippedItem]:
    return [item for item in inventory if item.container_id == container_id]


def move_item_to_container(
    inventory: Sequence[EquippedItem], item_id: str, container_id: str | None
) -> tuple[EquippedItem, ...]:
    """Return a new inventory with ``item_id`` moved into ``container_id`` (None for root)."""
    return tuple(
        item.model_copy(update={"container_id": container_id}) if item.id == item_id else item
        for item in inventory
    )
