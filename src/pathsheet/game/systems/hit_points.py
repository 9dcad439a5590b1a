"""Hit point derivation and repair."""

import structlog

from pathsheet.game.character.attributes import ability_modifier
from pathsheet.game.character.record import Character, HitPoints
from pathsheet.game.character.variants import class_hit_points
from pathsheet.game.rules.registry import RuleCatalog

logger = structlog.get_logger(__name__)


def ancestry_hit_points(character: Character, catalog: RuleCatalog) -> int:
    """Ancestry HP, or 0 when the ancestry is not in the catalog."""
    ancestry = catalog.ancestry(character.ancestry_id)
    if ancestry is None:
        if character.ancestry_id:
            logger.warning("ancestry_not_found", ancestry_id=character.ancestry_id)
        return 0
    return ancestry.hp


def _class_hp(class_id: str | None, catalog: RuleCatalog) -> int | None:
    if not class_id:
        return None
    class_def = catalog.class_def(class_id)
    if class_def is None:
        logger.warning("class_not_found", class_id=class_id)
        return 0
    return class_def.hp


def max_hit_points(character: Character, catalog: RuleCatalog) -> int:
    """
    Maximum HP: ancestry HP + class HP + Constitution modifier.

    Level does not enter the formula. With a secondary class (Dual Class)
    the better of the two class values is used. Never below 0.
    """
    primary = _class_hp(character.class_id, catalog) or 0
    secondary = _class_hp(character.secondary_class_id, catalog)
    con_mod = ability_modifier(character.ability_scores.constitution)
    total = ancestry_hit_points(character, catalog) + class_hit_points(primary, secondary) + con_mod
    return max(0, total)


def derive_hit_points(character: Character, catalog: RuleCatalog) -> HitPoints:
    """
    Recompute maximum HP and repair the stored pool.

    ``current`` is kept when it lies in (0, max]; a stored value of 0 or
    less, or one above the new maximum, resets to the maximum. Applying
    this to its own output changes nothing.
    """
    maximum = max_hit_points(character, catalog)
    stored = character.hit_points
    current = stored.current
    if current <= 0 or current > maximum:
        current = maximum
    if current != stored.current or maximum != stored.max:
        logger.debug(
            "hit_points_repaired",
            character_id=character.id,
            stored_current=stored.current,
            stored_max=stored.max,
            current=current,
            max=maximum,
        )
    return HitPoints(current=current, max=maximum, temporary=max(0, stored.temporary))
