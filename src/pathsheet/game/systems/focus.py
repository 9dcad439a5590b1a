"""Focus point pool size."""

import structlog

from pathsheet.config import get_settings
from pathsheet.game.character.record import Character
from pathsheet.game.rules.registry import RuleCatalog

logger = structlog.get_logger(__name__)

# Classes whose class features grant a focus pool
FOCUS_CLASS_NAMES = (
    "Bard",
    "Champion",
    "Cleric",
    "Druid",
    "Monk",
    "Oracle",
    "Psychic",
    "Sorcerer",
    "Summoner",
    "Swashbuckler",
    "Thaumaturge",
    "Wizard",
    "Gunslinger",
    "Kineticist",
)

# Feats (by slug) that each grant a focus point
FOCUS_FEATS = frozenset(
    {
        "cleric-domain",
        "sorcerer-blood-magic",
        "wizard-focus-spell",
        "bard-muse",
        "champion-cause",
        "druid-order",
        "monk-ki",
        "oracle-mystery",
        "psychic-conscious-mind",
        "summoner-eidolon",
        "swashbuckler-panache",
        "thaumaturge-implement",
        "geniekin-versatility",
        "chosen-one",
        "gortle-yip-sigil",
        "blessed-one-dedication",
        "champion-advanced-devotion",
    }
)

# Feats that raise the pool beyond the per-feat points
ADDITIONAL_FOCUS_FEATS = {
    "additional-focus": 1,
    "expanded-focus": 1,
}


def class_grants_focus(class_id: str, catalog: RuleCatalog | None = None) -> bool:
    """Whether the character's class is one of the focus-granting classes."""
    if not class_id:
        return False
    if catalog is not None:
        class_def = catalog.class_def(class_id)
        if class_def is not None:
            return any(
                catalog.class_id_by_name(name) == class_def.id for name in FOCUS_CLASS_NAMES
            )
    # uncatalogued class: compare the id against the class names
    return class_id.lower() in {name.lower() for name in FOCUS_CLASS_NAMES}


def focus_feat_keys(character: Character, catalog: RuleCatalog | None = None) -> set[str]:
    """Distinct canonical slugs of the character's feats."""
    if catalog is None:
        return {feat.feat_id for feat in character.feats}
    return {catalog.resolve_feat_key(feat.feat_id) for feat in character.feats}


def max_focus_points(
    character: Character,
    catalog: RuleCatalog | None = None,
    cap: int | None = None,
) -> int:
    """
    Focus pool size.

    One point for a focus-granting class, one per distinct focus feat, plus
    additional-focus feats; capped at ``cap`` (``Settings.focus_point_cap``
    by default, normally 3).
    """
    if cap is None:
        cap = get_settings().focus_point_cap

    keys = focus_feat_keys(character, catalog)
    from_class = 1 if class_grants_focus(character.class_id, catalog) else 0
    from_feats = len(keys & FOCUS_FEATS)
    additional = sum(ADDITIONAL_FOCUS_FEATS.get(key, 0) for key in keys)
    total = from_class + from_feats + additional

    logger.debug(
        "focus_points_calculated",
        character_id=character.id,
        from_class=from_class,
        from_feats=from_feats,
        additional=additional,
        cap=cap,
    )
    return min(total, cap)


def has_focus_abilities(character: Character, catalog: RuleCatalog | None = None) -> bool:
    return bool(focus_feat_keys(character, catalog) & FOCUS_FEATS)
