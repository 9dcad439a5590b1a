"""
Rule catalog registry.

A :class:`RuleCatalog` is built once from the loaded tables and handed to
every derivation that needs reference data. Lookup indices (class names,
feat slugs, legacy ids) are built eagerly in :meth:`RuleCatalog.rebuild`;
there is no module-level cache.
"""

from collections.abc import Iterable

import structlog

from .tables import (
    AncestryDef,
    AnimalCompanionTemplate,
    ArmorDef,
    ClassDef,
    CompanionStage,
    ConditionDef,
    EidolonTemplate,
    FamiliarAbilityDef,
    FeatDef,
    FundamentalRunes,
    PropertyRuneDef,
    ReinforcingRuneDef,
    ShieldDef,
    WeaponDef,
)

logger = structlog.get_logger(__name__)


def _by_id(rows: Iterable | None) -> dict:
    return {row.id: row for row in rows or ()}


class RuleCatalog:
    """Read-only reference tables plus the lookup indices derived from them."""

    def __init__(
        self,
        ancestries: Iterable[AncestryDef] = (),
        classes: Iterable[ClassDef] = (),
        feats: Iterable[FeatDef] = (),
        weapons: Iterable[WeaponDef] = (),
        armor: Iterable[ArmorDef] = (),
        shields: Iterable[ShieldDef] = (),
        property_runes: Iterable[PropertyRuneDef] = (),
        fundamental_runes: FundamentalRunes | None = None,
        conditions: Iterable[ConditionDef] = (),
        animal_companions: Iterable[AnimalCompanionTemplate] = (),
        eidolons: Iterable[EidolonTemplate] = (),
        familiar_abilities: Iterable[FamiliarAbilityDef] = (),
        companion_stages: Iterable[CompanionStage] = (),
    ) -> None:
        self.ancestries: dict[str, AncestryDef] = _by_id(ancestries)
        self.classes: dict[str, ClassDef] = _by_id(classes)
        self.feats: dict[str, FeatDef] = _by_id(feats)
        self.weapons: dict[str, WeaponDef] = _by_id(weapons)
        self.armor: dict[str, ArmorDef] = _by_id(armor)
        self.shields: dict[str, ShieldDef] = _by_id(shields)
        self.property_runes: dict[str, PropertyRuneDef] = _by_id(property_runes)
        self.fundamental_runes = fundamental_runes or FundamentalRunes()
        self.conditions: dict[str, ConditionDef] = _by_id(conditions)
        self.animal_companions: dict[str, AnimalCompanionTemplate] = _by_id(animal_companions)
        self.eidolons: dict[str, EidolonTemplate] = _by_id(eidolons)
        self.familiar_abilities: dict[str, FamiliarAbilityDef] = _by_id(familiar_abilities)
        self.companion_stages: dict[str, CompanionStage] = {
            stage.stage: stage for stage in companion_stages
        }

        self._class_ids_by_name: dict[str, str] = {}
        self._class_aliases: dict[str, str] = {}
        self._feat_keys: dict[str, str] = {}
        self._feats_by_slug: dict[str, FeatDef] = {}
        self.rebuild()

    def rebuild(self) -> None:
        """Recompute every lookup index from the current tables."""
        self._class_ids_by_name = {
            class_def.name.lower(): class_def.id for class_def in self.classes.values()
        }
        self._class_aliases = {
            alias: class_def.id
            for class_def in self.classes.values()
            for alias in class_def.aliases
        }
        self._feat_keys = {}
        self._feats_by_slug = {}
        for feat in self.feats.values():
            self._feats_by_slug[feat.slug] = feat
            self._feat_keys[feat.id] = feat.slug
            self._feat_keys[feat.slug] = feat.slug
        logger.debug(
            "rule_catalog_indexed",
            classes=len(self._class_ids_by_name),
            feats=len(self.feats),
        )

    def clear(self) -> None:
        """Drop every table and index."""
        for table in (
            self.ancestries,
            self.classes,
            self.feats,
            self.weapons,
            self.armor,
            self.shields,
            self.property_runes,
            self.conditions,
            self.animal_companions,
            self.eidolons,
            self.familiar_abilities,
            self.companion_stages,
        ):
            table.clear()
        self.fundamental_runes = FundamentalRunes()
        self._class_ids_by_name.clear()
        self._class_aliases.clear()
        self._feat_keys.clear()
        self._feats_by_slug.clear()

    # Lookups

    def ancestry(self, ancestry_id: str | None) -> AncestryDef | None:
        if not ancestry_id:
            return None
        return self.ancestries.get(ancestry_id)

    def class_def(self, class_id: str | None) -> ClassDef | None:
        """Find a class by id, accepting legacy aliases."""
        if not class_id:
            return None
        found = self.classes.get(class_id)
        if found is None and class_id in self._class_aliases:
            found = self.classes.get(self._class_aliases[class_id])
        return found

    def class_id_by_name(self, name: str) -> str | None:
        """Map a display name such as "Bard" to its class id."""
        return self._class_ids_by_name.get(name.lower())

    def resolve_feat_key(self, feat_id: str) -> str:
        """Canonical slug for a feat id or slug; unknown keys pass through unchanged."""
        return self._feat_keys.get(feat_id, feat_id)

    def feat(self, feat_id: str) -> FeatDef | None:
        return self._feats_by_slug.get(self.resolve_feat_key(feat_id))

    def weapon(self, weapon_id: str | None) -> WeaponDef | None:
        if not weapon_id:
            return None
        return self.weapons.get(weapon_id)

    def armor_def(self, armor_id: str | None) -> ArmorDef | None:
        if not armor_id:
            return None
        return self.armor.get(armor_id)

    def shield(self, shield_id: str | None) -> ShieldDef | None:
        if not shield_id:
            return None
        return self.shields.get(shield_id)

    def property_rune(self, rune_id: str) -> PropertyRuneDef | None:
        return self.property_runes.get(rune_id)

    def striking_dice(self, rune: str | None) -> int:
        """Extra weapon dice for a striking rune tier; 0 when absent or unknown."""
        if not rune:
            return 0
        for tier in self.fundamental_runes.striking:
            if tier.value == rune:
                return tier.dice
        return 0

    def reinforcing_rune(self, value: int) -> ReinforcingRuneDef | None:
        for tier in self.fundamental_runes.reinforcing:
            if tier.value == value:
                return tier
        return None

    def condition(self, condition_id: str) -> ConditionDef | None:
        return self.conditions.get(condition_id)

    def animal_companion(self, companion_type: str) -> AnimalCompanionTemplate | None:
        return self.animal_companions.get(companion_type)

    def eidolon(self, eidolon_type: str) -> EidolonTemplate | None:
        return self.eidolons.get(eidolon_type)

    def companion_stage(self, stage: str) -> CompanionStage:
        """Progression modifiers for a stage; neutral when the stage is unknown."""
        return self.companion_stages.get(stage) or CompanionStage(stage="young")
