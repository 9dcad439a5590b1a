"""
Rule catalog loader for Pathsheet.

Handles loading the static rule tables from YAML files and building a
:class:`~pathsheet.game.rules.registry.RuleCatalog`.

Each YAML file is a mapping whose top-level keys name tables
(``ancestries``, ``classes``, ``feats``, ...). A table may be split across
files; rows with an id already seen are logged and skipped.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ValidationError

from pathsheet.config import get_settings

from .registry import RuleCatalog
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
    ShieldDef,
    WeaponDef,
)

logger = structlog.get_logger(__name__)

BUNDLED_DATA_DIR = Path(__file__).parent / "data"


class CatalogLoadError(Exception):
    """Raised when there's an error loading catalog data."""

    pass


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    pass


# Table key -> row model; rows are keyed by ``id``
ROW_TABLES: dict[str, type[BaseModel]] = {
    "ancestries": AncestryDef,
    "classes": ClassDef,
    "feats": FeatDef,
    "weapons": WeaponDef,
    "armor": ArmorDef,
    "shields": ShieldDef,
    "property_runes": PropertyRuneDef,
    "conditions": ConditionDef,
    "animal_companions": AnimalCompanionTemplate,
    "eidolons": EidolonTemplate,
    "familiar_abilities": FamiliarAbilityDef,
}


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """
    Load a YAML catalog file.

    Args:
        file_path: Path to the YAML file

    Returns:
        Mapping of table name to raw table data

    Raises:
        CatalogLoadError: If the file cannot be loaded or parsed
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogLoadError(f"YAML parsing error in {file_path}: {e}") from e
    except FileNotFoundError as e:
        raise CatalogLoadError(f"File not found: {file_path}") from e
    except OSError as e:
        raise CatalogLoadError(f"Error loading {file_path}: {e}") from e

    if not data:
        raise CatalogLoadError(f"Empty YAML file: {file_path}")

    if not isinstance(data, dict):
        raise CatalogLoadError(f"Top level of {file_path} must be a mapping of tables")

    return data


def validate_table_rows(
    table: str, rows: Any, file_path: Path
) -> list[BaseModel]:
    """
    Validate the raw rows of one table.

    Args:
        table: Table name (a key of ``ROW_TABLES``)
        rows: Raw YAML value for the table
        file_path: Path to the source file (for error messages)

    Returns:
        Validated row models

    Raises:
        CatalogValidationError: If the table is not a list or a row is invalid
    """
    if not isinstance(rows, list):
        raise CatalogValidationError(f"'{table}' must be a list in {file_path}")

    model = ROW_TABLES[table]
    validated = []
    for row in rows:
        try:
            validated.append(model.model_validate(row))
        except ValidationError as e:
            row_id = row.get("id", "unknown") if isinstance(row, dict) else "unknown"
            raise CatalogValidationError(
                f"{table} entry '{row_id}' in {file_path} is invalid: {e}"
            ) from e
    return validated


def _validate_model(model: type[BaseModel], data: Any, label: str, file_path: Path) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise CatalogValidationError(f"'{label}' in {file_path} is invalid: {e}") from e


def load_catalog(directory: Path | None = None) -> RuleCatalog:
    """
    Load every YAML file in a directory into a RuleCatalog.

    Args:
        directory: Catalog directory. Defaults to ``Settings.catalog_dir``,
            then to the catalog bundled with the package.

    Returns:
        A RuleCatalog built from all tables found

    Raises:
        CatalogLoadError: If the directory is missing or a file can't be read
        CatalogValidationError: If a row fails validation
    """
    if directory is None:
        directory = get_settings().catalog_dir or BUNDLED_DATA_DIR

    if not directory.exists():
        raise CatalogLoadError(f"Catalog directory not found: {directory}")

    if not directory.is_dir():
        raise CatalogLoadError(f"Not a directory: {directory}")

    yaml_files = sorted(list(directory.glob("*.yaml")) + list(directory.glob("*.yml")))
    if not yaml_files:
        logger.warning("no_catalog_yaml_files_found", directory=str(directory))

    tables: dict[str, list[BaseModel]] = {name: [] for name in ROW_TABLES}
    seen_ids: dict[str, set[str]] = {name: set() for name in ROW_TABLES}
    fundamental: FundamentalRunes | None = None
    stages: list[CompanionStage] = []

    for yaml_file in yaml_files:
        data = load_yaml_file(yaml_file)

        for table, raw in data.items():
            if table in ROW_TABLES:
                for row in validate_table_rows(table, raw, yaml_file):
                    if row.id in seen_ids[table]:
                        logger.warning(
                            "duplicate_catalog_id",
                            table=table,
                            row_id=row.id,
                            file=str(yaml_file),
                        )
                        continue
                    seen_ids[table].add(row.id)
                    tables[table].append(row)
            elif table == "fundamental_runes":
                fundamental = _validate_model(FundamentalRunes, raw, table, yaml_file)
            elif table == "companion_stages":
                if not isinstance(raw, list):
                    raise CatalogValidationError(f"'{table}' must be a list in {yaml_file}")
                stages.extend(
                    _validate_model(CompanionStage, entry, table, yaml_file) for entry in raw
                )
            else:
                logger.warning("unknown_catalog_table", table=table, file=str(yaml_file))

    catalog = RuleCatalog(
        fundamental_runes=fundamental,
        companion_stages=stages,
        **tables,
    )
    logger.info(
        "catalog_loaded",
        directory=str(directory),
        **{name: len(rows) for name, rows in tables.items()},
    )
    return catalog
