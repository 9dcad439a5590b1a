"""Command line entry point for Pathsheet."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from pathsheet.config import get_settings
from pathsheet.database.engine import close_db, get_session, init_db
from pathsheet.database.repository import list_characters, save_character
from pathsheet.game.character.record import Character, migrate_character
from pathsheet.game.derive import Snapshot, derive_snapshot
from pathsheet.game.rules.loader import CatalogLoadError, CatalogValidationError, load_catalog
from pathsheet.game.systems.bulk import format_bulk
from pathsheet.game.systems.companions import FamiliarStats
from pathsheet.game.systems.offense import combine_damage, signed
from pathsheet.logging_config import configure_logging

logger = structlog.get_logger(__name__)


class CharacterFileError(Exception):
    """Raised when a character file cannot be read or parsed."""


def read_character(path: Path) -> Character:
    """
    Read and migrate a character JSON file.

    Raises:
        CharacterFileError: If the file is missing, not JSON, or not a character
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise CharacterFileError(f"Cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise CharacterFileError(f"{path} does not hold a character object")
    try:
        return migrate_character(data)
    except ValidationError as e:
        raise CharacterFileError(f"{path} is not a valid character: {e}") from e


def snapshot_summary(snapshot: Snapshot) -> dict[str, Any]:
    """Flatten a snapshot into plain JSON-ready values."""
    character = snapshot.character
    summary: dict[str, Any] = {
        "id": character.id,
        "name": character.name,
        "level": character.level,
        "hitPoints": snapshot.hit_points.to_wire(),
        "armorClass": snapshot.armor_class,
        "effectiveArmorClass": snapshot.defenses.effective,
        "saves": {name: stat.total for name, stat in snapshot.saves.items()},
        "perception": snapshot.perception.total,
        "skills": {name: stat.total for name, stat in snapshot.skills.items()},
        "focusPoints": snapshot.focus_points,
        "bulk": {
            "total": snapshot.bulk.total_bulk,
            "max": snapshot.bulk.max_bulk,
            "encumbrance": snapshot.bulk.encumbrance,
        },
        "featSlots": [{"type": slot.type, "level": slot.level} for slot in snapshot.feat_slots],
        "weapons": [
            {
                "id": line.item_id,
                "name": line.name,
                "attack": line.stats.map_display,
                "damage": combine_damage(line.stats.damage),
            }
            for line in snapshot.weapons
        ],
        "pets": [],
    }
    if snapshot.shield is not None:
        summary["shield"] = {
            "name": snapshot.shield.name,
            "hardness": snapshot.shield.hardness,
            "hp": snapshot.shield.current_hp,
            "maxHp": snapshot.shield.max_hp,
            "broken": snapshot.shield.broken,
        }
    if snapshot.spellcasting is not None:
        summary["spellcasting"] = {
            "attack": snapshot.spellcasting.attack.total,
            "dc": snapshot.spellcasting.dc,
        }
    for pet in snapshot.pets:
        summary["pets"].append(
            {
                "kind": pet.kind,
                "level": pet.level,
                "maxHp": pet.max_hp,
                "armorClass": pet.armor_class,
                "perception": pet.perception,
            }
        )
    return summary


def render_text(summary: dict[str, Any]) -> str:
    hp = summary["hitPoints"]
    saves = summary["saves"]
    bulk = summary["bulk"]
    lines = [
        f"{summary['name'] or '(unnamed)'}  level {summary['level']}",
        f"HP {hp['current']}/{hp['max']}  AC {summary['armorClass']}"
        f"  Perception {signed(summary['perception'])}",
        "Fort {} Ref {} Will {}".format(
            signed(saves["fortitude"]), signed(saves["reflex"]), signed(saves["will"])
        ),
        f"Bulk {format_bulk(bulk['total'])}/{bulk['max']} ({bulk['encumbrance']})"
        f"  Focus {summary['focusPoints']}",
    ]
    if "spellcasting" in summary:
        spells = summary["spellcasting"]
        lines.append(f"Spell attack {signed(spells['attack'])}  DC {spells['dc']}")
    if "shield" in summary:
        shield = summary["shield"]
        lines.append(
            f"{shield['name']}: hardness {shield['hardness']}, HP {shield['hp']}/{shield['maxHp']}"
            + (" (broken)" if shield["broken"] else "")
        )
    for weapon in summary["weapons"]:
        lines.append(f"{weapon['name']}: {weapon['attack']}  {weapon['damage']}")
    for name, total in summary["skills"].items():
        lines.append(f"  {name} {signed(total)}")
    return "\n".join(lines)


def cmd_sheet(args: argparse.Namespace) -> int:
    character = read_character(args.character)
    catalog = load_catalog(args.catalog)
    summary = snapshot_summary(derive_snapshot(character, catalog))
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(render_text(summary))
    return 0


async def _save(path: Path) -> str:
    character = read_character(path)
    await init_db()
    try:
        async with get_session() as session:
            await save_character(session, character)
    finally:
        await close_db()
    return character.id


async def _list() -> list[tuple[str, str, int]]:
    await init_db()
    try:
        async with get_session() as session:
            records = await list_characters(session)
            return [(record.id, record.name, record.level) for record in records]
    finally:
        await close_db()


def cmd_save(args: argparse.Namespace) -> int:
    print(asyncio.run(_save(args.character)))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    for character_id, name, level in asyncio.run(_list()):
        print(f"{character_id}  {name}  (level {level})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pathsheet", description="Pathfinder character sheets")
    commands = parser.add_subparsers(dest="command", required=True)

    sheet = commands.add_parser("sheet", help="Print the derived sheet for a character file")
    sheet.add_argument("character", type=Path, help="Character JSON file")
    sheet.add_argument("--catalog", type=Path, default=None, help="Rule catalog directory")
    sheet.add_argument("--json", action="store_true", help="Print JSON instead of text")
    sheet.set_defaults(handler=cmd_sheet)

    save = commands.add_parser("save", help="Store a character file in the database")
    save.add_argument("character", type=Path, help="Character JSON file")
    save.set_defaults(handler=cmd_save)

    listing = commands.add_parser("list", help="List stored characters")
    listing.set_defaults(handler=cmd_list)
    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse arguments and dispatch; returns the process exit status."""
    configure_logging(get_settings())
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except CharacterFileError as e:
        logger.error("character_file_unreadable", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (CatalogLoadError, CatalogValidationError) as e:
        logger.error("catalog_load_failed", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
