#!/usr/bin/env python3
"""
Import catalog items (verbs, nouns, adjectives, conjugations) from JSON
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from italian_practice.config import get_settings
from italian_practice.core.database.database_manager import DatabaseManager
from italian_practice.core.database.models import ItemKind
from italian_practice.errors import ConflictError, PracticeError
from italian_practice.importing.service import ImportService


def load_resolutions(args: argparse.Namespace, conflicts: list[dict]) -> dict[str, str] | None:
    """Resolutions chosen on the command line for the reported conflicts"""
    if args.keep_all:
        return {conflict["italian"]: "keep" for conflict in conflicts}
    if args.replace_all:
        return {conflict["italian"]: "replace" for conflict in conflicts}
    if args.resolutions:
        with open(args.resolutions, encoding="utf-8") as f:
            return json.load(f)
    return None


def import_catalog(args: argparse.Namespace) -> bool:
    """Import one JSON file, resolving conflicts as requested"""
    logger = logging.getLogger(__name__)
    kind = ItemKind(args.kind)

    print(f"📖 Loading {kind.plural} from {args.json_path}")
    with open(args.json_path, encoding="utf-8") as f:
        data = json.load(f)

    # Accept both {"verbs": {...}} and a bare mapping
    records = data.get(kind.plural, data) if isinstance(data, dict) else data

    db_manager = DatabaseManager(args.database)
    db_manager.init_database()
    service = ImportService(db_manager)

    try:
        result = service.import_batch(kind, records)
    except ConflictError as e:
        print(f"  ⚠️  {len(e.conflicts)} conflict(s) found:")
        for conflict in e.conflicts:
            print(f"     • {conflict['italian']}")

        resolutions = load_resolutions(args, e.conflicts)
        if resolutions is None:
            service.cancel()
            print("  Re-run with --keep-all, --replace-all or --resolutions FILE")
            return False

        result = service.import_batch(kind, records, resolutions)
    except PracticeError as e:
        logger.error(f"Import failed: {e.to_dict()}")
        print(f"❌ {e.message}")
        return False

    print(f"✅ {result.message}")
    if result.skipped:
        print(f"   • Kept existing: {', '.join(result.skipped)}")
    if result.unchanged:
        print(f"   • Unchanged: {len(result.unchanged)}")
    return True


def main():
    """Main import function"""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Import catalog items from JSON")
    parser.add_argument("kind", choices=[kind.value for kind in ItemKind])
    parser.add_argument("json_path")
    parser.add_argument("--database", default=None, help="SQLite database path")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--keep-all", action="store_true", help="Keep existing items on conflict")
    group.add_argument("--replace-all", action="store_true", help="Replace existing items on conflict")
    group.add_argument("--resolutions", help="JSON file mapping keys to keep|replace")
    args = parser.parse_args()

    if not Path(args.json_path).exists():
        print(f"❌ JSON file not found: {args.json_path}")
        sys.exit(1)

    print(f"🚀 Starting {args.kind} import from {args.json_path}")

    if import_catalog(args):
        print("🎉 Import completed successfully!")
        sys.exit(0)
    else:
        print("💥 Import failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
