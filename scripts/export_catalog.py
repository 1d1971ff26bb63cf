#!/usr/bin/env python3
"""
Export catalog items to JSON in the import format
"""

import json
import logging
import sys
from pathlib import Path

from italian_practice.config import get_settings
from italian_practice.core.database.database_manager import DatabaseManager
from italian_practice.core.database.models import ItemKind


def export_catalog(db_path: str, output_path: str) -> bool:
    """Export every kind into one JSON document"""
    logger = logging.getLogger(__name__)
    try:
        db_manager = DatabaseManager(db_path)
        print(f"📖 Exporting catalog from {db_path}")

        export_data = {}
        for kind in ItemKind:
            export_data[kind.plural] = db_manager.export_catalog(kind)
            print(f"  📝 Found {len(export_data[kind.plural])} {kind.plural}")

        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(export_data, f, ensure_ascii=False, indent=2)

        print(f"✅ Successfully exported catalog to {output_path}")
        return True

    except Exception as e:
        logger.error(f"Export failed: {e}")
        print(f"❌ Export failed: {e}")
        return False


def main():
    """Main export function"""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if len(sys.argv) != 3:
        print("Usage: python export_catalog.py <database_path> <output_json_path>")
        print("Example: python export_catalog.py data/practice.db data/catalog.json")
        sys.exit(1)

    db_path = sys.argv[1]
    output_path = sys.argv[2]

    if not Path(db_path).exists():
        print(f"❌ Database file not found: {db_path}")
        sys.exit(1)

    print(f"🚀 Starting export from {db_path} to {output_path}")

    if export_catalog(db_path, output_path):
        print("🎉 Export completed successfully!")
        sys.exit(0)
    else:
        print("💥 Export failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
