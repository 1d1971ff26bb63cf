"""
Catalog repository for verbs, nouns, adjectives and verb conjugations
"""

import logging
from datetime import datetime
from typing import Any

from ....errors import DuplicateKeyError, NotFoundError
from ....utils import extract_json_safely, format_json_safely
from ..connection import DatabaseConnection
from ..models import CatalogRow, ItemKind

logger = logging.getLogger(__name__)

# Column layout of the plain catalog tables: scalar columns are stored as-is,
# JSON columns hold nested translation objects.
KIND_COLUMNS: dict[ItemKind, dict[str, Any]] = {
    ItemKind.VERB: {
        "table": "verbs",
        "scalar": ["regular", "reflexive", "tr_ptBR", "tr_en"],
        "json": [],
    },
    ItemKind.NOUN: {
        "table": "nouns",
        "scalar": [],
        "json": ["singolare", "plurale"],
    },
    ItemKind.ADJECTIVE: {
        "table": "adjectives",
        "scalar": [],
        "json": ["maschile", "femminile"],
    },
}

BOOLEAN_COLUMNS = {"regular", "reflexive"}


class CatalogRepository:
    """Repository for catalog item database operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def _row_to_payload(self, kind: ItemKind, row: dict[str, Any]) -> dict[str, Any]:
        """Rebuild the import-shaped payload from a stored row"""
        if kind == ItemKind.CONJUGATION:
            return extract_json_safely(row["conjugation"])

        layout = KIND_COLUMNS[kind]
        payload: dict[str, Any] = {}
        for column in layout["scalar"]:
            value = row[column]
            payload[column] = bool(value) if column in BOOLEAN_COLUMNS else value
        for column in layout["json"]:
            payload[column] = extract_json_safely(row[column])
        return payload

    def _payload_to_values(self, kind: ItemKind, payload: dict[str, Any]) -> list[Any]:
        layout = KIND_COLUMNS[kind]
        values = [payload.get(column) for column in layout["scalar"]]
        values.extend(format_json_safely(payload.get(column)) for column in layout["json"])
        return values

    def _to_catalog_row(self, kind: ItemKind, row: Any) -> CatalogRow:
        data = dict(row)
        return {
            "id": data["id"],
            "italian": data["italian"],
            "payload": self._row_to_payload(kind, data),
            "created_at": data["created_at"],
            "updated_at": data["updated_at"],
        }

    def list_rows(self, kind: ItemKind) -> list[CatalogRow]:
        """Get all rows of a kind in catalog (insertion) order"""
        try:
            with self.db_connection.get_connection() as conn:
                if kind == ItemKind.CONJUGATION:
                    cursor = conn.execute(
                        """
                        SELECT v.id, v.italian, vc.conjugation, vc.created_at, vc.updated_at
                        FROM verb_conjugations vc
                        JOIN verbs v ON vc.verb_id = v.id
                        ORDER BY v.id ASC
                        """
                    )
                else:
                    table = KIND_COLUMNS[kind]["table"]
                    cursor = conn.execute(
                        f"SELECT * FROM {table} ORDER BY id ASC"  # noqa: S608
                    )
                return [self._to_catalog_row(kind, row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(f"Error listing {kind.plural}: {e}")
            raise

    def list_verbs_with_conjugations(self) -> list[dict[str, Any]]:
        """Get verbs that have a conjugation table, with verb metadata"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT v.*, vc.conjugation
                    FROM verbs v
                    JOIN verb_conjugations vc ON vc.verb_id = v.id
                    ORDER BY v.id ASC
                    """
                )
                rows = []
                for row in cursor.fetchall():
                    data = dict(row)
                    data["regular"] = bool(data["regular"])
                    data["reflexive"] = bool(data["reflexive"])
                    data["conjugation"] = extract_json_safely(data["conjugation"])
                    rows.append(data)
                return rows
        except Exception as e:
            logger.error(f"Error listing verbs with conjugations: {e}")
            raise

    def get_row_by_key(self, kind: ItemKind, italian: str) -> CatalogRow | None:
        """Get a row by its Italian key"""
        rows = self.find_by_keys(kind, [italian])
        return rows.get(italian)

    def find_by_keys(self, kind: ItemKind, keys: list[str]) -> dict[str, CatalogRow]:
        """Get existing rows for the given Italian keys"""
        if not keys:
            return {}

        try:
            with self.db_connection.get_connection() as conn:
                placeholders = ",".join("?" for _ in keys)
                if kind == ItemKind.CONJUGATION:
                    cursor = conn.execute(
                        f"""
                        SELECT v.id, v.italian, vc.conjugation, vc.created_at, vc.updated_at
                        FROM verb_conjugations vc
                        JOIN verbs v ON vc.verb_id = v.id
                        WHERE v.italian IN ({placeholders})
                        """,  # noqa: S608  # Safe: placeholders contains only ? chars
                        keys,
                    )
                else:
                    table = KIND_COLUMNS[kind]["table"]
                    cursor = conn.execute(
                        f"SELECT * FROM {table} WHERE italian IN ({placeholders})",  # noqa: S608
                        keys,
                    )
                rows = [self._to_catalog_row(kind, row) for row in cursor.fetchall()]
                return {row["italian"]: row for row in rows}
        except Exception as e:
            logger.error(f"Error finding {kind.plural} by keys: {e}")
            raise

    def find_verb_ids(self, italians: list[str]) -> dict[str, int]:
        """Map verb Italian names to verb ids for the verbs that exist"""
        if not italians:
            return {}

        with self.db_connection.get_connection() as conn:
            placeholders = ",".join("?" for _ in italians)
            cursor = conn.execute(
                f"SELECT id, italian FROM verbs WHERE italian IN ({placeholders})",  # noqa: S608
                italians,
            )
            return {row["italian"]: row["id"] for row in cursor.fetchall()}

    def create_many(self, kind: ItemKind, records: dict[str, dict[str, Any]]) -> int:
        """Create new rows; every key must be absent from the catalog"""
        if not records:
            return 0

        existing = self.find_by_keys(kind, list(records))
        if existing:
            duplicate = sorted(existing)[0]
            raise DuplicateKeyError(
                duplicate, f"{kind.value} '{duplicate}' already exists"
            )

        with self.db_connection.get_connection() as conn:
            if kind == ItemKind.CONJUGATION:
                verb_ids = self.find_verb_ids(list(records))
                missing = sorted(set(records) - set(verb_ids))
                if missing:
                    raise NotFoundError("Verb", missing)
                for italian, payload in records.items():
                    conn.execute(
                        "INSERT INTO verb_conjugations (verb_id, conjugation) VALUES (?, ?)",
                        (verb_ids[italian], format_json_safely(payload)),
                    )
            else:
                layout = KIND_COLUMNS[kind]
                columns = ["italian", *layout["scalar"], *layout["json"]]
                placeholders = ",".join("?" for _ in columns)
                for italian, payload in records.items():
                    conn.execute(
                        f"INSERT INTO {layout['table']} ({', '.join(columns)}) "  # noqa: S608
                        f"VALUES ({placeholders})",
                        [italian, *self._payload_to_values(kind, payload)],
                    )
            conn.commit()

        logger.info(f"Created {len(records)} {kind.plural}")
        return len(records)

    def update_many(self, kind: ItemKind, records: dict[str, dict[str, Any]]) -> int:
        """Replace the payload of existing rows"""
        if not records:
            return 0

        existing = self.find_by_keys(kind, list(records))
        missing = sorted(set(records) - set(existing))
        if missing:
            raise NotFoundError(kind.value.capitalize(), missing)

        now = datetime.now()
        with self.db_connection.get_connection() as conn:
            for italian, payload in records.items():
                if kind == ItemKind.CONJUGATION:
                    conn.execute(
                        """
                        UPDATE verb_conjugations SET conjugation = ?, updated_at = ?
                        WHERE verb_id = ?
                        """,
                        (format_json_safely(payload), now, existing[italian]["id"]),
                    )
                    continue

                layout = KIND_COLUMNS[kind]
                assignments = ", ".join(
                    f"{column} = ?" for column in [*layout["scalar"], *layout["json"]]
                )
                conn.execute(
                    f"UPDATE {layout['table']} SET {assignments}, updated_at = ? "  # noqa: S608
                    "WHERE italian = ?",
                    [*self._payload_to_values(kind, payload), now, italian],
                )
            conn.commit()

        logger.info(f"Updated {len(records)} {kind.plural}")
        return len(records)

    def delete_item(self, kind: ItemKind, italian: str) -> None:
        """Delete a row; its statistics are removed by cascade"""
        row = self.get_row_by_key(kind, italian)
        if row is None:
            raise NotFoundError(kind.value.capitalize(), [italian])

        with self.db_connection.get_connection() as conn:
            if kind == ItemKind.CONJUGATION:
                conn.execute("DELETE FROM verb_conjugations WHERE verb_id = ?", (row["id"],))
                conn.execute(
                    "DELETE FROM conjugation_statistics WHERE verb_id = ?", (row["id"],)
                )
            else:
                table = KIND_COLUMNS[kind]["table"]
                conn.execute(f"DELETE FROM {table} WHERE id = ?", (row["id"],))  # noqa: S608
            conn.commit()

        logger.info(f"Deleted {kind.value} '{italian}'")
