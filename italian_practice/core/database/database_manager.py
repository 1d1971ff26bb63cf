"""
Unified database manager that coordinates all repositories
"""

import logging
from typing import Any

from ...config import get_settings
from ...practice.items import ROW_BUILDERS, PracticeItem, conjugation_item_from_row
from .connection import DatabaseConnection
from .models import ItemKind, ItemStatistic, StatisticKey, User, UserProfile
from .repositories.catalog_repository import CatalogRepository
from .repositories.statistics_repository import StatisticsRepository
from .repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Unified database manager that coordinates all repositories.

    Serves as the catalog, statistics and import-sink collaborator of the
    practice engine and the importer.
    """

    def __init__(self, db_path: str | None = None):
        self.db_connection = DatabaseConnection(db_path)
        self.user_repo = UserRepository(self.db_connection)
        self.catalog_repo = CatalogRepository(self.db_connection)
        self.statistics_repo = StatisticsRepository(self.db_connection)

    def init_database(self) -> None:
        """Initialize database tables and indexes"""
        self.db_connection.init_database()

    # User methods
    def create_user(self, username: str, is_admin: bool = False) -> User:
        """Create a new user"""
        return self.user_repo.create_user(username, is_admin)

    def get_user_by_id(self, user_id: int) -> User | None:
        return self.user_repo.get_user_by_id(user_id)

    def get_profile(self, user_id: int) -> UserProfile:
        """Get practice preferences for a user"""
        return self.user_repo.get_profile(user_id)

    def update_profile(
        self,
        user_id: int,
        mastery_threshold: int | None = None,
        enabled_verb_tenses: list[str] | None = None,
    ) -> UserProfile:
        return self.user_repo.update_profile(user_id, mastery_threshold, enabled_verb_tenses)

    # Catalog methods
    def list_items(self, kind: ItemKind, user_id: int | None = None) -> list[PracticeItem]:
        """Get practice items of a kind in catalog order.

        Conjugation items only carry the tenses enabled in the user's profile.
        """
        language = get_settings().translation_language

        if kind == ItemKind.CONJUGATION:
            if user_id is not None:
                enabled_tenses = self.get_profile(user_id)["enabled_verb_tenses"]
            else:
                enabled_tenses = get_settings().enabled_verb_tenses_list
            rows = self.catalog_repo.list_verbs_with_conjugations()
            return [
                conjugation_item_from_row(row, enabled_tenses, language) for row in rows
            ]

        builder = ROW_BUILDERS[kind]
        return [builder(row, language) for row in self.catalog_repo.list_rows(kind)]

    def get_item_by_key(self, kind: ItemKind, key: str) -> PracticeItem | None:
        """Get a single practice item by its Italian key"""
        language = get_settings().translation_language

        if kind == ItemKind.CONJUGATION:
            for row in self.catalog_repo.list_verbs_with_conjugations():
                if row["italian"] == key:
                    return conjugation_item_from_row(row, None, language)
            return None

        row = self.catalog_repo.get_row_by_key(kind, key)
        if row is None:
            return None
        return ROW_BUILDERS[kind](row, language)

    def delete_item(self, kind: ItemKind, key: str) -> None:
        self.catalog_repo.delete_item(kind, key)

    def export_catalog(self, kind: ItemKind) -> dict[str, dict[str, Any]]:
        """Export a kind in the same shape accepted by import"""
        return {row["italian"]: row["payload"] for row in self.catalog_repo.list_rows(kind)}

    # Import sink methods
    def existing_payloads(self, kind: ItemKind, keys: list[str]) -> dict[str, dict[str, Any]]:
        """Stored payloads for the keys already in the catalog"""
        rows = self.catalog_repo.find_by_keys(kind, keys)
        return {italian: row["payload"] for italian, row in rows.items()}

    def find_missing_verbs(self, keys: list[str]) -> list[str]:
        """Keys that do not name an existing verb"""
        found = self.catalog_repo.find_verb_ids(keys)
        return sorted(set(keys) - set(found))

    def apply_merge_plan(
        self,
        kind: ItemKind,
        to_create: dict[str, dict[str, Any]],
        to_update: dict[str, dict[str, Any]],
    ) -> dict[str, int]:
        """Write a resolved import plan"""
        created = self.catalog_repo.create_many(kind, to_create)
        updated = self.catalog_repo.update_many(kind, to_update)
        return {"created": created, "updated": updated}

    # Statistics methods
    def get_statistics(self, user_id: int, kind: ItemKind) -> dict[StatisticKey, ItemStatistic]:
        return self.statistics_repo.get_statistics(user_id, kind)

    def record_attempt(
        self, user_id: int, kind: ItemKind, key: StatisticKey, correct: bool
    ) -> ItemStatistic:
        """Record a graded attempt"""
        return self.statistics_repo.record_attempt(user_id, kind, key, correct)

    def reset_statistic(self, user_id: int, kind: ItemKind, key: StatisticKey) -> int:
        """Reset counters for an item"""
        return self.statistics_repo.reset_statistic(user_id, kind, key)

    # Utility methods
    def get_connection(self):
        """Get database connection context manager"""
        return self.db_connection.get_connection()


# Global instance
_db_manager = None


def get_db_manager(db_path: str | None = None) -> DatabaseManager:
    """Get global database manager instance"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(db_path)
    return _db_manager
