"""
User repository for database operations
"""

import logging
from datetime import datetime

from ....config import get_settings
from ....utils import format_json_safely
from ..connection import DatabaseConnection
from ..models import User, UserProfile

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user-related database operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def create_user(self, username: str, is_admin: bool = False) -> User:
        """Create a new user"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "INSERT INTO users (username, is_admin) VALUES (?, ?)",
                    (username, is_admin),
                )
                user_id = cursor.lastrowid
                conn.commit()

            logger.info(f"Created user {username} with id {user_id}")
            return self.get_user_by_id(user_id)
        except Exception as e:
            logger.error(f"Error creating user: {e}")
            raise

    def get_user_by_id(self, user_id: int) -> User | None:
        """Get user by ID"""
        with self.db_connection.get_connection() as conn:
            cursor = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cursor.fetchone()
            if not row:
                return None
            user = dict(row)
            user["is_admin"] = bool(user["is_admin"])
            return user

    def get_profile(self, user_id: int) -> UserProfile:
        """Get practice preferences, falling back to configured defaults"""
        settings = get_settings()
        with self.db_connection.get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM user_settings WHERE user_id = ?", (user_id,)
            )
            row = cursor.fetchone()

        if not row:
            return {
                "user_id": user_id,
                "mastery_threshold": settings.default_mastery_threshold,
                "enabled_verb_tenses": settings.enabled_verb_tenses_list,
            }

        tenses = row["enabled_verb_tenses"]
        return {
            "user_id": user_id,
            "mastery_threshold": row["mastery_threshold"],
            "enabled_verb_tenses": (
                [t for t in tenses.split(",") if t] if tenses
                else settings.enabled_verb_tenses_list
            ),
        }

    def update_profile(
        self,
        user_id: int,
        mastery_threshold: int | None = None,
        enabled_verb_tenses: list[str] | None = None,
    ) -> UserProfile:
        """Create or update practice preferences"""
        if mastery_threshold is not None and mastery_threshold < 0:
            raise ValueError("mastery_threshold must be non-negative")

        current = self.get_profile(user_id)
        threshold = (
            mastery_threshold if mastery_threshold is not None
            else current["mastery_threshold"]
        )
        tenses = (
            enabled_verb_tenses if enabled_verb_tenses is not None
            else current["enabled_verb_tenses"]
        )

        with self.db_connection.get_connection() as conn:
            conn.execute(
                """
                INSERT INTO user_settings (user_id, mastery_threshold, enabled_verb_tenses, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    mastery_threshold = excluded.mastery_threshold,
                    enabled_verb_tenses = excluded.enabled_verb_tenses,
                    updated_at = excluded.updated_at
                """,
                (user_id, threshold, ",".join(tenses), datetime.now()),
            )
            conn.commit()

        logger.info(
            f"Updated profile for user {user_id}: threshold={threshold}, "
            f"tenses={format_json_safely(tenses)}"
        )
        return self.get_profile(user_id)
