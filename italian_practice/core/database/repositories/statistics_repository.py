"""
Statistics repository for per-item correct/wrong counters
"""

import logging
from datetime import datetime

from ..connection import DatabaseConnection
from ..models import ConjugationKey, ItemKind, ItemStatistic, StatisticKey

logger = logging.getLogger(__name__)

ITEM_STATISTICS_TABLES = {
    ItemKind.VERB: "verb_statistics",
    ItemKind.NOUN: "noun_statistics",
    ItemKind.ADJECTIVE: "adjective_statistics",
}


def _to_statistic(row) -> ItemStatistic:
    return {
        "correct_attempts": row["correct_attempts"],
        "wrong_attempts": row["wrong_attempts"],
        "last_practiced": row["last_practiced"],
    }


class StatisticsRepository:
    """Repository for practice statistics operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def get_statistics(self, user_id: int, kind: ItemKind) -> dict[StatisticKey, ItemStatistic]:
        """Get all statistics of a kind for a user.

        Plain kinds are keyed by item id, conjugations by ConjugationKey.
        """
        try:
            with self.db_connection.get_connection() as conn:
                if kind == ItemKind.CONJUGATION:
                    cursor = conn.execute(
                        """
                        SELECT * FROM conjugation_statistics WHERE user_id = ?
                        """,
                        (user_id,),
                    )
                    return {
                        ConjugationKey(
                            row["verb_id"], row["mood"], row["tense"], row["person"]
                        ): _to_statistic(row)
                        for row in cursor.fetchall()
                    }

                table = ITEM_STATISTICS_TABLES[kind]
                cursor = conn.execute(
                    f"SELECT * FROM {table} WHERE user_id = ?",  # noqa: S608
                    (user_id,),
                )
                return {row["item_id"]: _to_statistic(row) for row in cursor.fetchall()}
        except Exception as e:
            logger.error(f"Error getting {kind.value} statistics for user {user_id}: {e}")
            raise

    def record_attempt(
        self, user_id: int, kind: ItemKind, key: StatisticKey, correct: bool
    ) -> ItemStatistic:
        """Increment the correct or wrong counter, creating the record on first grade"""
        correct_inc = 1 if correct else 0
        wrong_inc = 0 if correct else 1
        now = datetime.now()

        try:
            with self.db_connection.get_connection() as conn:
                if kind == ItemKind.CONJUGATION:
                    if not isinstance(key, ConjugationKey):
                        raise TypeError("Conjugation statistics require a ConjugationKey")
                    conn.execute(
                        """
                        INSERT INTO conjugation_statistics (
                            user_id, verb_id, mood, tense, person,
                            correct_attempts, wrong_attempts, last_practiced
                        )
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT(user_id, verb_id, mood, tense, person) DO UPDATE SET
                            correct_attempts = correct_attempts + excluded.correct_attempts,
                            wrong_attempts = wrong_attempts + excluded.wrong_attempts,
                            last_practiced = excluded.last_practiced
                        """,
                        (user_id, *key, correct_inc, wrong_inc, now),
                    )
                    cursor = conn.execute(
                        """
                        SELECT * FROM conjugation_statistics
                        WHERE user_id = ? AND verb_id = ? AND mood = ? AND tense = ? AND person = ?
                        """,
                        (user_id, *key),
                    )
                else:
                    table = ITEM_STATISTICS_TABLES[kind]
                    conn.execute(
                        f"""
                        INSERT INTO {table} (
                            user_id, item_id, correct_attempts, wrong_attempts, last_practiced
                        )
                        VALUES (?, ?, ?, ?, ?)
                        ON CONFLICT(user_id, item_id) DO UPDATE SET
                            correct_attempts = correct_attempts + excluded.correct_attempts,
                            wrong_attempts = wrong_attempts + excluded.wrong_attempts,
                            last_practiced = excluded.last_practiced
                        """,  # noqa: S608  # Safe: table comes from ITEM_STATISTICS_TABLES
                        (user_id, key, correct_inc, wrong_inc, now),
                    )
                    cursor = conn.execute(
                        f"SELECT * FROM {table} WHERE user_id = ? AND item_id = ?",  # noqa: S608
                        (user_id, key),
                    )

                row = cursor.fetchone()
                conn.commit()
                logger.debug(
                    f"Recorded {'correct' if correct else 'wrong'} attempt "
                    f"for user {user_id}, {kind.value} {key}"
                )
                return _to_statistic(row)
        except Exception as e:
            logger.error(f"Error recording attempt for user {user_id}, {kind.value} {key}: {e}")
            raise

    def reset_statistic(self, user_id: int, kind: ItemKind, key: StatisticKey) -> int:
        """Delete counters for an item; for conjugations a verb id resets its whole set.

        Returns the number of deleted records.
        """
        try:
            with self.db_connection.get_connection() as conn:
                if kind == ItemKind.CONJUGATION:
                    if isinstance(key, ConjugationKey):
                        cursor = conn.execute(
                            """
                            DELETE FROM conjugation_statistics
                            WHERE user_id = ? AND verb_id = ? AND mood = ?
                                AND tense = ? AND person = ?
                            """,
                            (user_id, *key),
                        )
                    else:
                        cursor = conn.execute(
                            "DELETE FROM conjugation_statistics WHERE user_id = ? AND verb_id = ?",
                            (user_id, key),
                        )
                else:
                    table = ITEM_STATISTICS_TABLES[kind]
                    cursor = conn.execute(
                        f"DELETE FROM {table} WHERE user_id = ? AND item_id = ?",  # noqa: S608
                        (user_id, key),
                    )

                conn.commit()
                logger.info(
                    f"Reset {cursor.rowcount} {kind.value} statistic(s) for user {user_id}, key {key}"
                )
                return cursor.rowcount
        except Exception as e:
            logger.error(f"Error resetting statistics for user {user_id}, {kind.value} {key}: {e}")
            raise
