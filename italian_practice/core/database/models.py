"""
Database models for the Italian practice core
"""

from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple, TypedDict


class ItemKind(str, Enum):
    """Catalog item kinds"""
    VERB = "verb"
    NOUN = "noun"
    ADJECTIVE = "adjective"
    CONJUGATION = "conjugation"

    @property
    def plural(self) -> str:
        return {
            ItemKind.VERB: "verbs",
            ItemKind.NOUN: "nouns",
            ItemKind.ADJECTIVE: "adjectives",
            ItemKind.CONJUGATION: "conjugations",
        }[self]


class User(TypedDict):
    """User model"""
    id: int
    username: str
    is_admin: bool
    created_at: datetime
    updated_at: datetime


class UserProfile(TypedDict):
    """Per-user practice preferences"""
    user_id: int
    mastery_threshold: int
    enabled_verb_tenses: list[str]


class CatalogRow(TypedDict):
    """A stored catalog item: its natural key plus the import-shaped payload"""
    id: int
    italian: str
    payload: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class ConjugationKey(NamedTuple):
    """Composite key used for conjugation statistics"""
    verb_id: int
    mood: str
    tense: str
    person: str

    def as_string(self) -> str:
        return f"{self.verb_id}:{self.mood}:{self.tense}:{self.person}"


class ItemStatistic(TypedDict):
    """Per-(user, item) practice counters"""
    correct_attempts: int
    wrong_attempts: int
    last_practiced: datetime | None


StatisticKey = int | ConjugationKey


def empty_statistic() -> ItemStatistic:
    """Statistic used for items that were never graded"""
    return {"correct_attempts": 0, "wrong_attempts": 0, "last_practiced": None}
