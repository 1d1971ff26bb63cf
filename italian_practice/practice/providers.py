"""
Collaborator interfaces consumed by the practice engine and the importer
"""

from typing import Any, Protocol

from ..core.database.models import ItemKind, ItemStatistic, StatisticKey
from .items import PracticeItem


class CatalogProvider(Protocol):
    """Read access to the item catalog"""

    def list_items(self, kind: ItemKind, user_id: int | None = None) -> list[PracticeItem]:
        ...

    def get_item_by_key(self, kind: ItemKind, key: str) -> PracticeItem | None:
        ...


class StatisticsProvider(Protocol):
    """Per-user correct/wrong counters"""

    def get_statistics(self, user_id: int, kind: ItemKind) -> dict[StatisticKey, ItemStatistic]:
        ...

    def record_attempt(
        self, user_id: int, kind: ItemKind, key: StatisticKey, correct: bool
    ) -> ItemStatistic:
        ...

    def reset_statistic(self, user_id: int, kind: ItemKind, key: StatisticKey) -> int:
        ...


class ImportSink(Protocol):
    """Catalog writes for bulk import"""

    def existing_payloads(self, kind: ItemKind, keys: list[str]) -> dict[str, dict[str, Any]]:
        ...

    def find_missing_verbs(self, keys: list[str]) -> list[str]:
        ...

    def apply_merge_plan(
        self,
        kind: ItemKind,
        to_create: dict[str, dict[str, Any]],
        to_update: dict[str, dict[str, Any]],
    ) -> dict[str, int]:
        ...
