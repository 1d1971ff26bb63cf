"""
Session selection: filtering, sorting and capping practice items
"""

import logging
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from ..config import get_settings
from ..core.database.models import (
    ConjugationKey,
    ItemStatistic,
    StatisticKey,
    empty_statistic,
)
from .grading import ValidationOutcome
from .items import ConjugationItem, PracticeItem, VerbItem

logger = logging.getLogger(__name__)

DISPLAY_COUNTS = (10, 20, 30, "all")

Statistics = Mapping[StatisticKey, ItemStatistic]


class SortOption(str, Enum):
    """Available session orderings"""
    NONE = "none"
    ALPHABETICAL = "alphabetical"
    RANDOM = "random"
    MOST_ERRORS = "most-errors"
    WORST_PERFORMANCE = "worst-performance"

    @property
    def uses_statistics(self) -> bool:
        return self in (SortOption.MOST_ERRORS, SortOption.WORST_PERFORMANCE)

    @property
    def supports_refresh(self) -> bool:
        return self == SortOption.RANDOM or self.uses_statistics


class VerbTypeFilter(str, Enum):
    """Verb type filter for verb and conjugation practice"""
    ALL = "all"
    REGULAR = "regular"
    IRREGULAR = "irregular"
    REFLEXIVE = "reflexive"


@dataclass(frozen=True)
class SessionConfig:
    """Caller-supplied session configuration"""

    verb_type_filter: VerbTypeFilter = VerbTypeFilter.ALL
    exclude_mastered: bool = True
    mastery_threshold: int = 10
    sort_option: SortOption = SortOption.NONE
    display_count: int | str = 10

    def __post_init__(self):
        # Accept plain values from callers
        object.__setattr__(self, "verb_type_filter", VerbTypeFilter(self.verb_type_filter))
        object.__setattr__(self, "sort_option", SortOption(self.sort_option))
        if isinstance(self.display_count, str) and self.display_count.isdigit():
            object.__setattr__(self, "display_count", int(self.display_count))
        if self.display_count not in DISPLAY_COUNTS:
            raise ValueError(
                f"display_count must be one of {DISPLAY_COUNTS}, got {self.display_count!r}"
            )
        if self.mastery_threshold < 0:
            raise ValueError("mastery_threshold must be non-negative")

    @classmethod
    def from_settings(cls, **overrides) -> "SessionConfig":
        """Build a config from configured defaults"""
        settings = get_settings()
        values = {
            "exclude_mastered": settings.default_exclude_mastered,
            "mastery_threshold": settings.default_mastery_threshold,
            "sort_option": settings.default_sort_option,
            "display_count": settings.default_display_count,
        }
        values.update(overrides)
        return cls(**values)


@dataclass
class SessionViewEntry:
    """One item as presented in a session"""

    item: PracticeItem
    statistic: ItemStatistic
    inputs: dict[str, str] = field(default_factory=dict)
    outcomes: dict[str, ValidationOutcome] = field(default_factory=dict)


@dataclass
class SessionView:
    """Ordered, capped items of a session plus their per-field state"""

    entries: list[SessionViewEntry]
    total_items: int
    filtered_count: int
    mastered_count: int
    generation: int = 0

    @property
    def items(self) -> list[PracticeItem]:
        return [entry.item for entry in self.entries]


def item_statistic(item: PracticeItem, statistics: Statistics) -> ItemStatistic:
    """Statistic of an item; conjugation items sum their person-forms"""
    if isinstance(item, ConjugationItem):
        total = empty_statistic()
        for mood, tense, person in item.forms:
            stat = statistics.get(ConjugationKey(item.id, mood, tense, person))
            if not stat:
                continue
            total["correct_attempts"] += stat["correct_attempts"]
            total["wrong_attempts"] += stat["wrong_attempts"]
            last = stat["last_practiced"]
            if last and (total["last_practiced"] is None or last > total["last_practiced"]):
                total["last_practiced"] = last
        return total

    return statistics.get(item.id) or empty_statistic()


def is_mastered(statistic: ItemStatistic, mastery_threshold: int) -> bool:
    """Accuracy margin (correct - wrong) meets the threshold"""
    attempts = statistic["correct_attempts"] + statistic["wrong_attempts"]
    if attempts == 0:
        return False
    return statistic["correct_attempts"] - statistic["wrong_attempts"] >= mastery_threshold


def matches_verb_type(item: PracticeItem, verb_type_filter: VerbTypeFilter) -> bool:
    """Verb type predicate; non-verb items always match"""
    if verb_type_filter == VerbTypeFilter.ALL:
        return True
    if not isinstance(item, (VerbItem, ConjugationItem)):
        return True
    if verb_type_filter == VerbTypeFilter.REFLEXIVE:
        return item.reflexive
    if verb_type_filter == VerbTypeFilter.REGULAR:
        return item.regular and not item.reflexive
    return not item.regular and not item.reflexive


def filter_items(
    items: Sequence[PracticeItem], statistics: Statistics, config: SessionConfig
) -> list[PracticeItem]:
    """Apply the verb type filter and mastered-item exclusion"""
    result = []
    for item in items:
        if not matches_verb_type(item, config.verb_type_filter):
            continue
        if config.exclude_mastered and is_mastered(
            item_statistic(item, statistics), config.mastery_threshold
        ):
            continue
        result.append(item)
    return result


def mastered_count(
    items: Sequence[PracticeItem], statistics: Statistics, mastery_threshold: int
) -> int:
    """Number of mastered items, regardless of whether they are excluded"""
    return sum(
        1 for item in items if is_mastered(item_statistic(item, statistics), mastery_threshold)
    )


def accuracy(statistic: ItemStatistic) -> float:
    """correct / attempts; -1.0 for items never attempted so they rank worst"""
    attempts = statistic["correct_attempts"] + statistic["wrong_attempts"]
    if attempts == 0:
        return -1.0
    return statistic["correct_attempts"] / attempts


def shuffle_with_seed(items: Sequence[PracticeItem], seed: int) -> list[PracticeItem]:
    shuffled = list(items)
    random.Random(seed).shuffle(shuffled)
    return shuffled


def sort_items(
    items: Sequence[PracticeItem],
    statistics: Statistics,
    sort_option: SortOption,
    seed: int = 0,
) -> list[PracticeItem]:
    """Order items; list.sort is stable so ties keep catalog order"""
    result = list(items)

    if sort_option == SortOption.ALPHABETICAL:
        result.sort(key=lambda item: item.sort_key)
    elif sort_option == SortOption.RANDOM:
        result = shuffle_with_seed(result, seed)
    elif sort_option == SortOption.MOST_ERRORS:
        result.sort(key=lambda item: -item_statistic(item, statistics)["wrong_attempts"])
    elif sort_option == SortOption.WORST_PERFORMANCE:
        result.sort(key=lambda item: accuracy(item_statistic(item, statistics)))

    return result


def cap_items(items: Sequence[PracticeItem], display_count: int | str) -> list[PracticeItem]:
    if display_count == "all":
        return list(items)
    return list(items[:display_count])


def build_session_view(
    items: Sequence[PracticeItem],
    statistics: Statistics,
    config: SessionConfig,
    seed: int = 0,
    snapshot: Statistics | None = None,
    inputs: Mapping[int, dict[str, str]] | None = None,
    outcomes: Mapping[int, dict[str, ValidationOutcome]] | None = None,
    generation: int = 0,
) -> SessionView:
    """Filter, sort and cap items into a session view.

    Filtering, the mastered count and each entry read the live
    ``statistics``. ``snapshot`` holds the statistics captured when the
    ordering was chosen; only the statistics-based sorts read it.
    """
    ordering_stats = statistics if snapshot is None else snapshot
    inputs = inputs or {}
    outcomes = outcomes or {}

    filtered = filter_items(items, statistics, config)
    ordered = sort_items(filtered, ordering_stats, config.sort_option, seed)
    capped = cap_items(ordered, config.display_count)

    entries = [
        SessionViewEntry(
            item=item,
            statistic=item_statistic(item, statistics),
            inputs=dict(inputs.get(item.id, {})),
            outcomes=dict(outcomes.get(item.id, {})),
        )
        for item in capped
    ]

    logger.debug(
        f"Built session view: {len(entries)} of {len(filtered)} filtered "
        f"({len(items)} total), sort={config.sort_option.value}"
    )
    return SessionView(
        entries=entries,
        total_items=len(items),
        filtered_count=len(filtered),
        mastered_count=mastered_count(items, statistics, config.mastery_threshold),
        generation=generation,
    )
