"""
Practice session controller
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field, replace
from datetime import datetime

from ..core.database.models import (
    ConjugationKey,
    ItemKind,
    ItemStatistic,
    StatisticKey,
)
from ..errors import NotFoundError
from ..utils import Timer, calculate_success_rate, log_execution_time
from .grading import (
    GradeMode,
    GradeResult,
    ValidationOutcome,
    expected_answer,
    grade_field,
    item_attempt_result,
)
from .items import ConjugationItem, PracticeItem
from .locks import ItemLockManager
from .providers import CatalogProvider, StatisticsProvider
from .selection import (
    SessionConfig,
    SessionView,
    SortOption,
    build_session_view,
    item_statistic,
)

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Mutable state of one practice session"""

    user_id: int
    kind: ItemKind
    config: SessionConfig
    items: list[PracticeItem] = field(default_factory=list)
    statistics: dict[StatisticKey, ItemStatistic] = field(default_factory=dict)
    snapshot: dict[StatisticKey, ItemStatistic] = field(default_factory=dict)
    seed: int = 0
    generation: int = 0
    inputs: dict[int, dict[str, str]] = field(default_factory=dict)
    outcomes: dict[int, dict[str, ValidationOutcome]] = field(default_factory=dict)
    correct_answers: int = 0
    total_answers: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    def record_answer(self, correct: bool):
        """Record a committed attempt for the session summary"""
        self.total_answers += 1
        if correct:
            self.correct_answers += 1

    @property
    def success_rate(self) -> float:
        return calculate_success_rate(self.correct_answers, self.total_answers)


class PracticeSession:
    """Drives one learner's practice of one item kind.

    Selection and grading are synchronous; reads and writes of the store run
    in a worker thread. Every configuration change bumps the view
    generation. Writes that complete after a newer generation exists still
    update the session statistics but are left out of the session totals.
    """

    def __init__(
        self,
        catalog: CatalogProvider,
        statistics: StatisticsProvider,
        user_id: int,
        kind: ItemKind,
        config: SessionConfig | None = None,
        lock_manager: ItemLockManager | None = None,
        rng: random.Random | None = None,
    ):
        self.catalog = catalog
        self.statistics = statistics
        self.lock_manager = lock_manager or ItemLockManager()
        self._rng = rng or random.Random()
        self.timer = Timer()
        self.state = SessionState(
            user_id=user_id,
            kind=kind,
            config=config or SessionConfig.from_settings(),
            seed=self._new_seed(),
        )

    def _new_seed(self) -> int:
        return self._rng.randrange(2**32)

    @log_execution_time
    async def load(self) -> SessionView:
        """Load the catalog and the learner's statistics"""
        state = self.state
        items = await asyncio.to_thread(self.catalog.list_items, state.kind, state.user_id)
        stats = await asyncio.to_thread(
            self.statistics.get_statistics, state.user_id, state.kind
        )

        state.items = list(items)
        state.statistics = dict(stats)
        state.snapshot = dict(stats)
        state.generation += 1
        self.timer.start()

        logger.info(
            f"Loaded {len(state.items)} {state.kind.plural} for user {state.user_id}"
        )
        return self.view

    @property
    def view(self) -> SessionView:
        state = self.state
        return build_session_view(
            state.items,
            state.statistics,
            state.config,
            seed=state.seed,
            snapshot=state.snapshot,
            inputs=state.inputs,
            outcomes=state.outcomes,
            generation=state.generation,
        )

    def change_config(self, **changes) -> SessionView:
        """Apply filter, sort or cap changes.

        Selecting a sort option re-rolls the random seed and recaptures the
        statistics snapshot; other changes keep the current order inputs.
        """
        state = self.state
        new_config = replace(state.config, **changes)
        sort_selected = "sort_option" in changes

        state.config = new_config
        if sort_selected:
            state.seed = self._new_seed()
            state.snapshot = dict(state.statistics)
        state.generation += 1

        logger.debug(f"Session config changed for user {state.user_id}: {changes}")
        return self.view

    def change_sort(self, sort_option: SortOption | str) -> SessionView:
        return self.change_config(sort_option=SortOption(sort_option))

    def refresh(self) -> SessionView:
        """Re-roll the random order or re-rank by current statistics"""
        state = self.state
        if state.config.sort_option == SortOption.RANDOM:
            state.seed = self._new_seed()
        state.snapshot = dict(state.statistics)
        state.generation += 1
        logger.debug(f"Refreshed session for user {state.user_id}")
        return self.view

    def get_item(self, item_id: int) -> PracticeItem:
        for item in self.state.items:
            if item.id == item_id:
                return item
        raise NotFoundError(self.state.kind.value.capitalize(), [str(item_id)])

    def set_input(self, item_id: int, field_name: str, value: str):
        """Store typed input; editing a field clears its outcome"""
        item = self.get_item(item_id)
        expected_answer(item, field_name)
        self.state.inputs.setdefault(item_id, {})[field_name] = value
        self.state.outcomes.get(item_id, {}).pop(field_name, None)

    def clear_input(self, item_id: int, field_name: str):
        item = self.get_item(item_id)
        expected_answer(item, field_name)
        self.state.inputs.get(item_id, {}).pop(field_name, None)
        self.state.outcomes.get(item_id, {}).pop(field_name, None)

    def show_answer(self, item_id: int) -> dict[str, str]:
        """Fill every field with its expected value without touching counters"""
        item = self.get_item(item_id)
        answers = item.answer_fields()
        self.state.inputs[item_id] = dict(answers)
        self.state.outcomes[item_id] = {
            name: ValidationOutcome.CORRECT for name in answers
        }
        logger.debug(f"Revealed answers for {item.kind.value} '{item.italian}'")
        return dict(answers)

    async def validate(
        self, item_id: int, field_name: str, mode: GradeMode
    ) -> GradeResult:
        """Grade one field; only ``GradeMode.COMMIT`` records an attempt"""
        state = self.state
        item = self.get_item(item_id)
        expected = expected_answer(item, field_name)
        user_input = state.inputs.get(item_id, {}).get(field_name, "")
        outcome = grade_field(item, field_name, user_input)

        item_outcomes = state.outcomes.setdefault(item_id, {})
        if outcome == ValidationOutcome.UNSET:
            item_outcomes.pop(field_name, None)
            return GradeResult(item_id, field_name, outcome, expected)

        item_outcomes[field_name] = outcome
        if mode == GradeMode.PREVIEW:
            return GradeResult(item_id, field_name, outcome, expected)

        correct = item_attempt_result(item, field_name, item_outcomes)
        if correct is None:
            return GradeResult(item_id, field_name, outcome, expected)

        if isinstance(item, ConjugationItem):
            key: StatisticKey = item.statistic_key(field_name)
        else:
            key = item.id

        generation = state.generation
        async with self.lock_manager.hold((state.kind, item.id), "record_attempt"):
            statistic = await asyncio.to_thread(
                self.statistics.record_attempt, state.user_id, state.kind, key, correct
            )

        state.statistics[key] = statistic
        if generation != state.generation:
            logger.info(
                f"Not counting stale grade result for {item.kind.value} '{item.italian}' "
                f"(generation {generation}, current {state.generation})"
            )
        else:
            state.record_answer(correct)

        return GradeResult(
            item_id,
            field_name,
            outcome,
            expected,
            persist=True,
            correct_for_statistics=correct,
            statistic=statistic,
        )

    async def reset_statistics(self, item_id: int) -> bool:
        """Reset an item's counters; a verb's whole conjugation set for conjugations.

        Returns False without touching the store when there is nothing to reset.
        """
        state = self.state
        item = self.get_item(item_id)
        current = item_statistic(item, state.statistics)
        if current["correct_attempts"] == 0 and current["wrong_attempts"] == 0:
            logger.debug(f"Nothing to reset for {item.kind.value} '{item.italian}'")
            return False

        generation = state.generation
        async with self.lock_manager.hold((state.kind, item.id), "reset_statistic"):
            await asyncio.to_thread(
                self.statistics.reset_statistic, state.user_id, state.kind, item.id
            )

        if generation != state.generation:
            logger.info(
                f"Reset for {item.kind.value} '{item.italian}' finished after a view change"
            )

        if isinstance(item, ConjugationItem):
            for key in list(state.statistics):
                if isinstance(key, ConjugationKey) and key.verb_id == item.id:
                    del state.statistics[key]
        else:
            state.statistics.pop(item.id, None)

        logger.info(f"Reset statistics for {item.kind.value} '{item.italian}'")
        return True

    def summary(self) -> dict:
        """Session totals for display at the end of practice"""
        self.timer.stop()
        return {
            "kind": self.state.kind.value,
            "correct_answers": self.state.correct_answers,
            "total_answers": self.state.total_answers,
            "success_rate": self.state.success_rate,
            "duration_seconds": self.timer.elapsed(),
        }


def create_session(
    db_manager,
    user_id: int,
    kind: ItemKind,
    **config_overrides,
) -> PracticeSession:
    """Create a session backed by the database manager, using the user's profile threshold"""
    profile = db_manager.get_profile(user_id)
    config_overrides.setdefault("mastery_threshold", profile["mastery_threshold"])
    config = SessionConfig.from_settings(**config_overrides)
    logger.debug(f"Creating {kind.value} session for user {user_id}")
    return PracticeSession(db_manager, db_manager, user_id, kind, config=config)
