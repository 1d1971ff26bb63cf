"""
Answer grading for practice drills
"""

import logging
from dataclasses import dataclass
from enum import Enum

from ..core.database.models import ItemStatistic
from ..errors import ValidationMismatchError
from .items import ConjugationItem, PracticeItem

logger = logging.getLogger(__name__)


class GradeMode(str, Enum):
    """Whether a validation only shows feedback or also records the attempt"""
    PREVIEW = "preview"
    COMMIT = "commit"


class ValidationOutcome(str, Enum):
    """Visual validation state of one answer field"""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNSET = "unset"


@dataclass(frozen=True)
class GradeResult:
    """Outcome of grading one field of an item"""

    item_id: int
    field: str
    outcome: ValidationOutcome
    expected: str
    persist: bool = False
    correct_for_statistics: bool | None = None
    statistic: ItemStatistic | None = None


def check_answer(user_input: str, expected: str) -> bool:
    """Exact, case-sensitive comparison of the trimmed input with the expected form"""
    return user_input.strip() == expected


def expected_answer(item: PracticeItem, field: str) -> str:
    """Expected value of one answer field"""
    fields = item.answer_fields()
    if field not in fields:
        raise ValidationMismatchError(
            f"{item.kind.value} '{item.italian}' has no answer field '{field}'"
        )
    expected = fields[field]
    if not isinstance(expected, str) or not expected:
        raise ValidationMismatchError(
            f"{item.kind.value} '{item.italian}' has an empty expected answer for '{field}'"
        )
    return expected


def grade_field(item: PracticeItem, field: str, user_input: str) -> ValidationOutcome:
    """Grade one field; blank input leaves the outcome unset"""
    expected = expected_answer(item, field)
    if not user_input.strip():
        return ValidationOutcome.UNSET
    if check_answer(user_input, expected):
        return ValidationOutcome.CORRECT
    return ValidationOutcome.INCORRECT


def item_attempt_result(
    item: PracticeItem,
    field: str,
    outcomes: dict[str, ValidationOutcome],
) -> bool | None:
    """Decide whether a graded field completes a recordable attempt.

    Conjugation forms are recorded one person at a time. Other items are
    recorded once every answer field has an outcome, and count as correct
    only when all of them are correct. Returns None when nothing should be
    recorded yet.
    """
    if isinstance(item, ConjugationItem):
        outcome = outcomes.get(field, ValidationOutcome.UNSET)
        if outcome == ValidationOutcome.UNSET:
            return None
        return outcome == ValidationOutcome.CORRECT

    fields = list(item.answer_fields())
    field_outcomes = [outcomes.get(name, ValidationOutcome.UNSET) for name in fields]
    if any(outcome == ValidationOutcome.UNSET for outcome in field_outcomes):
        return None
    return all(outcome == ValidationOutcome.CORRECT for outcome in field_outcomes)
