"""
Tests for answer grading
"""

import pytest

from italian_practice.errors import ValidationMismatchError
from italian_practice.practice.grading import (
    ValidationOutcome,
    check_answer,
    expected_answer,
    grade_field,
    item_attempt_result,
)
from italian_practice.practice.items import ConjugationItem, NounItem, VerbItem


@pytest.fixture
def verb():
    return VerbItem(id=1, italian="parlare", translation="falar", regular=True, reflexive=False)


@pytest.fixture
def noun():
    return NounItem(
        id=2, italian="libro", italian_plural="libri", translation="livro", translation_plural="livros"
    )


@pytest.fixture
def conjugation():
    return ConjugationItem(
        id=3,
        italian="parlare",
        translation="falar",
        regular=True,
        reflexive=False,
        forms={("Indicativo", "Presente", "io"): "parlo"},
    )


class TestCheckAnswer:
    """Test exact answer comparison"""

    def test_exact_match(self):
        assert check_answer("parlo", "parlo")

    def test_case_sensitive_and_trimmed(self):
        assert not check_answer("Parlo ", "parlo")

    def test_surrounding_whitespace_is_trimmed(self):
        assert check_answer("  parlo\t", "parlo")

    def test_no_accent_folding(self):
        assert not check_answer("citta", "città")

    def test_no_partial_credit(self):
        assert not check_answer("parl", "parlo")


class TestGradeField:
    """Test per-field grading"""

    def test_correct(self, verb):
        assert grade_field(verb, "italian", "parlare") == ValidationOutcome.CORRECT

    def test_incorrect(self, verb):
        assert grade_field(verb, "italian", "Parlare") == ValidationOutcome.INCORRECT

    def test_blank_is_unset(self, verb):
        assert grade_field(verb, "italian", "   ") == ValidationOutcome.UNSET

    def test_unknown_field(self, verb):
        with pytest.raises(ValidationMismatchError):
            grade_field(verb, "plural", "parlare")

    def test_conjugation_field(self, conjugation):
        assert expected_answer(conjugation, "Indicativo:Presente:io") == "parlo"
        with pytest.raises(ValidationMismatchError):
            expected_answer(conjugation, "Indicativo:Presente:tu")


class TestAttemptResult:
    """Test when a graded field becomes a recorded attempt"""

    def test_single_field_item(self, verb):
        outcomes = {"italian": ValidationOutcome.CORRECT}
        assert item_attempt_result(verb, "italian", outcomes) is True

    def test_multi_field_waits_for_all_fields(self, noun):
        outcomes = {"singular": ValidationOutcome.CORRECT}
        assert item_attempt_result(noun, "singular", outcomes) is None

    def test_multi_field_correct_only_if_all_correct(self, noun):
        outcomes = {
            "singular": ValidationOutcome.CORRECT,
            "plural": ValidationOutcome.INCORRECT,
        }
        assert item_attempt_result(noun, "plural", outcomes) is False

    def test_multi_field_all_correct(self, noun):
        outcomes = {
            "singular": ValidationOutcome.CORRECT,
            "plural": ValidationOutcome.CORRECT,
        }
        assert item_attempt_result(noun, "plural", outcomes) is True

    def test_conjugation_records_per_form(self, conjugation):
        field_name = "Indicativo:Presente:io"
        outcomes = {field_name: ValidationOutcome.INCORRECT}
        assert item_attempt_result(conjugation, field_name, outcomes) is False
