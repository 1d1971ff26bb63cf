"""
Tests for practice item builders
"""

import pytest

from italian_practice.core.database.models import ConjugationKey, ItemKind
from italian_practice.errors import ValidationMismatchError
from italian_practice.practice.items import (
    SIMPLE_FORM_PERSON,
    adjective_item_from_row,
    conjugation_field,
    conjugation_item_from_row,
    flatten_conjugation,
    noun_item_from_row,
    parse_conjugation_field,
    verb_item_from_row,
)


@pytest.fixture
def conjugation():
    return {
        "Indicativo": {
            "Presente": {"io": "parlo", "tu": "parli", "lui/lei": "parla"},
            "Passato Prossimo": {"io": "ho parlato"},
        },
        "Participio": {"Passato": "parlato"},
    }


class TestRowBuilders:
    """Test building items from catalog rows"""

    def test_verb_item(self):
        row = {
            "id": 1,
            "italian": "parlare",
            "payload": {"regular": True, "reflexive": False, "tr_ptBR": "falar", "tr_en": "to speak"},
        }
        item = verb_item_from_row(row)

        assert item.kind == ItemKind.VERB
        assert item.translation == "falar"
        assert item.answer_fields() == {"italian": "parlare"}
        assert item.sort_key == "parlare"

    def test_verb_item_english_translation(self):
        row = {
            "id": 1,
            "italian": "parlare",
            "payload": {"regular": True, "reflexive": False, "tr_ptBR": "falar", "tr_en": "to speak"},
        }
        assert verb_item_from_row(row, language="en").translation == "to speak"

    def test_verb_item_english_falls_back_to_portuguese(self):
        row = {
            "id": 1,
            "italian": "parlare",
            "payload": {"regular": True, "reflexive": False, "tr_ptBR": "falar", "tr_en": None},
        }
        assert verb_item_from_row(row, language="en").translation == "falar"

    def test_noun_item(self):
        row = {
            "id": 2,
            "italian": "libro",
            "payload": {
                "singolare": {"it": "libro", "pt": "livro", "en": "book"},
                "plurale": {"it": "libri", "pt": "livros", "en": "books"},
            },
        }
        item = noun_item_from_row(row)

        assert item.answer_fields() == {"singular": "libro", "plural": "libri"}
        assert item.translation == "livro"
        assert item.translation_plural == "livros"

    def test_adjective_item(self):
        row = {
            "id": 3,
            "italian": "bello",
            "payload": {
                "maschile": {
                    "singolare": {"it": "bello", "pt": "bonito", "en": "beautiful"},
                    "plurale": {"it": "belli", "pt": "bonitos", "en": "beautiful"},
                },
                "femminile": {
                    "singolare": {"it": "bella", "pt": "bonita", "en": "beautiful"},
                    "plurale": {"it": "belle", "pt": "bonitas", "en": "beautiful"},
                },
            },
        }
        item = adjective_item_from_row(row, language="en")

        assert item.translation == "beautiful"
        assert item.answer_fields() == {
            "masculine_singular": "bello",
            "masculine_plural": "belli",
            "feminine_singular": "bella",
            "feminine_plural": "belle",
        }


class TestConjugations:
    """Test conjugation flattening and fields"""

    def test_flatten_all_tenses(self, conjugation):
        forms = flatten_conjugation(conjugation)

        assert forms[("Indicativo", "Presente", "io")] == "parlo"
        assert forms[("Participio", "Passato", SIMPLE_FORM_PERSON)] == "parlato"
        assert len(forms) == 5

    def test_flatten_enabled_tenses_only(self, conjugation):
        forms = flatten_conjugation(conjugation, ["Indicativo.Presente"])
        assert list(forms) == [
            ("Indicativo", "Presente", "io"),
            ("Indicativo", "Presente", "tu"),
            ("Indicativo", "Presente", "lui/lei"),
        ]

    def test_flatten_skips_unknown_tense(self, conjugation):
        assert flatten_conjugation(conjugation, ["Congiuntivo.Presente"]) == {}

    def test_conjugation_item_fields_and_keys(self, conjugation):
        row = {
            "id": 9,
            "italian": "parlare",
            "regular": True,
            "reflexive": False,
            "tr_ptBR": "falar",
            "conjugation": conjugation,
        }
        item = conjugation_item_from_row(row, ["Indicativo.Presente"])

        assert item.answer_fields()["Indicativo:Presente:io"] == "parlo"
        assert item.statistic_key("Indicativo:Presente:tu") == ConjugationKey(
            9, "Indicativo", "Presente", "tu"
        )

    def test_statistic_key_missing_person(self, conjugation):
        row = {"id": 9, "italian": "parlare", "conjugation": conjugation}
        item = conjugation_item_from_row(row, ["Indicativo.Presente"])

        with pytest.raises(ValidationMismatchError):
            item.statistic_key("Indicativo:Presente:noi")

    def test_field_round_trip(self):
        field_name = conjugation_field("Indicativo", "Presente", "io")
        assert parse_conjugation_field(field_name) == ("Indicativo", "Presente", "io")

    def test_malformed_field(self):
        with pytest.raises(ValidationMismatchError):
            parse_conjugation_field("Indicativo:Presente")
