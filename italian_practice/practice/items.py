"""
Practice item variants and builders from stored catalog rows
"""

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..core.database.models import CatalogRow, ConjugationKey, ItemKind
from ..errors import ValidationMismatchError

logger = logging.getLogger(__name__)

SIMPLE_FORM_PERSON = "form"


def conjugation_field(mood: str, tense: str, person: str) -> str:
    """Input key for one conjugation form"""
    return f"{mood}:{tense}:{person}"


def parse_conjugation_field(field_name: str) -> tuple[str, str, str]:
    parts = field_name.split(":")
    if len(parts) != 3 or not all(parts):
        raise ValidationMismatchError(f"Malformed conjugation field '{field_name}'")
    return parts[0], parts[1], parts[2]


@dataclass(frozen=True)
class VerbItem:
    """Verb translation drill: type the infinitive"""

    kind: ClassVar[ItemKind] = ItemKind.VERB

    id: int
    italian: str
    translation: str
    regular: bool
    reflexive: bool

    @property
    def sort_key(self) -> str:
        return self.italian

    def answer_fields(self) -> dict[str, str]:
        return {"italian": self.italian}


@dataclass(frozen=True)
class NounItem:
    """Noun translation drill: type singular and plural"""

    kind: ClassVar[ItemKind] = ItemKind.NOUN

    id: int
    italian: str
    italian_plural: str
    translation: str
    translation_plural: str

    @property
    def sort_key(self) -> str:
        return self.italian

    def answer_fields(self) -> dict[str, str]:
        return {"singular": self.italian, "plural": self.italian_plural}


@dataclass(frozen=True)
class AdjectiveItem:
    """Adjective drill: type the four inflected forms"""

    kind: ClassVar[ItemKind] = ItemKind.ADJECTIVE

    id: int
    italian: str
    translation: str
    masculine_singular: str
    masculine_plural: str
    feminine_singular: str
    feminine_plural: str

    @property
    def sort_key(self) -> str:
        return self.italian

    def answer_fields(self) -> dict[str, str]:
        return {
            "masculine_singular": self.masculine_singular,
            "masculine_plural": self.masculine_plural,
            "feminine_singular": self.feminine_singular,
            "feminine_plural": self.feminine_plural,
        }


@dataclass(frozen=True)
class ConjugationItem:
    """Conjugation drill for one verb: one field per (mood, tense, person)"""

    kind: ClassVar[ItemKind] = ItemKind.CONJUGATION

    id: int
    italian: str
    translation: str
    regular: bool
    reflexive: bool
    forms: dict[tuple[str, str, str], str] = field(default_factory=dict, hash=False)

    @property
    def sort_key(self) -> str:
        return self.italian

    def answer_fields(self) -> dict[str, str]:
        return {
            conjugation_field(mood, tense, person): form
            for (mood, tense, person), form in self.forms.items()
        }

    def statistic_key(self, field_name: str) -> ConjugationKey:
        mood, tense, person = parse_conjugation_field(field_name)
        if (mood, tense, person) not in self.forms:
            raise ValidationMismatchError(
                f"Verb '{self.italian}' has no form for {mood} {tense} {person}"
            )
        return ConjugationKey(self.id, mood, tense, person)


PracticeItem = VerbItem | NounItem | AdjectiveItem | ConjugationItem


def _pick_translation(translations: dict[str, Any], language: str) -> str:
    """Translation in the requested language, falling back to Portuguese"""
    return translations.get(language) or translations.get("pt") or ""


def verb_item_from_row(row: CatalogRow, language: str = "pt") -> VerbItem:
    payload = row["payload"]
    translation = payload.get("tr_ptBR") or ""
    if language == "en" and payload.get("tr_en"):
        translation = payload["tr_en"]
    return VerbItem(
        id=row["id"],
        italian=row["italian"],
        translation=translation,
        regular=bool(payload.get("regular")),
        reflexive=bool(payload.get("reflexive")),
    )


def noun_item_from_row(row: CatalogRow, language: str = "pt") -> NounItem:
    singolare = row["payload"].get("singolare", {})
    plurale = row["payload"].get("plurale", {})
    return NounItem(
        id=row["id"],
        italian=singolare.get("it") or row["italian"],
        italian_plural=plurale.get("it", ""),
        translation=_pick_translation(singolare, language),
        translation_plural=_pick_translation(plurale, language),
    )


def adjective_item_from_row(row: CatalogRow, language: str = "pt") -> AdjectiveItem:
    maschile = row["payload"].get("maschile", {})
    femminile = row["payload"].get("femminile", {})
    masc_sing = maschile.get("singolare", {})
    return AdjectiveItem(
        id=row["id"],
        italian=row["italian"],
        translation=_pick_translation(masc_sing, language),
        masculine_singular=masc_sing.get("it", ""),
        masculine_plural=maschile.get("plurale", {}).get("it", ""),
        feminine_singular=femminile.get("singolare", {}).get("it", ""),
        feminine_plural=femminile.get("plurale", {}).get("it", ""),
    )


def flatten_conjugation(
    conjugation: dict[str, Any], enabled_tenses: list[str] | None = None
) -> dict[tuple[str, str, str], str]:
    """Flatten {mood: {tense: {person: form} | form}} into per-person forms.

    Only 'Mood.Tense' keys listed in enabled_tenses are kept, in that order;
    None keeps every tense in table order.
    """
    if enabled_tenses is None:
        pairs = [
            (mood, tense)
            for mood, tenses in conjugation.items()
            if isinstance(tenses, dict)
            for tense in tenses
        ]
    else:
        pairs = []
        for tense_key in enabled_tenses:
            mood, _, tense = tense_key.partition(".")
            if mood and tense:
                pairs.append((mood, tense))

    forms: dict[tuple[str, str, str], str] = {}
    for mood, tense in pairs:
        tense_data = (conjugation.get(mood) or {}).get(tense)
        if tense_data is None:
            continue
        if isinstance(tense_data, str):
            forms[(mood, tense, SIMPLE_FORM_PERSON)] = tense_data
        elif isinstance(tense_data, dict):
            for person, form in tense_data.items():
                forms[(mood, tense, person)] = form
        else:
            logger.warning(f"Skipping malformed conjugation data for {mood}.{tense}")
    return forms


def conjugation_item_from_row(
    row: dict[str, Any], enabled_tenses: list[str] | None = None, language: str = "pt"
) -> ConjugationItem:
    translation = row.get("tr_ptBR") or ""
    if language == "en" and row.get("tr_en"):
        translation = row["tr_en"]
    return ConjugationItem(
        id=row["id"],
        italian=row["italian"],
        translation=translation,
        regular=bool(row.get("regular")),
        reflexive=bool(row.get("reflexive")),
        forms=flatten_conjugation(row.get("conjugation") or {}, enabled_tenses),
    )


ROW_BUILDERS = {
    ItemKind.VERB: verb_item_from_row,
    ItemKind.NOUN: noun_item_from_row,
    ItemKind.ADJECTIVE: adjective_item_from_row,
}
