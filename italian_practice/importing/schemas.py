"""
Payload schemas for bulk catalog import
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError

from ..config import get_settings
from ..core.database.models import ItemKind
from ..errors import PayloadValidationError

logger = logging.getLogger(__name__)


class VerbPayload(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    regular: bool
    reflexive: bool
    tr_ptBR: str = Field(min_length=1)
    tr_en: str | None = None


class Translations(BaseModel):
    """One inflected form with its translations"""

    model_config = ConfigDict(extra="forbid")

    it: str = Field(min_length=1)
    pt: str = Field(min_length=1)
    en: str = Field(min_length=1)


class NounPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    singolare: Translations
    plurale: Translations


class GenderForms(BaseModel):
    model_config = ConfigDict(extra="forbid")

    singolare: Translations
    plurale: Translations


class AdjectivePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    maschile: GenderForms
    femminile: GenderForms


class ConjugationPayload(RootModel[dict[str, dict[str, dict[str, str] | str]]]):
    """{mood: {tense: {person: form} | form}}"""


PAYLOAD_MODELS: dict[ItemKind, type[BaseModel]] = {
    ItemKind.VERB: VerbPayload,
    ItemKind.NOUN: NounPayload,
    ItemKind.ADJECTIVE: AdjectivePayload,
    ItemKind.CONJUGATION: ConjugationPayload,
}


def _error_details(key: str, error: ValidationError) -> list[dict[str, Any]]:
    return [
        {
            "key": key,
            "loc": ".".join(str(part) for part in detail["loc"]),
            "msg": detail["msg"],
        }
        for detail in error.errors()
    ]


def validate_batch(kind: ItemKind, raw: Any) -> dict[str, dict[str, Any]]:
    """Validate a raw ``{italian: payload}`` mapping.

    Returns normalized payloads in batch order. Every invalid record is
    reported in a single PayloadValidationError.
    """
    if not isinstance(raw, dict):
        raise PayloadValidationError(
            f"Expected an object of {kind.plural} keyed by Italian name"
        )

    max_records = get_settings().max_import_records
    if len(raw) > max_records:
        raise PayloadValidationError(
            f"Too many {kind.plural}: {len(raw)} (maximum {max_records})"
        )

    model = PAYLOAD_MODELS[kind]
    records: dict[str, dict[str, Any]] = {}
    details: list[dict[str, Any]] = []

    for key, payload in raw.items():
        if not isinstance(key, str) or not key.strip():
            details.append({"key": str(key), "loc": "", "msg": "Key must be a non-empty string"})
            continue
        if key.strip() != key:
            details.append({"key": key, "loc": "", "msg": "Key has surrounding whitespace"})
            continue
        try:
            records[key] = model.model_validate(payload).model_dump()
        except ValidationError as e:
            details.extend(_error_details(key, e))

    if details:
        logger.warning(f"Rejected {kind.value} import: {len(details)} validation error(s)")
        raise PayloadValidationError(f"Invalid {kind.value} import payload", details)

    return records
