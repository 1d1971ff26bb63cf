"""
Bulk import of catalog items with conflict resolution
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core.database.models import ItemKind
from ..errors import ConflictError, NotFoundError, PayloadValidationError
from ..practice.providers import ImportSink
from ..utils import log_execution_time
from .resolver import (
    ImportDetection,
    MergePlan,
    Resolution,
    detect_conflicts,
    parse_resolutions,
    plan_merge,
    require_resolved,
)
from .schemas import validate_batch

logger = logging.getLogger(__name__)


class ImportState(str, Enum):
    """Lifecycle of one import attempt"""
    IDLE = "idle"
    DETECTING = "detecting"
    NO_CONFLICTS = "no_conflicts"
    HAS_CONFLICTS = "has_conflicts"
    AWAITING_RESOLUTION = "awaiting_resolution"
    APPLYING_CREATE = "applying_create"
    APPLYING_MERGE = "applying_merge"
    DONE = "done"
    CANCELLED = "cancelled"


TRANSITIONS: dict[ImportState, set[ImportState]] = {
    ImportState.IDLE: {ImportState.DETECTING},
    ImportState.DETECTING: {ImportState.NO_CONFLICTS, ImportState.HAS_CONFLICTS},
    ImportState.NO_CONFLICTS: {ImportState.APPLYING_CREATE},
    ImportState.HAS_CONFLICTS: {ImportState.AWAITING_RESOLUTION, ImportState.APPLYING_MERGE},
    ImportState.AWAITING_RESOLUTION: {ImportState.DETECTING, ImportState.CANCELLED},
    ImportState.APPLYING_CREATE: {ImportState.DONE},
    ImportState.APPLYING_MERGE: {ImportState.DONE},
    ImportState.DONE: {ImportState.DETECTING},
    ImportState.CANCELLED: {ImportState.DETECTING},
}


@dataclass
class ImportResult:
    """Outcome of an applied import"""

    kind: ItemKind
    created: int
    updated: int
    skipped: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Successfully imported {self.created} new {self.kind.plural} "
            f"and updated {self.updated} existing {self.kind.plural}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "unchanged": self.unchanged,
        }


class ImportService:
    """Runs import attempts against a sink, one attempt at a time"""

    def __init__(self, sink: ImportSink):
        self.sink = sink
        self.state = ImportState.IDLE
        self.pending_conflicts: list[dict[str, Any]] = []

    def _transition(self, new_state: ImportState):
        if new_state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid import transition {self.state.value} -> {new_state.value}")
        logger.debug(f"Import state {self.state.value} -> {new_state.value}")
        self.state = new_state

    def detect(self, kind: ItemKind, raw: Any) -> ImportDetection:
        """Validate a batch and compare it with the catalog without writing"""
        batch = validate_batch(kind, raw)

        if kind == ItemKind.CONJUGATION:
            missing = self.sink.find_missing_verbs(list(batch))
            if missing:
                logger.warning(f"Conjugation import names unknown verbs: {missing}")
                raise NotFoundError("Verb", missing)

        existing = self.sink.existing_payloads(kind, list(batch))
        return detect_conflicts(batch, existing)

    @log_execution_time
    def import_batch(
        self,
        kind: ItemKind,
        raw: Any,
        resolutions: dict[str, Resolution | str] | None = None,
    ) -> ImportResult:
        """Validate, detect and apply an import.

        Raises ConflictError listing the conflicts when any conflict lacks a
        resolution; the caller re-invokes with the same batch and a
        resolution for each conflicting key.
        """
        try:
            parsed_resolutions = parse_resolutions(resolutions)
        except ValueError as e:
            raise PayloadValidationError(f"Invalid conflict resolution: {e}") from e

        self._transition(ImportState.DETECTING)
        try:
            detection = self.detect(kind, raw)
        except Exception:
            self.state = ImportState.IDLE
            raise

        if not detection.has_conflicts:
            self._transition(ImportState.NO_CONFLICTS)
            self._transition(ImportState.APPLYING_CREATE)
            plan = plan_merge(detection)
        else:
            self._transition(ImportState.HAS_CONFLICTS)
            plan = plan_merge(detection, parsed_resolutions)
            if not plan.is_complete:
                self.pending_conflicts = [entry.to_dict() for entry in detection.conflicts]
                self._transition(ImportState.AWAITING_RESOLUTION)
                logger.info(
                    f"{kind.value} import has {len(plan.unresolved)} unresolved conflict(s)"
                )
                raise ConflictError(self.pending_conflicts)
            self._transition(ImportState.APPLYING_MERGE)

        return self._apply(kind, require_resolved(plan))

    def _apply(self, kind: ItemKind, plan: MergePlan) -> ImportResult:
        try:
            counts = self.sink.apply_merge_plan(kind, plan.to_create, plan.to_update)
        except Exception as e:
            logger.error(f"Error applying {kind.value} import: {e}")
            self.state = ImportState.IDLE
            raise

        self.pending_conflicts = []
        self._transition(ImportState.DONE)
        result = ImportResult(
            kind=kind,
            created=counts["created"],
            updated=counts["updated"],
            skipped=list(plan.to_skip),
            unchanged=list(plan.unchanged),
        )
        logger.info(result.message)
        return result

    def cancel(self) -> bool:
        """Abandon an import that is waiting for conflict resolutions"""
        if self.state != ImportState.AWAITING_RESOLUTION:
            return False
        self._transition(ImportState.CANCELLED)
        self.pending_conflicts = []
        logger.info("Import cancelled")
        return True
