"""
Import conflict detection and merge planning.

Everything here is pure: the same batch, catalog snapshot and resolutions
always produce the same plan, so a caller may re-run detection after a
conflict response without side effects.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import UnresolvedConflictError

logger = logging.getLogger(__name__)

Payload = dict[str, Any]


class Resolution(str, Enum):
    """Operator decision for a conflicting key"""
    KEEP = "keep"
    REPLACE = "replace"


@dataclass(frozen=True)
class ConflictEntry:
    """A key present in both the batch and the catalog with different content"""

    key: str
    existing: Payload
    new: Payload

    def to_dict(self) -> dict[str, Any]:
        return {"italian": self.key, "existing": self.existing, "new": self.new}


@dataclass
class ImportDetection:
    """Batch partitioned against the current catalog"""

    batch: dict[str, Payload]
    to_create: dict[str, Payload] = field(default_factory=dict)
    unchanged: list[str] = field(default_factory=list)
    conflicts: list[ConflictEntry] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def conflict_keys(self) -> list[str]:
        return [entry.key for entry in self.conflicts]


@dataclass
class MergePlan:
    """Write set of an import; every batch key is in exactly one partition"""

    to_create: dict[str, Payload] = field(default_factory=dict)
    to_update: dict[str, Payload] = field(default_factory=dict)
    to_skip: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    unresolved: list[ConflictEntry] = field(default_factory=list)

    @property
    def unresolved_keys(self) -> list[str]:
        return [entry.key for entry in self.unresolved]

    @property
    def is_complete(self) -> bool:
        return not self.unresolved

    def total(self) -> int:
        return (
            len(self.to_create)
            + len(self.to_update)
            + len(self.to_skip)
            + len(self.unchanged)
            + len(self.unresolved)
        )


def detect_conflicts(batch: Mapping[str, Payload], existing: Mapping[str, Payload]) -> ImportDetection:
    """Classify each batch key as create, no-op or conflict.

    ``existing`` maps catalog keys to their stored payloads; payloads are
    compared by deep equality.
    """
    detection = ImportDetection(batch=dict(batch))
    for key, payload in batch.items():
        if key not in existing:
            detection.to_create[key] = payload
        elif existing[key] == payload:
            detection.unchanged.append(key)
        else:
            detection.conflicts.append(ConflictEntry(key, existing[key], payload))

    logger.debug(
        f"Detected {len(detection.to_create)} new, {len(detection.unchanged)} unchanged, "
        f"{len(detection.conflicts)} conflicting record(s)"
    )
    return detection


def parse_resolutions(raw: Mapping[str, Any] | None) -> dict[str, Resolution]:
    """Coerce ``{key: "keep" | "replace"}`` into Resolution values"""
    if not raw:
        return {}
    return {key: Resolution(value) for key, value in raw.items()}


def plan_merge(
    detection: ImportDetection, resolutions: Mapping[str, Resolution | str] | None = None
) -> MergePlan:
    """Apply operator resolutions to a detection.

    Conflicts without a resolution land in ``unresolved`` and are never
    written. Resolutions for keys that are not conflicts are ignored.
    """
    resolutions = parse_resolutions(resolutions)
    plan = MergePlan(
        to_create=dict(detection.to_create),
        unchanged=list(detection.unchanged),
    )

    for entry in detection.conflicts:
        resolution = resolutions.get(entry.key)
        if resolution == Resolution.REPLACE:
            plan.to_update[entry.key] = entry.new
        elif resolution == Resolution.KEEP:
            plan.to_skip.append(entry.key)
        else:
            plan.unresolved.append(entry)

    return plan


def require_resolved(plan: MergePlan) -> MergePlan:
    """Return the plan if it can be applied, else raise UnresolvedConflictError"""
    if plan.unresolved:
        raise UnresolvedConflictError(plan.unresolved_keys)
    return plan
