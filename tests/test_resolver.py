"""
Tests for import conflict detection and merge planning
"""

import pytest

from italian_practice.errors import UnresolvedConflictError
from italian_practice.importing.resolver import (
    Resolution,
    detect_conflicts,
    plan_merge,
    require_resolved,
)


def adjective(masc_sing, pt="bonito"):
    forms = {"it": masc_sing, "pt": pt, "en": "beautiful"}
    return {
        "maschile": {"singolare": forms, "plurale": forms},
        "femminile": {"singolare": forms, "plurale": forms},
    }


class TestDetectConflicts:
    """Test batch classification against the catalog"""

    def test_absent_key_is_created(self):
        detection = detect_conflicts({"bello": adjective("bello")}, {})

        assert detection.to_create == {"bello": adjective("bello")}
        assert not detection.has_conflicts

    def test_identical_payload_is_noop(self):
        existing = {"bello": adjective("bello")}
        detection = detect_conflicts({"bello": adjective("bello")}, existing)

        assert detection.unchanged == ["bello"]
        assert detection.to_create == {}
        assert detection.conflicts == []

    def test_different_payload_is_conflict(self):
        existing = {"bello": adjective("bello", pt="bonito")}
        new = adjective("bello", pt="lindo")

        detection = detect_conflicts({"bello": new}, existing)

        assert len(detection.conflicts) == 1
        entry = detection.conflicts[0]
        assert entry.key == "bello"
        assert entry.existing == existing["bello"]
        assert entry.new == new
        assert entry.to_dict()["italian"] == "bello"

    def test_detection_is_idempotent(self):
        batch = {"bello": adjective("bello", pt="lindo"), "alto": adjective("alto")}
        existing = {"bello": adjective("bello")}

        first = detect_conflicts(batch, existing)
        second = detect_conflicts(batch, existing)

        assert first == second


class TestPlanMerge:
    """Test applying resolutions"""

    @pytest.fixture
    def detection(self):
        batch = {
            "alto": adjective("alto"),
            "bello": adjective("bello", pt="lindo"),
            "caro": adjective("caro", pt="querido"),
            "dolce": adjective("dolce"),
            "facile": adjective("facile", pt="simples"),
        }
        existing = {
            "bello": adjective("bello"),
            "caro": adjective("caro"),
            "dolce": adjective("dolce"),
            "facile": adjective("facile"),
        }
        return detect_conflicts(batch, existing)

    def test_replace_and_keep(self, detection):
        plan = plan_merge(detection, {"bello": Resolution.REPLACE, "caro": "keep"})

        assert list(plan.to_create) == ["alto"]
        assert list(plan.to_update) == ["bello"]
        assert plan.to_update["bello"]["maschile"]["singolare"]["pt"] == "lindo"
        assert plan.to_skip == ["caro"]
        assert plan.unchanged == ["dolce"]
        assert plan.unresolved_keys == ["facile"]

    def test_every_key_in_exactly_one_partition(self, detection):
        plan = plan_merge(detection, {"bello": "replace"})

        partitions = [
            set(plan.to_create),
            set(plan.to_update),
            set(plan.to_skip),
            set(plan.unchanged),
            set(plan.unresolved_keys),
        ]
        assert plan.total() == len(detection.batch)
        assert set().union(*partitions) == set(detection.batch)
        assert sum(len(p) for p in partitions) == len(detection.batch)

    def test_unresolved_keys_are_never_written(self, detection):
        plan = plan_merge(detection, {})

        written = set(plan.to_create) | set(plan.to_update)
        assert written.isdisjoint(plan.unresolved_keys)
        assert set(plan.unresolved_keys) == {"bello", "caro", "facile"}

    def test_require_resolved_raises_with_keys(self, detection):
        plan = plan_merge(detection, {"bello": "keep"})

        with pytest.raises(UnresolvedConflictError) as exc_info:
            require_resolved(plan)

        assert exc_info.value.keys == ["caro", "facile"]
        assert exc_info.value.status_code == 409

    def test_require_resolved_passes_complete_plan(self, detection):
        plan = plan_merge(detection, {"bello": "keep", "caro": "keep", "facile": "replace"})
        assert require_resolved(plan) is plan

    def test_resolution_for_non_conflict_is_ignored(self, detection):
        plan = plan_merge(detection, {"alto": "keep", "dolce": "replace"})

        assert "alto" in plan.to_create
        assert plan.unchanged == ["dolce"]
        assert plan.to_skip == []

    def test_invalid_resolution_value(self, detection):
        with pytest.raises(ValueError):
            plan_merge(detection, {"bello": "merge"})
