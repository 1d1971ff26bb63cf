"""
Tests for typed application errors
"""

from italian_practice.errors import (
    ConflictError,
    DuplicateKeyError,
    NotFoundError,
    PayloadValidationError,
    PracticeError,
    UnresolvedConflictError,
    ValidationMismatchError,
)


class TestErrors:
    """Test status codes and serialization"""

    def test_status_codes(self):
        assert NotFoundError("Verb").status_code == 404
        assert DuplicateKeyError("parlare").status_code == 409
        assert ConflictError([]).status_code == 409
        assert UnresolvedConflictError(["bello"]).status_code == 409
        assert ValidationMismatchError("bad shape").status_code == 422
        assert PayloadValidationError("bad payload").status_code == 400

    def test_all_are_practice_errors(self):
        for error in (
            NotFoundError("Verb"),
            DuplicateKeyError("parlare"),
            ConflictError([]),
            UnresolvedConflictError([]),
            ValidationMismatchError("x"),
            PayloadValidationError("x"),
        ):
            assert isinstance(error, PracticeError)

    def test_not_found_lists_missing_keys(self):
        error = NotFoundError("Verb", ["cantare", "ballare"])

        assert str(error) == "Verb not found: cantare, ballare"
        assert error.to_dict() == {
            "error": "Verb not found: cantare, ballare",
            "code": "NOT_FOUND",
            "statusCode": 404,
            "missing": ["cantare", "ballare"],
        }

    def test_conflict_carries_conflicts(self):
        conflicts = [{"italian": "bello", "existing": {}, "new": {}}]
        data = ConflictError(conflicts).to_dict()

        assert data["error"] == "Conflicts found"
        assert data["conflicts"] == conflicts

    def test_unresolved_keys_sorted(self):
        error = UnresolvedConflictError(["caro", "bello"])
        assert error.keys == ["bello", "caro"]
        assert error.to_dict()["unresolved"] == ["bello", "caro"]

    def test_payload_details(self):
        details = [{"key": "parlare", "loc": "regular", "msg": "Input should be a valid boolean"}]
        assert PayloadValidationError("bad", details).to_dict()["details"] == details
