"""
Typed failures raised by the practice engine and the import pipeline
"""

from typing import Any


class PracticeError(Exception):
    """Base class for application errors with a status code and error code"""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code,
            "statusCode": self.status_code,
        }


class NotFoundError(PracticeError):
    """Raised when operating on a key absent from the catalog"""

    def __init__(self, resource: str, keys: list[str] | None = None):
        self.resource = resource
        self.keys = list(keys or [])
        message = f"{resource} not found"
        if self.keys:
            message = f"{message}: {', '.join(self.keys)}"
        super().__init__(message, 404, "NOT_FOUND")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.keys:
            data["missing"] = self.keys
        return data


class DuplicateKeyError(PracticeError):
    """Raised when creating a key that already exists outside conflict resolution"""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"'{key}' already exists", 409, "DUPLICATE_KEY")


class ConflictError(PracticeError):
    """Raised when an import batch has conflicts that still need a decision.

    ``conflicts`` holds the serialized conflict entries so a caller can show
    them to the operator and retry with resolutions.
    """

    def __init__(self, conflicts: list[dict[str, Any]], message: str = "Conflicts found"):
        self.conflicts = conflicts
        super().__init__(message, 409, "CONFLICT")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["conflicts"] = self.conflicts
        return data


class UnresolvedConflictError(PracticeError):
    """Raised when finalizing a merge while some conflicts lack a resolution"""

    def __init__(self, keys: list[str]):
        self.keys = sorted(keys)
        super().__init__(
            f"Unresolved conflicts for: {', '.join(self.keys)}", 409, "UNRESOLVED_CONFLICT"
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["unresolved"] = self.keys
        return data


class ValidationMismatchError(PracticeError):
    """Raised when grading against a malformed expected-answer shape"""

    def __init__(self, message: str):
        super().__init__(message, 422, "VALIDATION_MISMATCH")


class PayloadValidationError(PracticeError):
    """Raised when an import payload does not match its schema"""

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None):
        self.details = details or []
        super().__init__(message, 400, "INVALID_PAYLOAD")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.details:
            data["details"] = self.details
        return data
