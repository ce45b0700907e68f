"""
Error kinds raised by the service layer.

Validation failures always carry the full list of field violations so
callers can report them field by field.
"""

from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Any, Iterable, List


class ViolationKind(str, PyEnum):
    MISSING = "missing"
    NOT_IN_ENUM = "not_in_enum"
    OUT_OF_RANGE = "out_of_range"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    NOT_UNIQUE = "not_unique"
    NOT_FOUND = "not_found"
    INVALID = "invalid"  # value could not be coerced to the field type


@dataclass(frozen=True)
class Violation:
    """A single violated rule on a single field."""
    field: str
    kind: ViolationKind
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "kind": self.kind.value, "message": self.message}

    def __str__(self) -> str:
        return f"{self.field} {self.message} ({self.kind.value})"


class SwarmError(Exception):
    """Base class for all domain errors."""
    pass


class ValidationFailed(SwarmError):
    """One or more field-level violations."""

    def __init__(self, violations: Iterable[Violation], message: str = "Validation failed"):
        self.violations: List[Violation] = list(violations)
        self.message = message
        super().__init__(f"{message}: {', '.join(str(v) for v in self.violations)}")

    @property
    def fields(self) -> dict[str, ViolationKind]:
        return {violation.field: violation.kind for violation in self.violations}

    def as_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "errors": [violation.as_dict() for violation in self.violations],
        }


class UniquenessConflict(ValidationFailed):
    """Duplicate key or name rejected by a unique constraint."""

    def __init__(self, violation: Violation):
        super().__init__([violation], message="Uniqueness conflict")


class ReferenceNotFound(ValidationFailed):
    """A foreign reference points at a row that does not exist."""

    def __init__(self, violation: Violation):
        super().__init__([violation], message="Reference not found")


class NotFound(SwarmError):
    """Lookup, update or resolve against a record that does not exist."""

    def __init__(self, entity: str, identifier: Any):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: {identifier}")
