"""
Validated, all-or-nothing field changes for ORM records.

A changeset schema is a pydantic model whose field declarations are the
rule table for one entity: types, enums, numeric bounds and string
lengths. The schema also names its required fields and the storage
constraints (unique indexes, foreign keys) the database enforces on its
behalf.

`cast()` merges the allowed attrs over a record's current values, checks
every rule and returns a `Changeset` holding either the validated changes
or every violation found. Nothing is written to the record until
`Changeset.apply()` is called on a valid changeset.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError

from swarm.errors import (
    ReferenceNotFound,
    UniquenessConflict,
    ValidationFailed,
    Violation,
    ViolationKind,
)


# pydantic error type -> violation kind; anything else is a coercion failure
_ERROR_KINDS = {
    "missing": ViolationKind.MISSING,
    "enum": ViolationKind.NOT_IN_ENUM,
    "literal_error": ViolationKind.NOT_IN_ENUM,
    "greater_than": ViolationKind.OUT_OF_RANGE,
    "greater_than_equal": ViolationKind.OUT_OF_RANGE,
    "less_than": ViolationKind.OUT_OF_RANGE,
    "less_than_equal": ViolationKind.OUT_OF_RANGE,
    # more digits than the storage column holds
    "decimal_max_digits": ViolationKind.OUT_OF_RANGE,
    "decimal_max_places": ViolationKind.OUT_OF_RANGE,
    "decimal_whole_digits": ViolationKind.OUT_OF_RANGE,
    "string_too_short": ViolationKind.TOO_SHORT,
    "string_too_long": ViolationKind.TOO_LONG,
}


@dataclass(frozen=True)
class Constraint:
    """A storage-level constraint the database checks for a schema."""
    field: str
    kind: ViolationKind
    markers: tuple[str, ...]  # substrings identifying the constraint in driver errors
    message: str

    def matches(self, error: IntegrityError) -> bool:
        text = str(error.orig)
        return any(marker in text for marker in self.markers)

    def to_error(self) -> ValidationFailed:
        violation = Violation(self.field, self.kind, self.message)
        if self.kind == ViolationKind.NOT_UNIQUE:
            return UniquenessConflict(violation)
        return ReferenceNotFound(violation)


def unique_constraint(field_name: str, *markers: str, message: str = "has already been taken") -> Constraint:
    return Constraint(field_name, ViolationKind.NOT_UNIQUE, markers, message)


def foreign_key_constraint(field_name: str, *markers: str, message: str = "does not exist") -> Constraint:
    return Constraint(field_name, ViolationKind.NOT_FOUND, markers, message)


class ChangesetSchema(BaseModel):
    """Base class for per-entity rule tables."""

    orm_model: ClassVar[Optional[type]] = None
    required_fields: ClassVar[tuple[str, ...]] = ()
    constraints: ClassVar[tuple[Constraint, ...]] = ()
    # schema field -> ORM attribute, where they differ
    attribute_names: ClassVar[dict[str, str]] = {}

    class Config:
        extra = "ignore"
        use_enum_values = True

    @classmethod
    def attribute_for(cls, field_name: str) -> str:
        return cls.attribute_names.get(field_name, field_name)


@dataclass
class Changeset:
    schema: Type[ChangesetSchema]
    data: Any = None
    changes: dict[str, Any] = field(default_factory=dict)
    errors: list[Violation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def put_change(self, field_name: str, value: Any) -> "Changeset":
        """Force a change, bypassing the rule table."""
        self.changes[field_name] = value
        return self

    def apply(self) -> Any:
        """
        Write the changes onto the record (a new ORM instance when the
        changeset was cast without one) and return it.

        Raises ValidationFailed, leaving the record untouched, when the
        changeset is invalid.
        """
        if not self.valid:
            raise ValidationFailed(self.errors)

        record = self.data if self.data is not None else self.schema.orm_model()
        for name, value in self.changes.items():
            setattr(record, self.schema.attribute_for(name), value)
        return record

    def constraint_error(self, error: IntegrityError) -> Optional[ValidationFailed]:
        """Translate a database integrity error into a validation failure."""
        for constraint in self.schema.constraints:
            if constraint.matches(error):
                return constraint.to_error()
        return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _base_values(schema: Type[ChangesetSchema], data: Any) -> dict[str, Any]:
    values = {}
    for name, info in schema.model_fields.items():
        current = None
        if data is not None:
            current = getattr(data, schema.attribute_for(name), None)
        if current is None:
            current = info.get_default(call_default_factory=True)
        values[name] = current
    return values


def cast(schema: Type[ChangesetSchema], data: Any = None, attrs: Optional[Mapping[str, Any]] = None) -> Changeset:
    """
    Build a changeset for `data` (an ORM record, or None for a new one).

    Only keys naming a schema field are taken from `attrs`. Blank values
    count as absent. Every violated rule is reported, one violation per
    field.
    """
    params = {
        key: None if _is_blank(value) else value
        for key, value in (attrs or {}).items()
        if key in schema.model_fields
    }
    merged = {
        key: None if _is_blank(value) else value
        for key, value in {**_base_values(schema, data), **params}.items()
    }

    errors = [
        Violation(name, ViolationKind.MISSING, "can't be blank")
        for name in schema.required_fields
        if merged.get(name) is None
    ]
    seen = {violation.field for violation in errors}

    try:
        validated = schema.model_validate(merged)
    except ValidationError as exc:
        for error in exc.errors():
            name = str(error["loc"][0]) if error["loc"] else "__root__"
            if name in seen:
                continue
            seen.add(name)
            errors.append(Violation(name, _ERROR_KINDS.get(error["type"], ViolationKind.INVALID), error["msg"]))
        return Changeset(schema, data, params, errors)

    if errors:
        return Changeset(schema, data, params, errors)

    values = validated.model_dump()
    if data is None:
        # leave unset columns to their storage defaults
        changes = {name: value for name, value in values.items() if value is not None}
    else:
        changes = {
            name: value
            for name, value in values.items()
            if value != getattr(data, schema.attribute_for(name), None)
        }
    return Changeset(schema, data, changes, [])
