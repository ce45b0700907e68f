"""
Commit changesets and translate storage constraint failures.

Uniqueness and foreign key checks happen in the database. When a commit
fails with an IntegrityError that matches a constraint declared on the
changeset schema, the session is rolled back and the error is re-raised
as a UniquenessConflict / ReferenceNotFound carrying a field violation.
"""

import logging
import uuid
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from swarm.changeset import Changeset
from swarm.errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)


def persist_many(db: Session, changesets: Sequence[Changeset]) -> list[Any]:
    """
    Apply and commit several changesets in one transaction.

    Every changeset is checked before any is applied, so an invalid one
    leaves all records untouched.
    """
    errors = [violation for changeset in changesets for violation in changeset.errors]
    if errors:
        raise ValidationFailed(errors)

    records = [changeset.apply() for changeset in changesets]
    for record in records:
        db.add(record)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        for changeset in changesets:
            error = changeset.constraint_error(e)
            if error is not None:
                logger.warning(f"Write rejected by storage constraint: {error}")
                raise error from e
        raise

    for record in records:
        db.refresh(record)
    return records


def persist(db: Session, changeset: Changeset) -> Any:
    return persist_many(db, [changeset])[0]


def delete(db: Session, record: Any) -> None:
    db.delete(record)
    db.commit()


def as_uuid(value: Any, entity: str) -> uuid.UUID:
    """Coerce an identifier, treating malformed ones as not found."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise NotFound(entity, value)


def as_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Aggregates may come back as floats on some backends."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
