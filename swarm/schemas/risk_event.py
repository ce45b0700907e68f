from datetime import datetime
from decimal import Decimal
from uuid import UUID
from typing import Any, ClassVar, Mapping, Optional
from pydantic import BaseModel, Field
from swarm.changeset import Changeset, ChangesetSchema, cast, foreign_key_constraint
from swarm.models.risk_event import RiskEvent, RiskEventType, Severity
from swarm.schemas.common import UtcDateTime
from swarm.utils.clock import utcnow


class RiskEventChanges(ChangesetSchema):
    """Rule table for risk event writes."""
    orm_model: ClassVar[type] = RiskEvent
    required_fields: ClassVar[tuple[str, ...]] = ("event_type", "severity", "message", "agent_id")
    constraints: ClassVar[tuple] = (
        foreign_key_constraint("agent_id", "fk_risk_events_agent_id", "FOREIGN KEY constraint failed"),
    )
    attribute_names: ClassVar[dict[str, str]] = {"metadata": "metadata_"}

    event_type: Optional[RiskEventType] = None
    severity: Optional[Severity] = None
    message: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    agent_id: Optional[UUID] = None
    metadata: Optional[dict[str, Any]] = None
    resolved: Optional[bool] = False
    resolved_at: Optional[UtcDateTime] = None


class RiskEventResolution(ChangesetSchema):
    """Only the two resolution fields may be cast when resolving."""
    orm_model: ClassVar[type] = RiskEvent

    resolved: Optional[bool] = None
    resolved_at: Optional[UtcDateTime] = None


def resolve_changeset(
    event: RiskEvent,
    attrs: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Changeset:
    """
    Changeset for the resolve transition.

    Whatever the caller passes for `resolved` / `resolved_at` is discarded:
    the event is always marked resolved at `now`.
    """
    changeset = cast(RiskEventResolution, event, attrs)
    changeset.errors = []
    changeset.put_change("resolved", True)
    changeset.put_change("resolved_at", now or utcnow())
    return changeset


class RiskEventResponse(BaseModel):
    id: UUID
    agent_id: UUID
    event_type: RiskEventType
    severity: Severity
    message: str
    metadata: Optional[dict[str, Any]] = None
    resolved: bool
    resolved_at: Optional[datetime] = None
    is_critical: bool
    age_in_hours: int
    created_at: datetime

    @classmethod
    def from_event(cls, event: RiskEvent, now: Optional[datetime] = None) -> "RiskEventResponse":
        return cls(
            id=event.id,
            agent_id=event.agent_id,
            event_type=event.event_type,
            severity=event.severity,
            message=event.message,
            metadata=event.metadata_,
            resolved=event.is_resolved,
            resolved_at=event.resolved_at,
            is_critical=event.is_critical,
            age_in_hours=event.age_in_hours(now),
            created_at=event.created_at,
        )


class RiskStatisticsResponse(BaseModel):
    """Summary of unresolved risk events."""
    total_active_events: int
    critical_events: int
    high_events: int
    medium_events: int
    low_events: int
    oldest_unresolved: Optional[RiskEventResponse] = None
    avg_resolution_hours: Optional[float] = None  # None until something is resolved


class ExposureEntry(BaseModel):
    trade_count: int
    total_exposure: Decimal
    agent_name: Optional[str] = None
