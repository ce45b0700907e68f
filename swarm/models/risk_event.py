import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional
from sqlalchemy import Column, String, Text, Boolean, DateTime, Uuid, ForeignKey, Index
from sqlalchemy.orm import relationship
from swarm.database import Base, JSONType
from swarm.utils.clock import utcnow, as_naive_utc


class RiskEventType(str, PyEnum):
    DRAWDOWN_WARNING = "drawdown_warning"
    POSITION_LIMIT_EXCEEDED = "position_limit_exceeded"
    CORRELATION_VIOLATION = "correlation_violation"
    EMERGENCY_STOP = "emergency_stop"
    SYSTEM_ERROR = "system_error"


class Severity(str, PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskEvent(Base):
    """
    A risk alert, warning or violation raised against a trading agent.

    Events start unresolved; resolving is one-way and stamps resolved_at.
    """
    __tablename__ = "risk_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    agent_id = Column(
        Uuid,
        ForeignKey("trading_agents.id", ondelete="CASCADE", name="fk_risk_events_agent_id"),
        nullable=False,
    )
    event_type = Column(String(50), nullable=False)
    severity = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)
    metadata_ = Column("metadata", JSONType, default=dict)
    resolved = Column(Boolean, default=False)
    resolved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    agent = relationship("TradingAgent", back_populates="risk_events", passive_deletes=True)

    __table_args__ = (
        Index("ix_risk_events_agent_id", "agent_id"),
        Index("ix_risk_events_event_type", "event_type"),
        Index("ix_risk_events_severity", "severity"),
        Index("ix_risk_events_resolved", "resolved"),
    )

    @property
    def is_critical(self) -> bool:
        return self.severity == Severity.CRITICAL

    @property
    def is_resolved(self) -> bool:
        return self.resolved is True

    def age_in_hours(self, now: Optional[datetime] = None) -> int:
        """Whole hours since the event was recorded, truncated toward zero."""
        now = as_naive_utc(now) if now is not None else utcnow()
        elapsed = now - as_naive_utc(self.created_at)
        return int(elapsed.total_seconds() / 3600)

    def __repr__(self):
        return f"<RiskEvent {self.event_type} {self.severity} resolved={self.resolved}>"
