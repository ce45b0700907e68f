import datetime as dt
from decimal import Decimal
from uuid import UUID
from typing import ClassVar, Optional
from pydantic import BaseModel, Field
from swarm.changeset import ChangesetSchema, foreign_key_constraint, unique_constraint
from swarm.models.performance_metric import PerformanceMetric


class PerformanceMetricChanges(ChangesetSchema):
    """Rule table for daily performance metric writes."""
    orm_model: ClassVar[type] = PerformanceMetric
    required_fields: ClassVar[tuple[str, ...]] = ("date", "agent_id")
    constraints: ClassVar[tuple] = (
        unique_constraint(
            "date",
            "uq_performance_metrics_agent_date",
            "performance_metrics.agent_id, performance_metrics.date",
            message="already recorded for this agent",
        ),
        foreign_key_constraint("agent_id", "fk_performance_metrics_agent_id", "FOREIGN KEY constraint failed"),
    )

    date: Optional[dt.date] = None
    agent_id: Optional[UUID] = None
    total_pnl: Optional[Decimal] = Field(default=None, max_digits=15, decimal_places=2)
    daily_pnl: Optional[Decimal] = Field(default=None, max_digits=15, decimal_places=2)
    drawdown: Optional[Decimal] = Field(default=None, ge=0, le=1, max_digits=5, decimal_places=4)
    win_rate: Optional[Decimal] = Field(default=None, ge=0, le=1, max_digits=5, decimal_places=4)
    total_trades: Optional[int] = Field(default=0, ge=0)
    winning_trades: Optional[int] = Field(default=0, ge=0)
    losing_trades: Optional[int] = Field(default=0, ge=0)


class PerformanceMetricResponse(BaseModel):
    id: UUID
    agent_id: UUID
    date: dt.date
    total_pnl: Optional[Decimal] = None
    daily_pnl: Optional[Decimal] = None
    drawdown: Optional[Decimal] = None
    win_rate: Optional[Decimal] = None
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    is_profitable_day: bool

    class Config:
        from_attributes = True
