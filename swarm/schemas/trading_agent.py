from datetime import datetime
from decimal import Decimal
from uuid import UUID
from typing import Any, ClassVar, Optional
from pydantic import BaseModel, Field
from swarm.changeset import ChangesetSchema, unique_constraint
from swarm.models.trading_agent import TradingAgent, AgentStatus
from swarm.schemas.common import PaginationMeta, UtcDateTime


class TradingAgentChanges(ChangesetSchema):
    """Rule table for trading agent writes."""
    orm_model: ClassVar[type] = TradingAgent
    required_fields: ClassVar[tuple[str, ...]] = ("name", "status")
    constraints: ClassVar[tuple] = (
        unique_constraint("name", "uq_trading_agents_name", "trading_agents.name"),
    )

    name: Optional[str] = None
    status: Optional[AgentStatus] = AgentStatus.IDLE
    balance: Optional[Decimal] = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    risk_tolerance: Optional[Decimal] = Field(default=None, gt=0, le=1, max_digits=5, decimal_places=4)
    strategy_params: Optional[dict[str, Any]] = None
    last_trade_at: Optional[UtcDateTime] = None
    total_trades: Optional[int] = Field(default=0, ge=0)
    winning_trades: Optional[int] = Field(default=0, ge=0)
    losing_trades: Optional[int] = Field(default=0, ge=0)


class TradingAgentResponse(BaseModel):
    id: UUID
    name: str
    status: AgentStatus
    balance: Optional[Decimal] = None
    risk_tolerance: Optional[Decimal] = None
    strategy_params: Optional[dict[str, Any]] = None
    last_trade_at: Optional[datetime] = None
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float  # Percentage
    is_active: bool
    is_stopped: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TradingAgentListResponse(BaseModel):
    agents: list[TradingAgentResponse]
    pagination: PaginationMeta


class AgentStatisticsResponse(BaseModel):
    """Agent counts by status."""
    total_count: int
    active_count: int
    idle_count: int
    error_count: int
    stopped_count: int


class AgentPerformanceResponse(BaseModel):
    """
    Performance of one agent computed from its trades table.

    Unlike the counters stored on the agent, these figures only count
    executed trades.
    """
    agent: TradingAgentResponse
    total_trades: int
    executed_trades: int
    pending_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float  # Percentage
    total_pnl: Decimal
    current_balance: Decimal
    last_activity: Optional[datetime] = None
