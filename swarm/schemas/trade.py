from datetime import datetime
from decimal import Decimal
from uuid import UUID
from typing import Any, ClassVar, Optional
from pydantic import AliasChoices, BaseModel, Field
from swarm.changeset import ChangesetSchema, foreign_key_constraint
from swarm.models.trade import Trade, TradeSide, TradeType, TradeStatus
from swarm.schemas.common import PaginationMeta, UtcDateTime


class TradeChanges(ChangesetSchema):
    """Rule table for trade writes."""
    orm_model: ClassVar[type] = Trade
    required_fields: ClassVar[tuple[str, ...]] = (
        "symbol", "side", "type", "quantity", "price", "executed_at", "status", "agent_id"
    )
    constraints: ClassVar[tuple] = (
        foreign_key_constraint("agent_id", "fk_trades_agent_id", "FOREIGN KEY constraint failed"),
    )
    attribute_names: ClassVar[dict[str, str]] = {"metadata": "metadata_"}

    symbol: Optional[str] = None
    side: Optional[TradeSide] = None
    type: Optional[TradeType] = None
    quantity: Optional[Decimal] = Field(default=None, gt=0, max_digits=20, decimal_places=8)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=15, decimal_places=8)
    executed_at: Optional[UtcDateTime] = None
    status: Optional[TradeStatus] = TradeStatus.PENDING
    agent_id: Optional[UUID] = None
    pnl: Optional[Decimal] = Field(default=None, max_digits=15, decimal_places=2)
    fees: Optional[Decimal] = Field(default=None, ge=0, max_digits=15, decimal_places=8)
    metadata: Optional[dict[str, Any]] = None


class TradeCompletion(ChangesetSchema):
    """Only the outcome fields may be cast when completing a trade."""
    orm_model: ClassVar[type] = Trade
    required_fields: ClassVar[tuple[str, ...]] = ("executed_at",)

    pnl: Optional[Decimal] = Field(default=None, max_digits=15, decimal_places=2)
    fees: Optional[Decimal] = Field(default=None, ge=0, max_digits=15, decimal_places=8)
    executed_at: Optional[UtcDateTime] = None


class TradeResponse(BaseModel):
    """A single trade with its derived values."""
    id: UUID
    agent_id: UUID
    symbol: str
    side: TradeSide
    type: TradeType
    quantity: Decimal
    price: Decimal
    executed_at: datetime
    status: TradeStatus
    pnl: Optional[Decimal] = None
    fees: Optional[Decimal] = None
    metadata: Optional[dict[str, Any]] = Field(
        default=None, validation_alias=AliasChoices("metadata_", "metadata")
    )
    trade_value: Decimal  # quantity * price
    net_pnl: Optional[Decimal] = None  # pnl - fees
    is_profitable: bool
    is_completed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TradeListResponse(BaseModel):
    trades: list[TradeResponse]
    pagination: PaginationMeta


class TradingStatisticsResponse(BaseModel):
    """Swarm-wide trade statistics; win/loss counts cover executed trades only."""
    total_trades: int
    executed_trades: int
    pending_trades: int
    total_pnl: Decimal
    winning_trades: int
    losing_trades: int
    win_rate: float  # Percentage
