import uuid
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional
from sqlalchemy import Column, String, Numeric, DateTime, Uuid, ForeignKey, Index
from sqlalchemy.orm import relationship
from swarm.database import Base, JSONType
from swarm.utils.clock import utcnow


class TradeSide(str, PyEnum):
    BUY = "buy"
    SELL = "sell"


class TradeType(str, PyEnum):
    MARKET = "market"
    LIMIT = "limit"
    STOP = "stop"
    STOP_LIMIT = "stop_limit"


class TradeStatus(str, PyEnum):
    PENDING = "pending"
    EXECUTED = "executed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Trade(Base):
    """
    A single order placed by a trading agent.

    Holds execution details plus the realized P&L and fees once known.
    All money and quantity columns are exact decimals.
    """
    __tablename__ = "trades"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    agent_id = Column(
        Uuid,
        ForeignKey("trading_agents.id", ondelete="CASCADE", name="fk_trades_agent_id"),
        nullable=False,
    )

    # Order details
    symbol = Column(String(50), nullable=False)
    side = Column(String(10), nullable=False)  # buy, sell
    type = Column(String(20), nullable=False)  # market, limit, stop, stop_limit
    quantity = Column(Numeric(20, 8), nullable=False)
    price = Column(Numeric(15, 8), nullable=False)
    executed_at = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=TradeStatus.PENDING.value)

    # Outcome
    pnl = Column(Numeric(15, 2), nullable=True)  # None until realized
    fees = Column(Numeric(15, 8), nullable=True)
    metadata_ = Column("metadata", JSONType, default=dict)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    agent = relationship("TradingAgent", back_populates="trades", passive_deletes=True)

    __table_args__ = (
        Index("ix_trades_agent_id", "agent_id"),
        Index("ix_trades_symbol", "symbol"),
        Index("ix_trades_executed_at", "executed_at"),
        Index("ix_trades_status", "status"),
    )

    @property
    def is_profitable(self) -> bool:
        if self.pnl is None:
            return False
        return self.pnl > 0

    @property
    def is_completed(self) -> bool:
        return self.status == TradeStatus.EXECUTED

    @property
    def trade_value(self) -> Decimal:
        return self.quantity * self.price

    @property
    def net_pnl(self) -> Optional[Decimal]:
        """P&L after fees; the raw P&L when no fees were recorded."""
        if self.pnl is None:
            return None
        if self.fees is None:
            return self.pnl
        return self.pnl - self.fees

    def __repr__(self):
        return f"<Trade {self.side} {self.quantity} {self.symbol} @ {self.price} ({self.status})>"
