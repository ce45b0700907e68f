import uuid
from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import Column, String, Integer, Numeric, DateTime, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from swarm.database import Base, JSONType
from swarm.utils.clock import utcnow


class AgentStatus(str, PyEnum):
    IDLE = "idle"
    ACTIVE = "active"
    STOPPED = "stopped"
    ERROR = "error"


class TradingAgent(Base):
    """
    An autonomous trading entity with its own balance, risk tolerance
    and strategy parameters.

    The trade counters are denormalized: they are only changed by whatever
    records a trade outcome, never recalculated from the trades table.
    """
    __tablename__ = "trading_agents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default=AgentStatus.IDLE.value)
    balance = Column(Numeric(15, 2), default=Decimal("0.00"))
    risk_tolerance = Column(Numeric(5, 4), default=Decimal("0.02"))
    strategy_params = Column(JSONType, default=dict)
    last_trade_at = Column(DateTime, nullable=True)

    # Trade counters
    total_trades = Column(Integer, default=0)
    winning_trades = Column(Integer, default=0)
    losing_trades = Column(Integer, default=0)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships - passive_deletes=True lets the database handle CASCADE deletion
    trades = relationship("Trade", back_populates="agent", cascade="all, delete-orphan", passive_deletes=True)
    risk_events = relationship("RiskEvent", back_populates="agent", cascade="all, delete-orphan", passive_deletes=True)
    performance_metrics = relationship(
        "PerformanceMetric", back_populates="agent", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("name", name="uq_trading_agents_name"),
        Index("ix_trading_agents_status", "status"),
    )

    @property
    def win_rate(self) -> float:
        """Winning trades as a percentage of all trades (0.0 with no trades)."""
        if not self.total_trades:
            return 0.0
        return (self.winning_trades or 0) / self.total_trades * 100

    @property
    def is_active(self) -> bool:
        return self.status == AgentStatus.ACTIVE

    @property
    def is_stopped(self) -> bool:
        return self.status in (AgentStatus.STOPPED, AgentStatus.ERROR)

    def __repr__(self):
        return f"<TradingAgent {self.name} ({self.status})>"
