import uuid
from sqlalchemy import Column, Integer, Numeric, Date, DateTime, Uuid, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from swarm.database import Base
from swarm.utils.clock import utcnow


class PerformanceMetric(Base):
    """
    Aggregated daily performance of one trading agent.

    One row per agent per day. `drawdown` and `win_rate` are stored as
    fractions in [0, 1].
    """
    __tablename__ = "performance_metrics"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    agent_id = Column(
        Uuid,
        ForeignKey("trading_agents.id", ondelete="CASCADE", name="fk_performance_metrics_agent_id"),
        nullable=False,
    )
    date = Column(Date, nullable=False)
    total_pnl = Column(Numeric(15, 2), default=0)
    daily_pnl = Column(Numeric(15, 2), default=0)
    drawdown = Column(Numeric(5, 4), default=0)
    win_rate = Column(Numeric(5, 4), default=0)
    total_trades = Column(Integer, default=0)
    winning_trades = Column(Integer, default=0)
    losing_trades = Column(Integer, default=0)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    agent = relationship("TradingAgent", back_populates="performance_metrics", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint("agent_id", "date", name="uq_performance_metrics_agent_date"),
        Index("ix_performance_metrics_date", "date"),
    )

    def calculate_win_rate(self) -> float:
        """Win rate as a percentage of the day's trades."""
        if not self.total_trades:
            return 0.0
        return (self.winning_trades or 0) / self.total_trades * 100

    @property
    def is_profitable_day(self) -> bool:
        if self.daily_pnl is None:
            return False
        return self.daily_pnl > 0

    def loss_rate(self) -> float:
        """Losing trades as a fraction of the day's trades."""
        if not self.total_trades:
            return 0.0
        return (self.losing_trades or 0) / self.total_trades

    def __repr__(self):
        return f"<PerformanceMetric agent={self.agent_id} date={self.date}>"
