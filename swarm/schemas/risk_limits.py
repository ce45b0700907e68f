from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from swarm.changeset import ChangesetSchema


class RiskLimitsChanges(ChangesetSchema):
    """
    Rule table for risk limit updates.

    Limits are stored as `risk_management` configuration rows, one per
    field, so there is no ORM model behind this schema.
    """

    max_total_exposure: Optional[Decimal] = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    max_position_size: Optional[Decimal] = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    max_daily_loss: Optional[Decimal] = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    max_var_1d: Optional[Decimal] = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    max_correlation: Optional[Decimal] = Field(default=None, gt=0, le=1)
    max_agents: Optional[int] = Field(default=None, ge=1)


class RiskLimitsResponse(BaseModel):
    max_total_exposure: Decimal
    max_position_size: Decimal
    max_daily_loss: Decimal
    max_var_1d: Decimal
    max_correlation: Decimal
    max_agents: int


class RiskMetricsResponse(BaseModel):
    """Swarm-wide exposure, P&L and open risk events."""
    total_exposure: Decimal  # sum of trade_value over executed trades
    total_pnl: Decimal
    max_drawdown: Decimal  # largest peak-to-trough fall of cumulative pnl
    active_risk_events: int
    critical_risk_events: int
