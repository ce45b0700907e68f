"""
Risk event tracking, exposure analysis and risk limits.

Limits live in the configuration registry as `risk_management` rows; a
limit with no row yet reads as its default.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from swarm.changeset import cast
from swarm.errors import NotFound, ValidationFailed
from swarm.models.risk_event import RiskEvent, Severity
from swarm.models.system_configuration import ConfigCategory
from swarm.models.trade import Trade, TradeSide, TradeStatus
from swarm.schemas.risk_event import RiskEventChanges, resolve_changeset
from swarm.schemas.risk_limits import RiskLimitsChanges
from swarm.schemas.system_configuration import SystemConfigurationChanges
from swarm.services.persistence import as_uuid, delete, persist, persist_many
from swarm.services.system import find_configuration

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# limit key -> (default value, description)
RISK_LIMIT_DEFAULTS = {
    "max_total_exposure": ("10000.00", "Maximum total value of executed trades"),
    "max_position_size": ("1000.00", "Maximum value of a single position"),
    "max_daily_loss": ("500.00", "Maximum loss per day"),
    "max_var_1d": ("200.00", "Maximum one-day value at risk"),
    "max_correlation": ("0.8", "Maximum correlation between agent positions"),
    "max_agents": ("10", "Maximum number of trading agents"),
}


# =============================================================================
# Risk events
# =============================================================================

def risk_events_query(db: Session) -> Query:
    return db.query(RiskEvent).order_by(RiskEvent.created_at.desc())


def list_risk_events(db: Session) -> list[RiskEvent]:
    return risk_events_query(db).all()


def get_risk_event(db: Session, event_id: Any) -> RiskEvent:
    event = db.query(RiskEvent).filter(RiskEvent.id == as_uuid(event_id, "RiskEvent")).first()
    if not event:
        raise NotFound("RiskEvent", event_id)
    return event


def create_risk_event(db: Session, attrs: Mapping[str, Any]) -> RiskEvent:
    event = persist(db, cast(RiskEventChanges, None, attrs))
    log = logger.warning if event.is_critical else logger.info
    log(f"Risk event {event.event_type} ({event.severity}) raised for agent {event.agent_id}")
    return event


def update_risk_event(db: Session, event: RiskEvent, attrs: Mapping[str, Any]) -> RiskEvent:
    return persist(db, cast(RiskEventChanges, event, attrs))


def resolve_event(
    db: Session,
    event: RiskEvent,
    attrs: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> RiskEvent:
    """Mark an event resolved at `now`, ignoring any resolved/resolved_at in attrs."""
    event = persist(db, resolve_changeset(event, attrs, now))
    logger.info(f"Resolved risk event {event.id} at {event.resolved_at}")
    return event


def delete_risk_event(db: Session, event: RiskEvent) -> None:
    delete(db, event)


def list_active_risk_events(db: Session) -> list[RiskEvent]:
    return db.query(RiskEvent).filter(
        RiskEvent.resolved.is_(False)
    ).order_by(RiskEvent.created_at.desc()).all()


def list_critical_risk_events(db: Session) -> list[RiskEvent]:
    """Unresolved critical events, newest first."""
    return db.query(RiskEvent).filter(
        RiskEvent.severity == Severity.CRITICAL.value,
        RiskEvent.resolved.is_(False)
    ).order_by(RiskEvent.created_at.desc()).all()


def list_risk_events_for_agent(db: Session, agent_id: Any) -> list[RiskEvent]:
    return db.query(RiskEvent).filter(
        RiskEvent.agent_id == as_uuid(agent_id, "TradingAgent")
    ).order_by(RiskEvent.created_at.desc()).all()


# =============================================================================
# Statistics
# =============================================================================

def get_risk_statistics(db: Session) -> dict[str, Any]:
    """
    Summarize unresolved events by severity.

    The average resolution time is measured over resolved events, from
    creation to resolution, in hours. It is None until one exists.
    """
    active_events = list_active_risk_events(db)

    by_severity: dict[str, int] = {}
    for event in active_events:
        by_severity[event.severity] = by_severity.get(event.severity, 0) + 1

    oldest_unresolved = min(active_events, key=lambda e: e.created_at) if active_events else None

    resolved_events = db.query(RiskEvent).filter(
        RiskEvent.resolved.is_(True),
        RiskEvent.resolved_at.isnot(None)
    ).all()
    avg_resolution_hours = None
    if resolved_events:
        total_seconds = sum(
            (event.resolved_at - event.created_at).total_seconds() for event in resolved_events
        )
        avg_resolution_hours = total_seconds / len(resolved_events) / 3600

    return {
        "total_active_events": len(active_events),
        "critical_events": by_severity.get(Severity.CRITICAL.value, 0),
        "high_events": by_severity.get(Severity.HIGH.value, 0),
        "medium_events": by_severity.get(Severity.MEDIUM.value, 0),
        "low_events": by_severity.get(Severity.LOW.value, 0),
        "oldest_unresolved": oldest_unresolved,
        "avg_resolution_hours": avg_resolution_hours,
    }


def _exposure(trades: list[Trade]) -> Decimal:
    return sum((trade.trade_value for trade in trades), ZERO)


def calculate_exposure_breakdown(db: Session, group_by: str = "symbol") -> dict[str, dict[str, Any]]:
    """
    Total value of executed trades grouped by symbol, agent or side.

    Unknown groupings yield an empty breakdown.
    """
    if group_by not in ("symbol", "agent", "side"):
        return {}

    executed_trades = db.query(Trade).options(
        joinedload(Trade.agent)
    ).filter(Trade.status == TradeStatus.EXECUTED.value).all()

    if group_by == "side":
        groups: dict[str, list[Trade]] = {TradeSide.BUY.value: [], TradeSide.SELL.value: []}
        for trade in executed_trades:
            groups.setdefault(trade.side, []).append(trade)
        return {
            side: {"trade_count": len(trades), "total_exposure": _exposure(trades)}
            for side, trades in groups.items()
        }

    groups = {}
    for trade in executed_trades:
        key = trade.symbol if group_by == "symbol" else str(trade.agent_id)
        groups.setdefault(key, []).append(trade)

    breakdown = {}
    for key, trades in groups.items():
        entry = {"trade_count": len(trades), "total_exposure": _exposure(trades)}
        if group_by == "agent":
            entry["agent_name"] = trades[0].agent.name if trades[0].agent else "Unknown"
        breakdown[key] = entry
    return breakdown


def _count_active_events(db: Session, severity: Optional[str] = None) -> int:
    query = db.query(func.count(RiskEvent.id)).filter(RiskEvent.resolved.is_(False))
    if severity:
        query = query.filter(RiskEvent.severity == severity)
    return query.scalar() or 0


def calculate_risk_metrics(db: Session) -> dict[str, Any]:
    """
    Exposure and P&L across executed trades plus open risk event counts.

    Drawdown is the largest fall of cumulative pnl from its running peak,
    taking trades in execution order.
    """
    executed_trades = db.query(Trade).filter(
        Trade.status == TradeStatus.EXECUTED.value
    ).order_by(Trade.executed_at.asc()).all()

    cumulative = peak = max_drawdown = ZERO
    for trade in executed_trades:
        cumulative += trade.pnl or ZERO
        peak = max(peak, cumulative)
        max_drawdown = max(max_drawdown, peak - cumulative)

    return {
        "total_exposure": _exposure(executed_trades),
        "total_pnl": cumulative,
        "max_drawdown": max_drawdown,
        "active_risk_events": _count_active_events(db),
        "critical_risk_events": _count_active_events(db, Severity.CRITICAL.value),
    }


# =============================================================================
# Limits
# =============================================================================

def get_current_limits(db: Session) -> dict[str, Any]:
    """Every risk limit, read from configuration or its default."""
    stored = {}
    for key, (default, _) in RISK_LIMIT_DEFAULTS.items():
        config = find_configuration(db, key)
        stored[key] = config.get_value() if config else default

    changeset = cast(RiskLimitsChanges, None, stored)
    if not changeset.valid:
        raise ValidationFailed(changeset.errors, message="Stored risk limits are invalid")
    return changeset.changes


def update_limits(db: Session, attrs: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate and store the given limits in one commit.

    Limits not named in `attrs` keep their current value.
    """
    changeset = cast(RiskLimitsChanges, None, attrs)
    if not changeset.valid:
        raise ValidationFailed(changeset.errors)

    config_changesets = []
    for key, value in changeset.changes.items():
        config = find_configuration(db, key)
        if config:
            config_changesets.append(cast(SystemConfigurationChanges, config, {"value": str(value)}))
        else:
            config_changesets.append(cast(SystemConfigurationChanges, None, {
                "key": key,
                "value": str(value),
                "description": RISK_LIMIT_DEFAULTS[key][1],
                "category": ConfigCategory.RISK_MANAGEMENT.value,
            }))

    if config_changesets:
        persist_many(db, config_changesets)
        logger.info(f"Updated risk limits: {', '.join(changeset.changes)}")
    return get_current_limits(db)
