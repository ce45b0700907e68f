"""
Trading agents and their trades.

Covers agent and trade CRUD, the denormalized trade counters kept on each
agent, and swarm-wide trading statistics.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from swarm.changeset import cast
from swarm.errors import NotFound
from swarm.models.trade import Trade, TradeStatus
from swarm.models.trading_agent import TradingAgent, AgentStatus
from swarm.schemas.trade import TradeChanges, TradeCompletion
from swarm.schemas.trading_agent import TradingAgentChanges
from swarm.services.persistence import as_decimal, as_uuid, delete, persist, persist_many
from swarm.utils.clock import utcnow

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# active <-> idle; anything stopped or errored goes back to idle
_TOGGLED_STATUS = {
    AgentStatus.ACTIVE.value: AgentStatus.IDLE.value,
    AgentStatus.IDLE.value: AgentStatus.ACTIVE.value,
}


# =============================================================================
# Agents
# =============================================================================

def agents_query(db: Session, status: Optional[str] = None) -> Query:
    query = db.query(TradingAgent)
    if status:
        query = query.filter(TradingAgent.status == status)
    return query.order_by(TradingAgent.created_at.asc(), TradingAgent.name.asc())


def list_agents(db: Session, status: Optional[str] = None) -> list[TradingAgent]:
    return agents_query(db, status).all()


def get_agent(db: Session, agent_id: Any) -> TradingAgent:
    agent = db.query(TradingAgent).filter(TradingAgent.id == as_uuid(agent_id, "TradingAgent")).first()
    if not agent:
        raise NotFound("TradingAgent", agent_id)
    return agent


def lock_agent(db: Session, agent_id: Any) -> TradingAgent:
    """
    Reload an agent with its row locked until the next commit.

    Counter updates read from this copy so concurrent completions for the
    same agent are serialized instead of overwriting each other.
    """
    agent = db.query(TradingAgent).filter(
        TradingAgent.id == as_uuid(agent_id, "TradingAgent")
    ).populate_existing().with_for_update().first()
    if not agent:
        raise NotFound("TradingAgent", agent_id)
    return agent


def create_agent(db: Session, attrs: Mapping[str, Any]) -> TradingAgent:
    agent = persist(db, cast(TradingAgentChanges, None, attrs))
    logger.info(f"Created trading agent {agent.name} ({agent.id})")
    return agent


def update_agent(db: Session, agent: TradingAgent, attrs: Mapping[str, Any]) -> TradingAgent:
    agent = persist(db, cast(TradingAgentChanges, agent, attrs))
    logger.info(f"Updated trading agent {agent.name} ({agent.id})")
    return agent


def delete_agent(db: Session, agent: TradingAgent) -> None:
    delete(db, agent)
    logger.info(f"Deleted trading agent {agent.name} ({agent.id})")


def toggle_agent_status(db: Session, agent_id: Any) -> TradingAgent:
    """Flip an agent between active and idle."""
    agent = get_agent(db, agent_id)
    new_status = _TOGGLED_STATUS.get(agent.status, AgentStatus.IDLE.value)
    return update_agent(db, agent, {"status": new_status})


# =============================================================================
# Trades
# =============================================================================

def trades_query(db: Session) -> Query:
    return db.query(Trade).order_by(Trade.executed_at.desc())


def list_trades(db: Session) -> list[Trade]:
    return trades_query(db).all()


def get_trade(db: Session, trade_id: Any) -> Trade:
    trade = db.query(Trade).filter(Trade.id == as_uuid(trade_id, "Trade")).first()
    if not trade:
        raise NotFound("Trade", trade_id)
    return trade


def create_trade(db: Session, attrs: Mapping[str, Any]) -> Trade:
    trade = persist(db, cast(TradeChanges, None, attrs))
    logger.info(f"Recorded trade {trade.id} for agent {trade.agent_id}")
    return trade


def update_trade(db: Session, trade: Trade, attrs: Mapping[str, Any]) -> Trade:
    return persist(db, cast(TradeChanges, trade, attrs))


def delete_trade(db: Session, trade: Trade) -> None:
    delete(db, trade)


def list_trades_for_agent(db: Session, agent_id: Any) -> list[Trade]:
    return db.query(Trade).filter(
        Trade.agent_id == as_uuid(agent_id, "TradingAgent")
    ).order_by(Trade.executed_at.desc()).all()


def list_recent_trades(db: Session, limit: int = 10) -> list[Trade]:
    return db.query(Trade).options(
        joinedload(Trade.agent)
    ).order_by(Trade.executed_at.desc()).limit(limit).all()


# =============================================================================
# Trade outcomes
# =============================================================================

def _outcome_changes(
    agent: TradingAgent,
    pnl: Optional[Decimal],
    executed_at: Optional[datetime],
    now: Optional[datetime],
) -> dict[str, Any]:
    changes = {
        "total_trades": (agent.total_trades or 0) + 1,
        "last_trade_at": executed_at or now or utcnow(),
    }
    if pnl is not None and pnl > 0:
        changes["winning_trades"] = (agent.winning_trades or 0) + 1
    elif pnl is not None and pnl < 0:
        changes["losing_trades"] = (agent.losing_trades or 0) + 1
    return changes


def record_trade_outcome(
    db: Session,
    agent: TradingAgent,
    trade: Trade,
    now: Optional[datetime] = None,
) -> TradingAgent:
    """
    Update an agent's trade counters for one finished trade.

    Break-even trades (pnl of zero or unknown) count toward the total only.
    """
    agent = lock_agent(db, agent.id)
    outcome = _outcome_changes(agent, trade.pnl, trade.executed_at, now)
    return persist(db, cast(TradingAgentChanges, agent, outcome))


def complete_trade(
    db: Session,
    trade: Trade,
    attrs: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Trade:
    """
    Mark a trade executed and count it on its agent, in one commit.

    Only the realized pnl, fees and executed_at are taken from `attrs`. A
    trade that was already executed is updated but not counted a second
    time.
    """
    already_completed = trade.is_completed
    trade_changeset = cast(TradeCompletion, trade, attrs)
    trade_changeset.put_change("status", TradeStatus.EXECUTED.value)
    if already_completed or not trade_changeset.valid:
        return persist(db, trade_changeset)

    agent = lock_agent(db, trade.agent_id)
    # counters follow the trade as it will look after the update
    outcome = _outcome_changes(
        agent,
        trade_changeset.changes.get("pnl", trade.pnl),
        trade_changeset.changes.get("executed_at", trade.executed_at),
        now,
    )
    agent_changeset = cast(TradingAgentChanges, agent, outcome)
    trade, _ = persist_many(db, [trade_changeset, agent_changeset])
    logger.info(f"Completed trade {trade.id} for agent {agent.name} (pnl={trade.pnl})")
    return trade


# =============================================================================
# Statistics
# =============================================================================

def get_trading_statistics(db: Session) -> dict[str, Any]:
    """Counts and P&L across every trade in the swarm."""
    total_trades = db.query(func.count(Trade.id)).scalar() or 0

    executed = db.query(Trade).filter(Trade.status == TradeStatus.EXECUTED.value)
    executed_trades = executed.count()

    total_pnl = as_decimal(
        db.query(func.sum(Trade.pnl)).filter(
            Trade.status == TradeStatus.EXECUTED.value,
            Trade.pnl.isnot(None)
        ).scalar(),
        ZERO
    )

    winning_trades = executed.filter(Trade.pnl > 0).count()
    win_rate = (winning_trades / executed_trades * 100) if executed_trades > 0 else 0.0

    return {
        "total_trades": total_trades,
        "executed_trades": executed_trades,
        "pending_trades": total_trades - executed_trades,
        "total_pnl": total_pnl,
        "winning_trades": winning_trades,
        "losing_trades": executed_trades - winning_trades,
        "win_rate": win_rate,
    }


def get_agent_statistics(db: Session) -> dict[str, int]:
    counts = dict(
        db.query(TradingAgent.status, func.count(TradingAgent.id)).group_by(TradingAgent.status).all()
    )
    total = sum(counts.values())
    active = counts.get(AgentStatus.ACTIVE.value, 0)
    idle = counts.get(AgentStatus.IDLE.value, 0)
    error = counts.get(AgentStatus.ERROR.value, 0)

    return {
        "total_count": total,
        "active_count": active,
        "idle_count": idle,
        "error_count": error,
        "stopped_count": total - active - idle - error,
    }


def get_agent_performance(db: Session, agent_id: Any) -> dict[str, Any]:
    """Performance of one agent computed from its trades table."""
    agent = get_agent(db, agent_id)
    trades = list_trades_for_agent(db, agent.id)

    executed_trades = [t for t in trades if t.is_completed]
    total_pnl = sum((t.pnl or ZERO for t in executed_trades), ZERO)
    winning_trades = len([t for t in executed_trades if t.is_profitable])
    losing_trades = len(executed_trades) - winning_trades
    win_rate = (winning_trades / len(executed_trades) * 100) if executed_trades else 0.0

    return {
        "agent": agent,
        "total_trades": len(trades),
        "executed_trades": len(executed_trades),
        "pending_trades": len(trades) - len(executed_trades),
        "winning_trades": winning_trades,
        "losing_trades": losing_trades,
        "win_rate": win_rate,
        "total_pnl": total_pnl,
        "current_balance": agent.balance if agent.balance is not None else ZERO,
        "last_activity": agent.last_trade_at,
    }
