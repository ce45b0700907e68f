from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session
from swarm.config import get_settings
from swarm.database import get_db
from swarm.schemas.trade import TradeResponse, TradeListResponse, TradingStatisticsResponse
from swarm.schemas.trading_agent import AgentStatisticsResponse
from swarm.services import trading
from swarm.utils.pagination import paginate

router = APIRouter()


@router.get("/trades", response_model=TradeListResponse)
def list_trades(
    page: Optional[str] = None,
    page_size: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List trades, most recently executed first."""
    result = paginate(trading.trades_query(db), page, page_size)
    return TradeListResponse(
        trades=[TradeResponse.model_validate(trade) for trade in result.entries],
        pagination=result.meta()
    )


@router.get("/trades/recent", response_model=list[TradeResponse])
def recent_trades(
    limit: Optional[int] = Query(default=None, ge=1, le=get_settings().max_page_size),
    db: Session = Depends(get_db)
):
    return trading.list_recent_trades(db, limit or get_settings().recent_trades_limit)


@router.get("/statistics")
def get_statistics(db: Session = Depends(get_db)):
    """Trade and agent statistics for the whole swarm."""
    return {
        "trading": TradingStatisticsResponse(**trading.get_trading_statistics(db)),
        "agents": AgentStatisticsResponse(**trading.get_agent_statistics(db)),
    }


@router.get("/by_agent/{agent_id}", response_model=list[TradeResponse])
def trades_by_agent(agent_id: str, db: Session = Depends(get_db)):
    agent = trading.get_agent(db, agent_id)
    return trading.list_trades_for_agent(db, agent.id)


@router.get("/trades/{trade_id}", response_model=TradeResponse)
def get_trade(trade_id: str, db: Session = Depends(get_db)):
    return trading.get_trade(db, trade_id)


@router.post("/trades", response_model=TradeResponse, status_code=status.HTTP_201_CREATED)
def create_trade(
    attrs: dict[str, Any] = Body(...),
    db: Session = Depends(get_db)
):
    """Record a trade for an agent."""
    return trading.create_trade(db, attrs)


@router.post("/trades/{trade_id}/complete", response_model=TradeResponse)
def complete_trade(
    trade_id: str,
    attrs: Optional[dict[str, Any]] = Body(default=None),
    db: Session = Depends(get_db)
):
    """
    Mark a trade executed and update its agent's counters.

    The body may carry the realized pnl, fees and executed_at.
    """
    trade = trading.get_trade(db, trade_id)
    return trading.complete_trade(db, trade, attrs)
