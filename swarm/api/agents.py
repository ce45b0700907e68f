import logging
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session
from swarm.database import get_db
from swarm.schemas.trading_agent import (
    TradingAgentResponse, TradingAgentListResponse, AgentPerformanceResponse
)
from swarm.schemas.performance_metric import PerformanceMetricResponse
from swarm.services import analytics, trading
from swarm.utils.pagination import paginate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=TradingAgentListResponse)
def list_agents(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    page: Optional[str] = None,
    page_size: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List trading agents, optionally filtered by status."""
    result = paginate(trading.agents_query(db, status_filter), page, page_size)
    return TradingAgentListResponse(
        agents=[TradingAgentResponse.model_validate(agent) for agent in result.entries],
        pagination=result.meta()
    )


@router.post("", response_model=TradingAgentResponse, status_code=status.HTTP_201_CREATED)
def create_agent(
    attrs: dict[str, Any] = Body(...),
    db: Session = Depends(get_db)
):
    """Create a trading agent."""
    return trading.create_agent(db, attrs)


@router.get("/{agent_id}", response_model=TradingAgentResponse)
def get_agent(agent_id: str, db: Session = Depends(get_db)):
    return trading.get_agent(db, agent_id)


@router.patch("/{agent_id}", response_model=TradingAgentResponse)
def update_agent(
    agent_id: str,
    attrs: dict[str, Any] = Body(...),
    db: Session = Depends(get_db)
):
    """Update a trading agent. Only the fields present in the body change."""
    agent = trading.get_agent(db, agent_id)
    return trading.update_agent(db, agent, attrs)


@router.delete("/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_agent(agent_id: str, db: Session = Depends(get_db)):
    """Delete an agent together with its trades, risk events and metrics."""
    agent = trading.get_agent(db, agent_id)
    trading.delete_agent(db, agent)


@router.post("/{agent_id}/toggle_status", response_model=TradingAgentResponse)
def toggle_status(agent_id: str, db: Session = Depends(get_db)):
    """Switch an agent between active and idle."""
    agent = trading.toggle_agent_status(db, agent_id)
    logger.info(f"Agent {agent.name} is now {agent.status}")
    return agent


@router.get("/{agent_id}/performance", response_model=AgentPerformanceResponse)
def get_performance(agent_id: str, db: Session = Depends(get_db)):
    performance = trading.get_agent_performance(db, agent_id)
    return AgentPerformanceResponse(
        **{**performance, "agent": TradingAgentResponse.model_validate(performance["agent"])}
    )


@router.get("/{agent_id}/metrics", response_model=list[PerformanceMetricResponse])
def list_metrics(agent_id: str, db: Session = Depends(get_db)):
    """Daily performance metrics, most recent first."""
    agent = trading.get_agent(db, agent_id)
    return analytics.list_performance_metrics(db, agent.id)


@router.post("/{agent_id}/metrics", response_model=PerformanceMetricResponse, status_code=status.HTTP_201_CREATED)
def create_metric(
    agent_id: str,
    attrs: dict[str, Any] = Body(...),
    db: Session = Depends(get_db)
):
    agent = trading.get_agent(db, agent_id)
    return analytics.create_performance_metric(db, {**attrs, "agent_id": agent.id})
