import logging
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session
from swarm.database import get_db
from swarm.schemas.risk_event import RiskEventResponse, RiskStatisticsResponse, ExposureEntry
from swarm.schemas.risk_limits import RiskLimitsResponse, RiskMetricsResponse
from swarm.services import risk

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/events", response_model=list[RiskEventResponse])
def list_events(db: Session = Depends(get_db)):
    return [RiskEventResponse.from_event(event) for event in risk.list_risk_events(db)]


@router.get("/active_events", response_model=list[RiskEventResponse])
def list_active_events(db: Session = Depends(get_db)):
    """Unresolved events, newest first."""
    return [RiskEventResponse.from_event(event) for event in risk.list_active_risk_events(db)]


@router.get("/critical_events", response_model=list[RiskEventResponse])
def list_critical_events(db: Session = Depends(get_db)):
    return [RiskEventResponse.from_event(event) for event in risk.list_critical_risk_events(db)]


@router.get("/events/{event_id}", response_model=RiskEventResponse)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return RiskEventResponse.from_event(risk.get_risk_event(db, event_id))


@router.post("/events", response_model=RiskEventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    attrs: dict[str, Any] = Body(...),
    db: Session = Depends(get_db)
):
    """Raise a risk event against an agent."""
    return RiskEventResponse.from_event(risk.create_risk_event(db, attrs))


@router.post("/events/{event_id}/resolve", response_model=RiskEventResponse)
def resolve_event(
    event_id: str,
    attrs: Optional[dict[str, Any]] = Body(default=None),
    db: Session = Depends(get_db)
):
    """
    Mark an event resolved now.

    Resolving an already resolved event moves its resolution time forward.
    """
    event = risk.get_risk_event(db, event_id)
    return RiskEventResponse.from_event(risk.resolve_event(db, event, attrs))


@router.get("/statistics", response_model=RiskStatisticsResponse)
def get_statistics(db: Session = Depends(get_db)):
    stats = risk.get_risk_statistics(db)
    oldest = stats["oldest_unresolved"]
    return RiskStatisticsResponse(
        **{**stats, "oldest_unresolved": RiskEventResponse.from_event(oldest) if oldest else None}
    )


@router.get("/exposure", response_model=dict[str, ExposureEntry])
def get_exposure(group_by: str = "symbol", db: Session = Depends(get_db)):
    """Executed trade value grouped by symbol, agent or side."""
    breakdown = risk.calculate_exposure_breakdown(db, group_by)
    if not breakdown:
        logger.info(f"Empty exposure breakdown for group_by={group_by}")
    return breakdown


@router.get("/metrics", response_model=RiskMetricsResponse)
def get_metrics(db: Session = Depends(get_db)):
    return RiskMetricsResponse(**risk.calculate_risk_metrics(db))


@router.get("/limits", response_model=RiskLimitsResponse)
def get_limits(db: Session = Depends(get_db)):
    return RiskLimitsResponse(**risk.get_current_limits(db))


@router.post("/limits", response_model=RiskLimitsResponse)
def update_limits(
    attrs: dict[str, Any] = Body(...),
    db: Session = Depends(get_db)
):
    """Change one or more risk limits; the rest keep their current value."""
    return RiskLimitsResponse(**risk.update_limits(db, attrs))
