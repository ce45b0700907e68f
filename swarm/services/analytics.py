"""
Daily performance metrics per agent.
"""

import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from swarm.changeset import cast
from swarm.models.performance_metric import PerformanceMetric
from swarm.schemas.performance_metric import PerformanceMetricChanges
from swarm.services.persistence import as_uuid, persist

logger = logging.getLogger(__name__)


def create_performance_metric(db: Session, attrs: Mapping[str, Any]) -> PerformanceMetric:
    metric = persist(db, cast(PerformanceMetricChanges, None, attrs))
    logger.info(f"Recorded performance for agent {metric.agent_id} on {metric.date}")
    return metric


def list_performance_metrics(db: Session, agent_id: Any) -> list[PerformanceMetric]:
    """Metrics for one agent, most recent day first."""
    return db.query(PerformanceMetric).filter(
        PerformanceMetric.agent_id == as_uuid(agent_id, "TradingAgent")
    ).order_by(PerformanceMetric.date.desc()).all()
