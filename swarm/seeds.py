"""
Bootstrap data for a fresh database.

Run with `python -m swarm.seeds`. Safe to run repeatedly: rows whose key
or name already exists are skipped.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from sqlalchemy.orm import Session

from swarm.config import get_settings
from swarm.database import SessionLocal, get_engine
from swarm.errors import UniquenessConflict
from swarm.models.system_configuration import ConfigCategory
from swarm.models.trading_agent import AgentStatus
from swarm.services.system import create_configuration
from swarm.services.trading import create_agent

logger = logging.getLogger(__name__)


DEFAULT_CONFIGURATIONS = [
    {
        "key": "max_concurrent_trades",
        "value": "100",
        "description": "Maximum number of concurrent trades across all agents",
        "category": ConfigCategory.TRADING.value,
    },
    {
        "key": "global_risk_limit",
        "value": "0.02",
        "description": "Global risk limit as percentage of total portfolio",
        "category": ConfigCategory.RISK_MANAGEMENT.value,
    },
    {
        "key": "market_data_refresh_interval",
        "value": "5000",
        "description": "Market data refresh interval in milliseconds",
        "category": ConfigCategory.MARKET_DATA.value,
    },
    {
        "key": "nvidia_api_enabled",
        "value": "true",
        "description": "Enable NVIDIA API for AI analysis",
        "category": ConfigCategory.API.value,
    },
    {
        "key": "correlation_threshold",
        "value": "0.7",
        "description": "Correlation threshold for risk analysis",
        "category": ConfigCategory.RISK_MANAGEMENT.value,
    },
    {
        "key": "notification_webhook_url",
        "value": "http://localhost:4000/webhooks/notifications",
        "description": "Webhook URL for trading notifications",
        "category": ConfigCategory.NOTIFICATIONS.value,
    },
]

DEFAULT_AGENTS = [
    {
        "name": "Momentum Trader Alpha",
        "status": AgentStatus.IDLE.value,
        "balance": "10000.00",
        "risk_tolerance": "0.05",
        "strategy_params": {
            "strategy_type": "momentum",
            "lookback_period": 20,
            "momentum_threshold": 0.02,
            "stop_loss_pct": 0.03,
            "take_profit_pct": 0.06,
        },
    },
    {
        "name": "Mean Reversion Beta",
        "status": AgentStatus.IDLE.value,
        "balance": "15000.00",
        "risk_tolerance": "0.03",
        "strategy_params": {
            "strategy_type": "mean_reversion",
            "rsi_oversold": 30,
            "rsi_overbought": 70,
            "bollinger_std": 2.0,
            "stop_loss_pct": 0.025,
            "take_profit_pct": 0.04,
        },
    },
    {
        "name": "Scalper Gamma",
        "status": AgentStatus.IDLE.value,
        "balance": "5000.00",
        "risk_tolerance": "0.10",
        "strategy_params": {
            "strategy_type": "scalping",
            "timeframe": "1m",
            "profit_target": 0.001,
            "max_hold_time": 300,
            "volume_threshold": 1000000,
        },
    },
    {
        "name": "Swing Trader Delta",
        "status": AgentStatus.IDLE.value,
        "balance": "20000.00",
        "risk_tolerance": "0.04",
        "strategy_params": {
            "strategy_type": "swing",
            "timeframe": "4h",
            "trend_strength_min": 0.6,
            "fibonacci_levels": [0.236, 0.382, 0.618],
            "stop_loss_pct": 0.04,
            "take_profit_pct": 0.08,
        },
    },
]


@dataclass
class SeedReport:
    configurations_attempted: int = 0
    agents_attempted: int = 0
    configurations_inserted: int = 0
    agents_inserted: int = 0


def _insert_all(
    db: Session,
    rows: Sequence[Mapping[str, Any]],
    create: Callable[[Session, Mapping[str, Any]], Any],
    label: str,
) -> int:
    inserted = 0
    for row in rows:
        try:
            create(db, row)
        except UniquenessConflict:
            logger.warning(f"Skipping {label} '{row.get('key') or row.get('name')}': already exists")
            continue
        inserted += 1
    return inserted


def run_seeds(db: Session) -> SeedReport:
    """
    Insert the default configurations and starter agents.

    Existing rows are left untouched. Any failure other than a uniqueness
    conflict aborts the run.
    """
    report = SeedReport(
        configurations_attempted=len(DEFAULT_CONFIGURATIONS),
        agents_attempted=len(DEFAULT_AGENTS),
    )
    report.configurations_inserted = _insert_all(db, DEFAULT_CONFIGURATIONS, create_configuration, "configuration")
    report.agents_inserted = _insert_all(db, DEFAULT_AGENTS, create_agent, "agent")

    logger.info(
        f"Seeded {report.configurations_inserted}/{report.configurations_attempted} configurations "
        f"and {report.agents_inserted}/{report.agents_attempted} agents"
    )
    return report


def main():
    logging.basicConfig(level=get_settings().log_level)
    db = SessionLocal(bind=get_engine())
    try:
        run_seeds(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
