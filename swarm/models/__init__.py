from swarm.models.trading_agent import TradingAgent, AgentStatus
from swarm.models.trade import Trade, TradeSide, TradeType, TradeStatus
from swarm.models.risk_event import RiskEvent, RiskEventType, Severity
from swarm.models.system_configuration import SystemConfiguration, ConfigCategory
from swarm.models.performance_metric import PerformanceMetric

__all__ = [
    "TradingAgent",
    "AgentStatus",
    "Trade",
    "TradeSide",
    "TradeType",
    "TradeStatus",
    "RiskEvent",
    "RiskEventType",
    "Severity",
    "SystemConfiguration",
    "ConfigCategory",
    "PerformanceMetric",
]
