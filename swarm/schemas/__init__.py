from swarm.schemas.trading_agent import (
    TradingAgentChanges, TradingAgentResponse, TradingAgentListResponse,
    AgentStatisticsResponse, AgentPerformanceResponse
)
from swarm.schemas.trade import (
    TradeChanges, TradeCompletion, TradeResponse, TradeListResponse, TradingStatisticsResponse
)
from swarm.schemas.risk_event import (
    RiskEventChanges, RiskEventResolution, RiskEventResponse, RiskStatisticsResponse,
    ExposureEntry, resolve_changeset
)
from swarm.schemas.system_configuration import SystemConfigurationChanges, SystemConfigurationResponse
from swarm.schemas.performance_metric import PerformanceMetricChanges, PerformanceMetricResponse
from swarm.schemas.risk_limits import RiskLimitsChanges, RiskLimitsResponse, RiskMetricsResponse
from swarm.schemas.common import PaginationMeta

__all__ = [
    "TradingAgentChanges", "TradingAgentResponse", "TradingAgentListResponse",
    "AgentStatisticsResponse", "AgentPerformanceResponse",
    "TradeChanges", "TradeCompletion", "TradeResponse", "TradeListResponse", "TradingStatisticsResponse",
    "RiskEventChanges", "RiskEventResolution", "RiskEventResponse", "RiskStatisticsResponse",
    "ExposureEntry", "resolve_changeset",
    "RiskLimitsChanges", "RiskLimitsResponse", "RiskMetricsResponse",
    "SystemConfigurationChanges", "SystemConfigurationResponse",
    "PerformanceMetricChanges", "PerformanceMetricResponse",
    "PaginationMeta",
]
