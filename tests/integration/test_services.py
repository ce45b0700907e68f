"""
Service layer tests against an in-memory database.
"""
import uuid
import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy import update

from swarm.errors import NotFound, ReferenceNotFound, UniquenessConflict, ValidationFailed, ViolationKind
from swarm.models.trade import Trade
from swarm.models.trading_agent import TradingAgent
from swarm.services import analytics, risk, system, trading


def make_event(db, agent, severity="high", created_at=None, **attrs):
    event = risk.create_risk_event(db, {
        "event_type": "drawdown_warning",
        "severity": severity,
        "message": f"{severity} drawdown",
        "agent_id": agent.id,
        **attrs,
    })
    if created_at is not None:
        event.created_at = created_at
        db.commit()
    return event


# =============================================================================
# Agents
# =============================================================================

class TestAgents:

    def test_create_applies_storage_defaults(self, db_session):
        agent = trading.create_agent(db_session, {"name": "Defaults"})

        assert agent.status == "idle"
        assert agent.balance == Decimal("0.00")
        assert agent.risk_tolerance == Decimal("0.0200")
        assert agent.total_trades == 0
        assert agent.win_rate == 0.0

    def test_duplicate_name(self, db_session, agent, agent_attrs):
        with pytest.raises(UniquenessConflict) as exc_info:
            trading.create_agent(db_session, agent_attrs)

        assert exc_info.value.fields == {"name": ViolationKind.NOT_UNIQUE}
        assert len(trading.list_agents(db_session)) == 1

    def test_session_usable_after_conflict(self, db_session, agent, agent_attrs):
        with pytest.raises(UniquenessConflict):
            trading.create_agent(db_session, agent_attrs)

        other = trading.create_agent(db_session, {**agent_attrs, "name": "Scalper Gamma"})
        assert other.id != agent.id

    def test_invalid_create_raises_every_violation(self, db_session):
        with pytest.raises(ValidationFailed) as exc_info:
            trading.create_agent(db_session, {"status": "sleeping", "risk_tolerance": "0"})

        assert exc_info.value.fields == {
            "name": ViolationKind.MISSING,
            "status": ViolationKind.NOT_IN_ENUM,
            "risk_tolerance": ViolationKind.OUT_OF_RANGE,
        }
        assert trading.list_agents(db_session) == []

    def test_risk_tolerance_finer_than_column_rejected(self, db_session):
        with pytest.raises(ValidationFailed) as exc_info:
            trading.create_agent(db_session, {"name": "Precise", "risk_tolerance": "0.00001"})

        assert exc_info.value.fields == {"risk_tolerance": ViolationKind.OUT_OF_RANGE}
        assert trading.list_agents(db_session) == []

    def test_get_missing_agent(self, db_session):
        with pytest.raises(NotFound):
            trading.get_agent(db_session, uuid.uuid4())

    def test_get_malformed_id(self, db_session):
        with pytest.raises(NotFound):
            trading.get_agent(db_session, "not-a-uuid")

    def test_update(self, db_session, agent):
        updated = trading.update_agent(db_session, agent, {"balance": "12500.50"})

        assert updated.balance == Decimal("12500.50")
        assert updated.name == "Momentum Trader Alpha"

    def test_toggle_status(self, db_session, agent):
        assert trading.toggle_agent_status(db_session, agent.id).status == "active"
        assert trading.toggle_agent_status(db_session, agent.id).status == "idle"

    def test_toggle_stopped_goes_idle(self, db_session, agent):
        trading.update_agent(db_session, agent, {"status": "stopped"})

        assert trading.toggle_agent_status(db_session, agent.id).status == "idle"

    def test_list_by_status(self, db_session, agent):
        trading.create_agent(db_session, {"name": "Runner", "status": "active"})

        assert [a.name for a in trading.list_agents(db_session, "active")] == ["Runner"]

    def test_delete_cascades(self, db_session, agent, trade_attrs):
        trading.create_trade(db_session, trade_attrs)
        make_event(db_session, agent)

        trading.delete_agent(db_session, agent)

        assert trading.list_agents(db_session) == []
        assert trading.list_trades(db_session) == []
        assert risk.list_risk_events(db_session) == []

    def test_agent_statistics(self, db_session, agent):
        trading.create_agent(db_session, {"name": "B", "status": "active"})
        trading.create_agent(db_session, {"name": "C", "status": "stopped"})
        trading.create_agent(db_session, {"name": "D", "status": "error"})

        assert trading.get_agent_statistics(db_session) == {
            "total_count": 4,
            "active_count": 1,
            "idle_count": 1,
            "error_count": 1,
            "stopped_count": 1,
        }


# =============================================================================
# Trades
# =============================================================================

class TestTrades:

    def test_create_trade(self, db_session, trade_attrs):
        trade = trading.create_trade(db_session, trade_attrs)

        assert trade.status == "pending"
        assert trade.trade_value == Decimal("21000")
        assert trade.metadata_ == {}
        assert not trade.is_completed

    def test_unknown_agent(self, db_session, trade_attrs):
        with pytest.raises(ReferenceNotFound) as exc_info:
            trading.create_trade(db_session, {**trade_attrs, "agent_id": str(uuid.uuid4())})

        assert exc_info.value.fields == {"agent_id": ViolationKind.NOT_FOUND}
        assert db_session.query(Trade).count() == 0

    def test_complete_winning_trade(self, db_session, agent, trade_attrs, now):
        trade = trading.create_trade(db_session, trade_attrs)

        trade = trading.complete_trade(db_session, trade, {"pnl": "150.25", "fees": "2.50"}, now=now)

        db_session.refresh(agent)
        assert trade.is_completed
        assert trade.net_pnl == Decimal("147.75")
        assert agent.total_trades == 1
        assert agent.winning_trades == 1
        assert agent.losing_trades == 0
        assert agent.last_trade_at == datetime(2024, 3, 1, 10, 0, 0)

    def test_complete_losing_and_break_even(self, db_session, agent, trade_attrs, now):
        losing = trading.create_trade(db_session, trade_attrs)
        flat = trading.create_trade(db_session, trade_attrs)

        trading.complete_trade(db_session, losing, {"pnl": "-40"}, now=now)
        trading.complete_trade(db_session, flat, {"pnl": "0"}, now=now)

        db_session.refresh(agent)
        assert agent.total_trades == 2
        assert agent.winning_trades == 0
        assert agent.losing_trades == 1
        assert agent.win_rate == 0.0

    def test_complete_twice_counts_once(self, db_session, agent, trade_attrs, now):
        trade = trading.create_trade(db_session, trade_attrs)

        trading.complete_trade(db_session, trade, {"pnl": "10"}, now=now)
        trading.complete_trade(db_session, trade, {"pnl": "12"}, now=now)

        db_session.refresh(agent)
        assert agent.total_trades == 1
        assert trade.pnl == Decimal("12.00")

    def test_invalid_completion_changes_nothing(self, db_session, agent, trade_attrs, now):
        trade = trading.create_trade(db_session, trade_attrs)

        with pytest.raises(ValidationFailed) as exc_info:
            trading.complete_trade(db_session, trade, {"fees": "-1"}, now=now)

        db_session.refresh(agent)
        db_session.refresh(trade)
        assert exc_info.value.fields == {"fees": ViolationKind.OUT_OF_RANGE}
        assert trade.status == "pending"
        assert agent.total_trades == 0

    def test_record_trade_outcome_uses_now_without_execution_time(self, db_session, agent, now):
        trade = Trade(pnl=Decimal("5"), executed_at=None)

        agent = trading.record_trade_outcome(db_session, agent, trade, now=now)

        assert agent.total_trades == 1
        assert agent.winning_trades == 1
        assert agent.last_trade_at == now

    def test_completion_ignores_identity_fields(self, db_session, agent, trade_attrs, now):
        other = trading.create_agent(db_session, {"name": "Scalper Gamma"})
        trade = trading.create_trade(db_session, trade_attrs)

        trade = trading.complete_trade(
            db_session, trade, {"pnl": "10", "agent_id": other.id, "symbol": "DOGE/USD"}, now=now
        )

        db_session.refresh(agent)
        db_session.refresh(other)
        assert trade.agent_id == agent.id
        assert trade.symbol == "BTC/USD"
        assert agent.total_trades == 1
        assert agent.winning_trades == 1
        assert other.total_trades == 0

    def test_completion_counts_from_stored_agent(self, db_session, agent, trade_attrs, now):
        trade = trading.create_trade(db_session, trade_attrs)
        # stored counters move on without the loaded agent seeing it
        db_session.execute(
            update(TradingAgent).where(TradingAgent.id == agent.id).values(
                total_trades=5, winning_trades=3
            ).execution_options(synchronize_session=False)
        )
        db_session.commit()
        assert agent.total_trades == 0

        trading.complete_trade(db_session, trade, {"pnl": "1"}, now=now)

        assert agent.total_trades == 6
        assert agent.winning_trades == 4

    def test_pnl_scale_is_exact(self, db_session, agent, trade_attrs):
        trade = trading.create_trade(db_session, {**trade_attrs, "pnl": "100.50", "fees": "0.005"})

        db_session.refresh(trade)
        assert trade.net_pnl == Decimal("100.495")

    def test_pnl_finer_than_cents_rejected(self, db_session, agent, trade_attrs):
        with pytest.raises(ValidationFailed) as exc_info:
            trading.create_trade(db_session, {**trade_attrs, "pnl": "100.505"})

        assert exc_info.value.fields == {"pnl": ViolationKind.OUT_OF_RANGE}
        assert db_session.query(Trade).count() == 0

    def test_recent_trades_newest_first(self, db_session, trade_attrs):
        for hour in (8, 11, 9):
            trading.create_trade(db_session, {**trade_attrs, "executed_at": f"2024-03-01T{hour:02d}:00:00"})

        recent = trading.list_recent_trades(db_session, limit=2)

        assert [t.executed_at.hour for t in recent] == [11, 9]
        assert recent[0].agent.name == "Momentum Trader Alpha"

    def test_trading_statistics(self, db_session, trade_attrs, now):
        win = trading.create_trade(db_session, trade_attrs)
        loss = trading.create_trade(db_session, trade_attrs)
        trading.create_trade(db_session, trade_attrs)
        trading.complete_trade(db_session, win, {"pnl": "100.50"}, now=now)
        trading.complete_trade(db_session, loss, {"pnl": "-20.25"}, now=now)

        stats = trading.get_trading_statistics(db_session)

        assert stats["total_trades"] == 3
        assert stats["executed_trades"] == 2
        assert stats["pending_trades"] == 1
        assert stats["total_pnl"] == Decimal("80.25")
        assert stats["winning_trades"] == 1
        assert stats["win_rate"] == 50.0

    def test_agent_performance(self, db_session, agent, trade_attrs, now):
        trade = trading.create_trade(db_session, trade_attrs)
        trading.create_trade(db_session, trade_attrs)
        trading.complete_trade(db_session, trade, {"pnl": "30"}, now=now)

        performance = trading.get_agent_performance(db_session, agent.id)

        assert performance["total_trades"] == 2
        assert performance["executed_trades"] == 1
        assert performance["win_rate"] == 100.0
        assert performance["total_pnl"] == Decimal("30")
        assert performance["current_balance"] == Decimal("10000.00")


# =============================================================================
# Risk
# =============================================================================

class TestRisk:

    def test_unknown_agent(self, db_session):
        with pytest.raises(ReferenceNotFound):
            risk.create_risk_event(db_session, {
                "event_type": "emergency_stop",
                "severity": "critical",
                "message": "halt",
                "agent_id": str(uuid.uuid4()),
            })

    def test_resolve(self, db_session, agent, now):
        event = make_event(db_session, agent, created_at=now - timedelta(hours=5))

        event = risk.resolve_event(db_session, event, {"resolved": False}, now=now)

        assert event.is_resolved
        assert event.resolved_at == now
        assert event.age_in_hours(now) == 5

    def test_resolve_twice(self, db_session, agent, now):
        event = make_event(db_session, agent)
        later = now + timedelta(hours=1)

        risk.resolve_event(db_session, event, now=now)
        event = risk.resolve_event(db_session, event, now=later)

        assert event.is_resolved
        assert event.resolved_at == later

    def test_resolve_missing_event(self, db_session):
        with pytest.raises(NotFound):
            risk.get_risk_event(db_session, uuid.uuid4())

    def test_active_and_critical(self, db_session, agent, now):
        critical = make_event(db_session, agent, "critical", created_at=now - timedelta(hours=2))
        newer_critical = make_event(db_session, agent, "critical", created_at=now - timedelta(hours=1))
        low = make_event(db_session, agent, "low")
        resolved = make_event(db_session, agent, "critical")
        risk.resolve_event(db_session, resolved, now=now)

        assert {e.id for e in risk.list_active_risk_events(db_session)} == {critical.id, newer_critical.id, low.id}
        assert [e.id for e in risk.list_critical_risk_events(db_session)] == [newer_critical.id, critical.id]

    def test_statistics(self, db_session, agent, now):
        oldest = make_event(db_session, agent, "high", created_at=now - timedelta(hours=10))
        make_event(db_session, agent, "critical", created_at=now - timedelta(hours=1))
        first = make_event(db_session, agent, "low", created_at=now - timedelta(hours=4))
        second = make_event(db_session, agent, "low", created_at=now - timedelta(hours=2))
        risk.resolve_event(db_session, first, now=now)
        risk.resolve_event(db_session, second, now=now)

        stats = risk.get_risk_statistics(db_session)

        assert stats["total_active_events"] == 2
        assert stats["critical_events"] == 1
        assert stats["high_events"] == 1
        assert stats["low_events"] == 0
        assert stats["oldest_unresolved"].id == oldest.id
        assert stats["avg_resolution_hours"] == 3.0

    def test_statistics_without_resolved_events(self, db_session):
        stats = risk.get_risk_statistics(db_session)

        assert stats["total_active_events"] == 0
        assert stats["oldest_unresolved"] is None
        assert stats["avg_resolution_hours"] is None

    def test_exposure_breakdown(self, db_session, agent, trade_attrs, now):
        buy = trading.create_trade(db_session, trade_attrs)
        sell = trading.create_trade(db_session, {**trade_attrs, "side": "sell", "symbol": "ETH/USD",
                                                 "quantity": "2", "price": "3000"})
        trading.create_trade(db_session, trade_attrs)
        trading.complete_trade(db_session, buy, now=now)
        trading.complete_trade(db_session, sell, now=now)

        by_symbol = risk.calculate_exposure_breakdown(db_session, "symbol")
        by_side = risk.calculate_exposure_breakdown(db_session, "side")
        by_agent = risk.calculate_exposure_breakdown(db_session, "agent")

        assert by_symbol["BTC/USD"] == {"trade_count": 1, "total_exposure": Decimal("21000")}
        assert by_symbol["ETH/USD"]["total_exposure"] == Decimal("6000")
        assert by_side["buy"]["trade_count"] == 1
        assert by_side["sell"]["total_exposure"] == Decimal("6000")
        assert by_agent[str(agent.id)] == {
            "trade_count": 2,
            "total_exposure": Decimal("27000"),
            "agent_name": "Momentum Trader Alpha",
        }
        assert risk.calculate_exposure_breakdown(db_session, "region") == {}

    def test_risk_metrics(self, db_session, agent, trade_attrs, now):
        for hour, pnl in ((8, "100"), (9, "-150"), (10, "20")):
            trade = trading.create_trade(db_session, {**trade_attrs, "executed_at": f"2024-03-01T{hour:02d}:00:00"})
            trading.complete_trade(db_session, trade, {"pnl": pnl}, now=now)
        trading.create_trade(db_session, trade_attrs)
        make_event(db_session, agent, "critical")
        make_event(db_session, agent, "high")
        risk.resolve_event(db_session, make_event(db_session, agent, "critical"), now=now)

        metrics = risk.calculate_risk_metrics(db_session)

        assert metrics == {
            "total_exposure": Decimal("63000"),
            "total_pnl": Decimal("-30"),
            "max_drawdown": Decimal("150"),
            "active_risk_events": 2,
            "critical_risk_events": 1,
        }

    def test_risk_metrics_empty(self, db_session):
        metrics = risk.calculate_risk_metrics(db_session)

        assert metrics["total_exposure"] == Decimal("0")
        assert metrics["max_drawdown"] == Decimal("0")
        assert metrics["active_risk_events"] == 0

    def test_default_limits(self, db_session):
        limits = risk.get_current_limits(db_session)

        assert limits["max_total_exposure"] == Decimal("10000.00")
        assert limits["max_correlation"] == Decimal("0.8")
        assert limits["max_agents"] == 10

    def test_update_limits(self, db_session):
        limits = risk.update_limits(db_session, {"max_agents": 12, "max_correlation": "0.9"})

        assert limits["max_agents"] == 12
        assert limits["max_correlation"] == Decimal("0.9")
        assert limits["max_daily_loss"] == Decimal("500.00")
        config = system.get_configuration(db_session, "max_agents")
        assert config.value == "12"
        assert config.category == "risk_management"

        risk.update_limits(db_session, {"max_agents": "15"})

        assert risk.get_current_limits(db_session)["max_agents"] == 15
        assert len(system.list_configurations(db_session, "risk_management")) == 2

    def test_invalid_limits_store_nothing(self, db_session):
        with pytest.raises(ValidationFailed) as exc_info:
            risk.update_limits(db_session, {"max_agents": 20, "max_correlation": "1.5"})

        assert exc_info.value.fields == {"max_correlation": ViolationKind.OUT_OF_RANGE}
        assert system.list_configurations(db_session, "risk_management") == []


# =============================================================================
# System configuration
# =============================================================================

class TestSystemConfiguration:

    def test_duplicate_key(self, db_session):
        system.create_configuration(db_session, {"key": "max_concurrent_trades", "value": "100"})

        with pytest.raises(UniquenessConflict) as exc_info:
            system.create_configuration(db_session, {"key": "max_concurrent_trades", "value": "50"})

        assert exc_info.value.fields == {"key": ViolationKind.NOT_UNIQUE}
        assert system.get_config_value(db_session, "max_concurrent_trades") == "100"

    def test_get_config_value_default(self, db_session):
        assert system.get_config_value(db_session, "missing", "fallback") == "fallback"

    def test_get_missing_configuration(self, db_session):
        with pytest.raises(NotFound):
            system.get_configuration(db_session, "missing")

    def test_list_and_group(self, db_session):
        system.create_configuration(db_session, {"key": "b_limit", "value": "1", "category": "trading"})
        system.create_configuration(db_session, {"key": "a_limit", "value": "2", "category": "trading"})
        system.create_configuration(db_session, {"key": "webhook", "value": "x", "category": "notifications"})

        assert [c.key for c in system.list_configurations(db_session, "trading")] == ["a_limit", "b_limit"]
        grouped = system.configurations_by_category(db_session)
        assert [c.key for c in grouped["trading"]] == ["a_limit", "b_limit"]
        assert [c.key for c in grouped["notifications"]] == ["webhook"]

    def test_update_and_delete(self, db_session):
        config = system.create_configuration(db_session, {"key": "correlation_threshold", "value": "0.7"})

        system.update_configuration(db_session, config, {"value": "0.8"})
        assert system.get_config_value(db_session, "correlation_threshold") == "0.8"

        system.delete_configuration(db_session, config)
        assert system.get_config_value(db_session, "correlation_threshold") is None


# =============================================================================
# Performance metrics
# =============================================================================

class TestPerformanceMetrics:

    def test_one_metric_per_agent_per_day(self, db_session, agent):
        attrs = {"agent_id": agent.id, "date": "2024-03-01", "daily_pnl": "12.50"}
        analytics.create_performance_metric(db_session, attrs)

        with pytest.raises(UniquenessConflict) as exc_info:
            analytics.create_performance_metric(db_session, attrs)

        assert exc_info.value.fields == {"date": ViolationKind.NOT_UNIQUE}

    def test_list_most_recent_first(self, db_session, agent):
        for day in (1, 3, 2):
            analytics.create_performance_metric(db_session, {"agent_id": agent.id, "date": date(2024, 3, day)})

        metrics = analytics.list_performance_metrics(db_session, agent.id)

        assert [m.date.day for m in metrics] == [3, 2, 1]

    def test_unknown_agent(self, db_session):
        with pytest.raises(ReferenceNotFound):
            analytics.create_performance_metric(db_session, {"agent_id": uuid.uuid4(), "date": "2024-03-01"})
