"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database with foreign keys
switched on, a session bound to it and, where needed, a FastAPI test
client whose `get_db` dependency yields that same session.
"""
import pytest
from datetime import datetime
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from swarm.database import Base, SessionLocal, create_db_engine, get_db
import swarm.models  # noqa: F401


NOW = datetime(2024, 3, 1, 12, 0, 0)


# =============================================================================
# Database fixtures
# =============================================================================

@pytest.fixture(scope="function")
def test_engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    session = SessionLocal(bind=test_engine)
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# FastAPI test client
# =============================================================================

@pytest.fixture(scope="function")
def client(db_session) -> Generator[TestClient, None, None]:
    from swarm.main import app

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# Sample data
# =============================================================================

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def agent_attrs() -> dict:
    return {
        "name": "Momentum Trader Alpha",
        "status": "idle",
        "balance": "10000.00",
        "risk_tolerance": "0.05",
        "strategy_params": {"strategy_type": "momentum", "lookback_period": 20},
    }


@pytest.fixture
def agent(db_session, agent_attrs):
    from swarm.services.trading import create_agent
    return create_agent(db_session, agent_attrs)


@pytest.fixture
def trade_attrs(agent) -> dict:
    return {
        "symbol": "BTC/USD",
        "side": "buy",
        "type": "market",
        "quantity": "0.5",
        "price": "42000.00",
        "executed_at": "2024-03-01T10:00:00",
        "agent_id": str(agent.id),
    }
