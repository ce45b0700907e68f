import logging
from typing import Generator, Optional

from sqlalchemy import JSON, create_engine, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from swarm.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)

_engine: Optional[Engine] = None


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections get foreign key enforcement switched on so that
    dangling agent references fail at the storage boundary exactly as
    they do on PostgreSQL. In-memory SQLite shares a single connection.
    """
    kwargs = {"echo": echo, "future": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def get_engine() -> Engine:
    """Get the application engine, creating it on first use."""
    global _engine
    if _engine is None:
        settings = get_settings()
        logger.info(f"Creating database engine for: {settings.database_url.split('@')[-1]}")
        _engine = create_db_engine(settings.database_url, echo=settings.database_echo)
    return _engine


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session bound to the application engine."""
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()
