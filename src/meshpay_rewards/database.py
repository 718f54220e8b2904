"""Database connection and session management."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from meshpay_rewards.config import get_settings
from meshpay_rewards.models.base import Base

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def get_engine(database_url: str | None = None) -> Engine:
    """Create database engine."""
    settings = get_settings()
    return create_engine(
        database_url or settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


# Global engine and session factory
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def init_db(database_url: str | None = None) -> tuple[Engine, sessionmaker[Session]]:
    """Initialize engine, session factory and tables.

    Later calls return the existing engine. Asking for a different
    database_url while one is open raises RuntimeError; call dispose_db()
    first to switch databases.
    """
    global _engine, _session_factory
    if _engine is not None and _session_factory is not None:
        if database_url is not None and make_url(database_url) != _engine.url:
            raise RuntimeError(
                f"Database already initialized for {_engine.url!r}; "
                "call dispose_db() before switching"
            )
        return _engine, _session_factory

    _engine = get_engine(database_url)
    Base.metadata.create_all(_engine)
    _session_factory = sessionmaker(
        _engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )
    return _engine, _session_factory


def dispose_db() -> None:
    """Drop the global engine (tests, shutdown)."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def get_session() -> Iterator[Session]:
    """Get a database session that commits on success and rolls back on error."""
    _, factory = init_db()
    with factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
