"""Database connection and session management."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from people_engine.config import get_settings
from people_engine.models import Base


def get_engine(url: str | None = None) -> Engine:
    """Create database engine."""
    settings = get_settings()
    return create_engine(
        url or settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


# Global engine and session factory
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def init_db() -> tuple[Engine, sessionmaker[Session]]:
    """Initialize database engine and session factory."""
    global _engine, _session_factory
    if _engine is None:
        _engine = get_engine()
        _session_factory = sessionmaker(
            _engine,
            expire_on_commit=False,
            autoflush=False,
        )
    return _engine, _session_factory


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get a database session that commits on success and rolls back on error."""
    _, factory = init_db()
    with factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def create_all(engine: Engine | None = None) -> None:
    """Create every table that does not exist yet."""
    if engine is None:
        engine, _ = init_db()
    Base.metadata.create_all(engine)
