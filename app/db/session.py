"""
Database session management.

Provides SQLModel engine and session creation.
"""

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, Session
from typing import Generator

from app.core.config import settings


def make_engine(url: str, echo: bool = False) -> Engine:
    """
    Create a database engine for ``url``.

    SQLite connections are shared across the worker threads the remote
    store runs on; in-memory SQLite keeps a single connection so every
    thread sees the same database.
    """
    if url.startswith("sqlite"):
        kwargs = { "connect_args": { "check_same_thread": False } }
        if ":memory:" in url or url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        echo=echo,            # Log SQL queries in debug mode
        pool_pre_ping=True,   # Verify connections before using
        pool_size=5,          # Connection pool size
        max_overflow=10       # Max connections beyond pool_size
    )


# Create database engine
engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI endpoints to get database session.

    Yields:
        SQLModel Session instance
    """
    with Session(engine) as session:
        yield session
