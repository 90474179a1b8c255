"""Standalone Session Factory: async sessions outside the FastAPI request cycle.

Invariants:
    - Sessions never expire attributes on commit (same as DatabaseSessionManager)
    - In-memory SQLite engines share ONE connection, otherwise every session
      would see a fresh, empty database

Design Decisions:
    - Separate from infrastructure/database.py: scripts and test fixtures need an
      engine without the pooled manager (ADR: no global state in fixtures)
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from tasklink.db.base import Base


def create_engine_for(database_url: str) -> AsyncEngine:
    """Create an async engine; in-memory SQLite gets a StaticPool."""
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_async_engine(
            database_url, echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(database_url, echo=False)


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to engine."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables from ORM metadata (tests and local bootstrap)."""
    import tasklink.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
