"""Async engine and session factory for the users store."""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_database_engine(database_url: str) -> AsyncEngine:
    """Create the async engine, checking pooled server connections before reuse."""

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return create_async_engine(url)
    return create_async_engine(url, pool_pre_ping=True)


def create_session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Create the session factory repositories open one short session per call from."""

    return async_sessionmaker(create_database_engine(database_url), expire_on_commit=False)
