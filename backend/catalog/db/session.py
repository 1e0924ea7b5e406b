"""Async engine and session factory configuration."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from catalog.core.config import Settings
from catalog.db.base import Base

# Register models on Base.metadata before create_all runs
from catalog.db import models  # noqa: F401

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Build the process-wide async engine.

    pool_pre_ping: Test connections before using (handles stale connections)
    pool_recycle: Recycle connections after 30 minutes (prevents timeout)
    """
    kwargs: dict[str, Any] = {
        "echo": settings.database_echo,
        "pool_pre_ping": True,
    }
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(
            pool_recycle=1800,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            connect_args={"connect_timeout": 10},
        )
    return create_async_engine(settings.database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; results are copied into schemas anyway
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")
