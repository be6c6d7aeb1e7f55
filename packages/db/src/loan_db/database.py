# This project was developed with assistance from AI tools.
"""Async engine, session factory and FastAPI session dependency."""

import logging
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from .config import db_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _engine_kwargs(url: str, echo: bool) -> dict:
    """Return dialect-specific engine options for SQLite vs PostgreSQL."""
    kwargs: dict = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(url, **_engine_kwargs(url, echo))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(db_settings.DATABASE_URL, echo=db_settings.SQL_ECHO)
SessionLocal = build_session_factory(engine)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a session; roll back on any exception so no partial commit survives."""
    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables (idempotent)."""
    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")
