"""Database engine, session and transaction management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from revindex.models.base import Base

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator

    from revindex.config import Settings


def create_engine(
    settings: Settings,
) -> tuple[
    AsyncEngine,
    async_sessionmaker[AsyncSession],
]:
    """Create async engine and session factory.

    Returns (engine, session_factory) tuple.
    """
    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
    )
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine, session_factory


async def init_schema(engine: AsyncEngine) -> None:
    """Create all revision index tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Yield an async database session."""
    async with session_factory() as session:
        yield session


@asynccontextmanager
async def read_transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run reads against one consistent view of the database.

    Joins the caller's transaction when one is already open, otherwise
    opens a transaction for the duration of the block.
    """
    if session.in_transaction():
        yield session
        return
    async with session.begin():
        yield session


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Group writes so they become visible together or not at all.

    When the caller already holds a transaction the writes join it and the
    caller decides whether to commit or roll back. Otherwise a transaction
    is opened here, committed on success and rolled back on error.
    """
    if session.in_transaction():
        yield session
        await session.flush()
        return
    async with session.begin():
        yield session
