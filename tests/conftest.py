"""Shared test fixtures for the revision index."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from revindex.config import Settings
from revindex.database import init_schema
from revindex.models.file import FileStatus
from revindex.schemas.ingest import CommitterInfo, FileChange, RevisionCreate
from revindex.services.ingest_service import create_project, record_revision

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable
    from pathlib import Path

    from revindex.models.project import StoredProject
    from revindex.models.revision import Revision


def added(path: str, *, is_directory: bool = False) -> FileChange:
    return FileChange(path=path, status=FileStatus.ADDED, is_directory=is_directory)


def modified(path: str) -> FileChange:
    return FileChange(path=path, status=FileStatus.MODIFIED)


def deleted(path: str, *, is_directory: bool = False) -> FileChange:
    return FileChange(path=path, status=FileStatus.DELETED, is_directory=is_directory)


def replaced(path: str) -> FileChange:
    return FileChange(path=path, status=FileStatus.REPLACED)


def commit(
    revision_id: str,
    order: int,
    *changes: FileChange,
    timestamp: int | None = None,
    author: str | None = "alice",
    message: str = "",
) -> RevisionCreate:
    """Build an ingestion request; timestamps default to one second per order."""
    return RevisionCreate(
        revision_id=revision_id,
        order=order,
        timestamp=timestamp if timestamp is not None else 1_700_000_000_000 + order * 1000,
        committer=CommitterInfo(username=author) if author else None,
        commit_msg=message or f"commit {revision_id}",
        changes=list(changes),
    )


@asynccontextmanager
async def create_test_client(settings: Settings) -> AsyncGenerator[AsyncClient]:
    """Create an HTTP test client with an initialized app.

    Performs the work of the application lifespan (engine, schema) because
    ASGITransport does not trigger it.
    """
    from revindex.database import create_engine as create_db_engine
    from revindex.main import create_app

    app = create_app(settings)
    engine, session_factory = create_db_engine(settings)
    app.state.engine = engine
    app.state.session_factory = session_factory
    await init_schema(engine)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    await engine.dispose()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings backed by a temporary database."""
    db_path = tmp_path / "test.db"
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        database_url=f"sqlite+aiosqlite:///{db_path}",
    )


@pytest.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine with the schema in place."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
    )
    await init_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def project(db_session: AsyncSession) -> StoredProject:
    """An empty project."""
    return await create_project(db_session, "alpha")


@pytest.fixture
def ingest(
    db_session: AsyncSession, project: StoredProject
) -> Callable[[RevisionCreate], Awaitable[Revision]]:
    """Record a commit against the ``project`` fixture."""

    async def _ingest(data: RevisionCreate) -> Revision:
        return await record_revision(db_session, project, data)

    return _ingest


@pytest.fixture
async def scenario(
    db_session: AsyncSession, project: StoredProject
) -> dict[str, Revision]:
    """r1 adds a.txt, r2 adds b.txt, r3 deletes a.txt."""
    r1 = await record_revision(db_session, project, commit("r1", 1, added("a.txt")))
    r2 = await record_revision(db_session, project, commit("r2", 2, added("b.txt")))
    r3 = await record_revision(db_session, project, commit("r3", 3, deleted("a.txt")))
    return {"r1": r1, "r2": r2, "r3": r3}
