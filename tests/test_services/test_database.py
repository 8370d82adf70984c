"""Tests for database engine, session and transaction helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect, text

from revindex.database import create_engine, read_transaction, unit_of_work
from revindex.models.project import StoredProject

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from revindex.config import Settings


class TestDatabase:
    async def test_engine_connects(self, db_engine: AsyncEngine) -> None:
        async with db_engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            assert result.scalar() == 1

    async def test_schema_created(self, db_engine: AsyncEngine) -> None:
        async with db_engine.connect() as conn:
            tables = await conn.run_sync(lambda c: set(inspect(c).get_table_names()))
        assert {
            "stored_projects",
            "developers",
            "project_versions",
            "project_files",
            "files_for_version",
            "tags",
            "metrics",
            "version_measurements",
        } <= tables

    async def test_create_engine_from_settings(self, test_settings: Settings) -> None:
        engine, session_factory = create_engine(test_settings)
        try:
            async with session_factory() as session:
                result = await session.execute(text("SELECT 42"))
                assert result.scalar() == 42
        finally:
            await engine.dispose()


class TestTransactions:
    async def test_read_transaction_opens_and_closes(self, db_session: AsyncSession) -> None:
        assert not db_session.in_transaction()
        async with read_transaction(db_session):
            assert db_session.in_transaction()
        assert not db_session.in_transaction()

    async def test_read_transaction_joins_open_transaction(
        self, db_session: AsyncSession
    ) -> None:
        await db_session.execute(text("SELECT 1"))
        async with read_transaction(db_session):
            pass
        assert db_session.in_transaction()

    async def test_unit_of_work_commits(self, db_session: AsyncSession) -> None:
        async with unit_of_work(db_session):
            db_session.add(StoredProject(name="committed"))
        await db_session.rollback()
        result = await db_session.execute(text("SELECT count(*) FROM stored_projects"))
        assert result.scalar() == 1

    async def test_unit_of_work_rolls_back_on_error(self, db_session: AsyncSession) -> None:
        with pytest.raises(RuntimeError):
            async with unit_of_work(db_session):
                db_session.add(StoredProject(name="discarded"))
                await db_session.flush()
                raise RuntimeError("boom")
        result = await db_session.execute(text("SELECT count(*) FROM stored_projects"))
        assert result.scalar() == 0


class TestEnsureSqliteDir:
    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        from revindex.main import ensure_sqlite_dir

        db_path = tmp_path / "nested" / "db" / "revindex.db"
        ensure_sqlite_dir(f"sqlite+aiosqlite:///{db_path}")
        assert db_path.parent.is_dir()

    def test_ignores_memory_database(self, tmp_path: Path) -> None:
        from revindex.main import ensure_sqlite_dir

        ensure_sqlite_dir("sqlite+aiosqlite:///:memory:")
        assert list(tmp_path.iterdir()) == []
