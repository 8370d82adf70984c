"""Tests for the health endpoint and global error handling."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from revindex import __version__
from revindex.services.ingest_service import create_project
from tests.conftest import create_test_client

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from revindex.config import Settings


@pytest.fixture
async def client(test_settings: Settings) -> AsyncGenerator[AsyncClient]:
    async with create_test_client(test_settings) as ac:
        yield ac


class TestHealth:
    async def test_health_ok(self, client: AsyncClient) -> None:
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "ok",
            "version": __version__,
            "database": "ok",
            "missing_tables": [],
            "projects": 0,
        }

    async def test_counts_projects(
        self, client: AsyncClient, db_session: AsyncSession
    ) -> None:
        await create_project(db_session, "alpha")
        await create_project(db_session, "beta")
        resp = await client.get("/api/health")
        assert resp.json()["projects"] == 2

    async def test_missing_index_table_is_degraded(
        self, client: AsyncClient, db_engine: AsyncEngine
    ) -> None:
        async with db_engine.begin() as conn:
            await conn.execute(text("DROP TABLE files_for_version"))
        resp = await client.get("/api/health")
        data = resp.json()
        assert resp.status_code == 200
        assert data["status"] == "degraded"
        assert data["database"] == "ok"
        assert data["missing_tables"] == ["files_for_version"]
        assert data["projects"] == 0

    async def test_empty_project_list(self, client: AsyncClient) -> None:
        resp = await client.get("/api/projects")
        assert resp.json() == []


class TestErrorHandlers:
    async def test_operational_error_returns_503(self, client: AsyncClient) -> None:
        with patch(
            "revindex.api.projects.list_projects",
            new_callable=AsyncMock,
            side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
        ):
            resp = await client.get("/api/projects")
        assert resp.status_code == 503
        assert resp.json()["detail"] == "Database temporarily unavailable"

    async def test_value_error_returns_422(self, client: AsyncClient) -> None:
        with patch(
            "revindex.api.projects.list_projects",
            new_callable=AsyncMock,
            side_effect=ValueError("bad input"),
        ):
            resp = await client.get("/api/projects")
        assert resp.status_code == 422
        assert resp.json()["detail"] == "bad input"
