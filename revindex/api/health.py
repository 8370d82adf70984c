"""Health check endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from revindex import __version__
from revindex.api.deps import get_session
from revindex.models import Base
from revindex.services.history_service import count_projects

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    missing_tables: list[str]
    projects: int


def _missing_index_tables(session: Session) -> list[str]:
    inspector = inspect(session.connection())
    return sorted(name for name in Base.metadata.tables if not inspector.has_table(name))


@router.get("/api/health", response_model=HealthResponse)
async def health_check(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """Report database reachability and whether the revision index is usable.

    Status is ``degraded`` when the database cannot be queried or any index
    table is missing; the project count is only taken on a complete schema.
    """
    db_status = "ok"
    missing: list[str] = []
    projects = 0
    try:
        missing = await session.run_sync(_missing_index_tables)
        if not missing:
            projects = await count_projects(session)
    except Exception:
        logger.warning("Health check database query failed", exc_info=True)
        db_status = "error"

    if missing:
        logger.warning("Revision index tables missing: %s", ", ".join(missing))

    return HealthResponse(
        status="ok" if db_status == "ok" and not missing else "degraded",
        version=__version__,
        database=db_status,
        missing_tables=missing,
        projects=projects,
    )
