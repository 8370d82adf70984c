"""Shared API dependencies: settings, DB session and path lookups."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from revindex.config import Settings
from revindex.models.project import StoredProject
from revindex.models.revision import Revision
from revindex.services.history_service import get_project, get_revision_by_id


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


async def get_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """Get a database session."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def require_project(
    project_name: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StoredProject:
    """Resolve the project named in the path, or 404."""
    project = await get_project(session, project_name)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project '{project_name}' not found")
    return project


async def require_revision(
    revision_id: str,
    project: Annotated[StoredProject, Depends(require_project)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Revision:
    """Resolve the revision named in the path, or 404."""
    revision = await get_revision_by_id(session, project, revision_id)
    if revision is None:
        raise HTTPException(
            status_code=404,
            detail=f"Revision '{revision_id}' not found in project '{project.name}'",
        )
    return revision
