"""Project history API endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from revindex.api.deps import get_session, get_settings, require_project, require_revision
from revindex.config import Settings
from revindex.models.project import StoredProject
from revindex.models.revision import Revision
from revindex.schemas.revision import (
    ChangeSetResponse,
    FileEntryResponse,
    ProjectResponse,
    RevisionListResponse,
    RevisionResponse,
    SnapshotResponse,
    TagResponse,
)
from revindex.services.datetime_service import to_epoch_millis
from revindex.services.history_service import (
    first_revision,
    get_revision_by_timestamp,
    last_revision,
    list_projects,
    list_revisions,
    next_revision,
    previous_revision,
)
from revindex.services.measurement_service import file_counts, get_tags, last_measured_version
from revindex.services.snapshot_service import FileKind, files_for_version, version_files

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _found(revision: Revision | None, what: str) -> RevisionResponse:
    if revision is None:
        raise HTTPException(status_code=404, detail=f"No {what} revision")
    return RevisionResponse.from_model(revision)


@router.get("", response_model=list[ProjectResponse])
async def list_projects_endpoint(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[ProjectResponse]:
    """List all projects."""
    return [ProjectResponse.from_model(p) for p in await list_projects(session)]


@router.get("/{project_name}/revisions", response_model=RevisionListResponse)
async def list_revisions_endpoint(
    project: Annotated[StoredProject, Depends(require_project)],
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    after: Annotated[int | None, Query(ge=0)] = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> RevisionListResponse:
    """List revisions in history order, one page at a time."""
    page_size = min(limit or settings.default_page_size, settings.max_page_size)
    revisions = await list_revisions(session, project, after_order=after, limit=page_size)
    next_after = revisions[-1].order if len(revisions) == page_size else None
    return RevisionListResponse(
        revisions=[RevisionResponse.from_model(r) for r in revisions],
        next_after=next_after,
    )


@router.get("/{project_name}/revisions/first", response_model=RevisionResponse)
async def first_revision_endpoint(
    project: Annotated[StoredProject, Depends(require_project)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RevisionResponse:
    """Get the oldest recorded revision."""
    return _found(await first_revision(session, project), "first")


@router.get("/{project_name}/revisions/last", response_model=RevisionResponse)
async def last_revision_endpoint(
    project: Annotated[StoredProject, Depends(require_project)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RevisionResponse:
    """Get the latest recorded revision."""
    return _found(await last_revision(session, project), "last")


@router.get("/{project_name}/revisions/at", response_model=RevisionResponse)
async def revision_at_endpoint(
    project: Annotated[StoredProject, Depends(require_project)],
    session: Annotated[AsyncSession, Depends(get_session)],
    timestamp: Annotated[str, Query(min_length=1)],
) -> RevisionResponse:
    """Get the revision committed at a timestamp (epoch ms or datetime string)."""
    millis = to_epoch_millis(timestamp)
    return _found(await get_revision_by_timestamp(session, project, millis), "matching")


@router.get("/{project_name}/revisions/id/{revision_id}", response_model=RevisionResponse)
async def get_revision_endpoint(
    revision: Annotated[Revision, Depends(require_revision)],
) -> RevisionResponse:
    """Get a revision by its source-control id."""
    return RevisionResponse.from_model(revision)


@router.get(
    "/{project_name}/revisions/id/{revision_id}/previous",
    response_model=RevisionResponse,
)
async def previous_revision_endpoint(
    revision: Annotated[Revision, Depends(require_revision)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RevisionResponse:
    """Get the revision before the given one."""
    return _found(await previous_revision(session, revision), "previous")


@router.get(
    "/{project_name}/revisions/id/{revision_id}/next",
    response_model=RevisionResponse,
)
async def next_revision_endpoint(
    revision: Annotated[Revision, Depends(require_revision)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RevisionResponse:
    """Get the revision after the given one."""
    return _found(await next_revision(session, revision), "next")


@router.get(
    "/{project_name}/revisions/id/{revision_id}/changes",
    response_model=ChangeSetResponse,
)
async def revision_changes_endpoint(
    revision: Annotated[Revision, Depends(require_revision)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ChangeSetResponse:
    """Get the paths changed at a revision with per-status counts."""
    changes = await version_files(session, revision)
    counts = await file_counts(session, revision)
    return ChangeSetResponse(
        revision=RevisionResponse.from_model(revision),
        changes=[FileEntryResponse.from_model(e) for e in changes],
        counts=counts,
    )


@router.get(
    "/{project_name}/revisions/id/{revision_id}/files",
    response_model=SnapshotResponse,
)
async def revision_files_endpoint(
    revision: Annotated[Revision, Depends(require_revision)],
    session: Annotated[AsyncSession, Depends(get_session)],
    kind: FileKind = FileKind.ALL,
) -> SnapshotResponse:
    """Get the files and directories live as of a revision."""
    entries = await files_for_version(session, revision, kind)
    return SnapshotResponse(
        revision=RevisionResponse.from_model(revision),
        files=[FileEntryResponse.from_model(e) for e in entries],
    )


@router.get(
    "/{project_name}/revisions/id/{revision_id}/tags",
    response_model=list[TagResponse],
)
async def revision_tags_endpoint(
    revision: Annotated[Revision, Depends(require_revision)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[TagResponse]:
    """Get the tags attached to a revision."""
    tags = await get_tags(session, revision)
    return [TagResponse(name=t.name, revision_id=revision.revision_id) for t in tags]


@router.get(
    "/{project_name}/metrics/{mnemonic}/last-measured",
    response_model=RevisionResponse,
)
async def last_measured_endpoint(
    mnemonic: str,
    project: Annotated[StoredProject, Depends(require_project)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RevisionResponse:
    """Get the latest revision that has a measurement for a metric."""
    revision = await last_measured_version(session, mnemonic, project)
    if revision is None:
        logger.debug("Metric %s never measured for %s", mnemonic, project.name)
    return _found(revision, f"'{mnemonic}'-measured")
