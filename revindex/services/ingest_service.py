"""Ingestion: the single writer of revisions, file entries and snapshots."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from revindex.database import unit_of_work
from revindex.exceptions import InvalidArgumentError
from revindex.models.file import FileEntry, LiveFile
from revindex.models.project import Developer, StoredProject
from revindex.models.revision import Revision
from revindex.services.carry_forward import carried_forward, compose_live_set
from revindex.services.history_service import (
    get_revision_by_id,
    last_revision,
    resolve_project_id,
)
from revindex.services.snapshot_service import live_entries_by_path

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from revindex.schemas.ingest import CommitterInfo, RevisionCreate

logger = logging.getLogger(__name__)


async def create_project(session: AsyncSession, name: str) -> StoredProject:
    """Register a new project.

    Raises InvalidArgumentError if the name is blank or already taken.
    """
    name = name.strip()
    if not name:
        raise InvalidArgumentError("Project name must not be empty")
    async with unit_of_work(session):
        existing = await session.execute(select(StoredProject).where(StoredProject.name == name))
        if existing.scalar_one_or_none() is not None:
            raise InvalidArgumentError(f"Project {name!r} already exists")
        project = StoredProject(name=name)
        session.add(project)
        await session.flush()
    logger.info("Created project %s (id=%d)", name, project.id)
    return project


async def ensure_developer(
    session: AsyncSession,
    project: StoredProject | int | None,
    committer: CommitterInfo,
) -> Developer:
    """Return the project's developer for ``committer``, creating it if new.

    Fills in a missing name or email on an existing developer but never
    overwrites known values.
    """
    project_id = resolve_project_id(project)
    result = await session.execute(
        select(Developer).where(
            Developer.project_id == project_id, Developer.username == committer.username
        )
    )
    developer = result.scalar_one_or_none()
    if developer is None:
        developer = Developer(
            project_id=project_id,
            username=committer.username,
            name=committer.name,
            email=committer.email,
        )
        session.add(developer)
        await session.flush()
        return developer

    if developer.name is None and committer.name:
        developer.name = committer.name
    if developer.email is None and committer.email:
        developer.email = committer.email
    return developer


async def record_revision(
    session: AsyncSession,
    project: StoredProject | int | None,
    data: RevisionCreate,
) -> Revision:
    """Record one commit together with its file entries and live snapshot.

    The revision, its entries and its live-file rows are written in one unit
    of work, so readers see either none or all of them.

    Raises InvalidArgumentError if the project is unknown, the revision id is
    already recorded, or ``data.order`` does not follow the current last
    revision. The first revision of a project must have order 1.
    """
    project_id = resolve_project_id(project)
    async with unit_of_work(session):
        stored = await session.get(StoredProject, project_id)
        if stored is None:
            raise InvalidArgumentError(f"Unknown project id {project_id}")

        if await get_revision_by_id(session, project_id, data.revision_id) is not None:
            raise InvalidArgumentError(
                f"Revision {data.revision_id} already recorded for {stored.name}"
            )

        previous = await last_revision(session, project_id)
        if previous is None and data.order != 1:
            raise InvalidArgumentError(
                f"First revision of {stored.name} must have order 1, got {data.order}"
            )
        if previous is not None and data.order <= previous.order:
            raise InvalidArgumentError(
                f"Revision order {data.order} does not follow last order {previous.order} "
                f"of {stored.name}"
            )

        committer = (
            await ensure_developer(session, project_id, data.committer)
            if data.committer is not None
            else None
        )
        revision = Revision(
            project=stored,
            revision_id=data.revision_id,
            order=data.order,
            timestamp=data.timestamp,
            committer=committer,
            commit_msg=data.commit_msg,
            properties=data.properties,
        )
        session.add(revision)

        entries = [
            FileEntry(
                revision=revision,
                path=change.path,
                status=change.status,
                is_directory=change.is_directory,
            )
            for change in data.changes
        ]
        session.add_all(entries)
        await session.flush()

        previous_live = await live_entries_by_path(session, previous)
        live = compose_live_set(previous_live, entries)
        session.add_all(
            LiveFile(version_id=revision.id, file_id=entry.id) for entry in live.values()
        )
        await session.flush()

        logger.debug(
            "Revision %s: %d live entries, %d carried forward",
            data.revision_id,
            len(live),
            len(carried_forward(previous_live, live)),
        )

    logger.info(
        "Recorded revision %s (order %d) of %s with %d changed paths",
        revision.revision_id,
        revision.order,
        stored.name,
        len(entries),
    )
    return revision
