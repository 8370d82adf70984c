"""Revision history navigation: neighbours, endpoints and lookups.

Every lookup returns ``None`` when nothing matches; only a missing project or
revision argument is an error. Lookups never create revisions, since
ingestion may lag behind the source-control system.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from revindex.database import read_transaction
from revindex.exceptions import InvalidArgumentError
from revindex.models.project import StoredProject
from revindex.models.revision import Revision

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def resolve_project_id(project: StoredProject | int | None) -> int:
    """Return the id of a project given as a model or an id."""
    if project is None:
        raise InvalidArgumentError("Project is required")
    if isinstance(project, StoredProject):
        return project.id
    return project


def require_revision(revision: Revision | None) -> Revision:
    """Reject a missing revision argument."""
    if revision is None:
        raise InvalidArgumentError("Revision is required")
    return revision


async def _first_match(
    session: AsyncSession, stmt: Select[tuple[Revision]]
) -> Revision | None:
    async with read_transaction(session):
        result = await session.execute(stmt.limit(1))
        return result.scalars().first()


async def get_project(session: AsyncSession, name: str) -> StoredProject | None:
    """Look up a project by name."""
    async with read_transaction(session):
        result = await session.execute(select(StoredProject).where(StoredProject.name == name))
        return result.scalar_one_or_none()


async def list_projects(session: AsyncSession) -> Sequence[StoredProject]:
    """All projects, ordered by name."""
    async with read_transaction(session):
        result = await session.execute(select(StoredProject).order_by(StoredProject.name))
        return result.scalars().all()


async def count_projects(session: AsyncSession) -> int:
    """Number of registered projects."""
    async with read_transaction(session):
        result = await session.execute(select(func.count()).select_from(StoredProject))
        return result.scalar() or 0


async def previous_revision(session: AsyncSession, revision: Revision | None) -> Revision | None:
    """The most recent revision before ``revision``, or None if it is the first."""
    revision = require_revision(revision)
    stmt = (
        select(Revision)
        .where(Revision.project_id == revision.project_id, Revision.order < revision.order)
        .order_by(Revision.order.desc())
    )
    return await _first_match(session, stmt)


async def next_revision(session: AsyncSession, revision: Revision | None) -> Revision | None:
    """The earliest revision after ``revision``, or None if it is the last."""
    revision = require_revision(revision)
    stmt = (
        select(Revision)
        .where(Revision.project_id == revision.project_id, Revision.order > revision.order)
        .order_by(Revision.order.asc())
    )
    return await _first_match(session, stmt)


async def get_revision_by_id(
    session: AsyncSession, project: StoredProject | int | None, revision_id: str
) -> Revision | None:
    """Look up the revision recorded for a source-control revision id."""
    project_id = resolve_project_id(project)
    stmt = select(Revision).where(
        Revision.project_id == project_id, Revision.revision_id == revision_id
    )
    revision = await _first_match(session, stmt)
    if revision is None:
        logger.debug("No revision %r recorded for project %d", revision_id, project_id)
    return revision


async def get_revision_by_timestamp(
    session: AsyncSession, project: StoredProject | int | None, timestamp: int
) -> Revision | None:
    """Look up a revision carrying exactly ``timestamp`` (epoch milliseconds).

    Several revisions can share a timestamp when commits are rapid or the
    source-control clock is coarse. The one with the smallest order wins,
    so repeated calls always return the same revision.
    """
    project_id = resolve_project_id(project)
    stmt = (
        select(Revision)
        .where(Revision.project_id == project_id, Revision.timestamp == timestamp)
        .order_by(Revision.order.asc())
    )
    return await _first_match(session, stmt)


async def get_revision_by_order(
    session: AsyncSession, project: StoredProject | int | None, order: int
) -> Revision | None:
    """Look up the revision at a given position in the project history."""
    project_id = resolve_project_id(project)
    stmt = select(Revision).where(Revision.project_id == project_id, Revision.order == order)
    return await _first_match(session, stmt)


async def first_revision(
    session: AsyncSession, project: StoredProject | int | None
) -> Revision | None:
    """The oldest recorded revision of a project (order 1)."""
    return await get_revision_by_order(session, project, 1)


async def last_revision(
    session: AsyncSession, project: StoredProject | int | None
) -> Revision | None:
    """The latest recorded revision of a project."""
    project_id = resolve_project_id(project)
    max_order = (
        select(func.max(Revision.order))
        .where(Revision.project_id == project_id)
        .scalar_subquery()
    )
    stmt = select(Revision).where(Revision.project_id == project_id, Revision.order == max_order)
    return await _first_match(session, stmt)


async def list_revisions(
    session: AsyncSession,
    project: StoredProject | int | None,
    *,
    after_order: int | None = None,
    limit: int = 100,
) -> Sequence[Revision]:
    """A page of project history in ascending order.

    ``after_order`` is exclusive; pass the order of the last revision of the
    previous page to continue.
    """
    project_id = resolve_project_id(project)
    if limit < 1:
        raise InvalidArgumentError(f"Limit must be positive, got {limit}")
    stmt = select(Revision).where(Revision.project_id == project_id)
    if after_order is not None:
        stmt = stmt.where(Revision.order > after_order)
    stmt = stmt.order_by(Revision.order.asc()).limit(limit)
    async with read_transaction(session):
        result = await session.execute(stmt)
        return result.scalars().all()
