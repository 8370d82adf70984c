"""Measurements, tags and per-status file counts attached to revisions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from revindex.database import read_transaction, unit_of_work
from revindex.exceptions import InvalidArgumentError
from revindex.models.file import FileEntry, FileStatus
from revindex.models.metric import Measurement, Metric
from revindex.models.revision import Revision, Tag
from revindex.services.history_service import require_revision, resolve_project_id

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from revindex.models.project import StoredProject

logger = logging.getLogger(__name__)


async def get_metric(session: AsyncSession, mnemonic: str) -> Metric | None:
    """Look up a metric by mnemonic."""
    async with read_transaction(session):
        result = await session.execute(select(Metric).where(Metric.mnemonic == mnemonic))
        return result.scalar_one_or_none()


async def ensure_metric(session: AsyncSession, mnemonic: str, description: str = "") -> Metric:
    """Return the metric with ``mnemonic``, registering it if unknown."""
    if not mnemonic.strip():
        raise InvalidArgumentError("Metric mnemonic must not be empty")
    async with unit_of_work(session):
        result = await session.execute(select(Metric).where(Metric.mnemonic == mnemonic))
        metric = result.scalar_one_or_none()
        if metric is None:
            metric = Metric(mnemonic=mnemonic, description=description)
            session.add(metric)
            await session.flush()
            logger.info("Registered metric %s", mnemonic)
    return metric


async def add_measurement(
    session: AsyncSession,
    revision: Revision | None,
    metric: Metric,
    result: str,
) -> Measurement:
    """Store the value of ``metric`` for ``revision``, replacing an older value."""
    revision = require_revision(revision)
    async with unit_of_work(session):
        existing = await session.execute(
            select(Measurement).where(
                Measurement.version_id == revision.id, Measurement.metric_id == metric.id
            )
        )
        measurement = existing.scalar_one_or_none()
        if measurement is None:
            measurement = Measurement(revision=revision, metric=metric, result=result)
            session.add(measurement)
        else:
            measurement.result = result
        await session.flush()
    return measurement


async def get_measurement(
    session: AsyncSession, revision: Revision | None, metric: Metric
) -> Measurement | None:
    """The measurement of ``metric`` for ``revision``, if one was stored."""
    revision = require_revision(revision)
    async with read_transaction(session):
        result = await session.execute(
            select(Measurement).where(
                Measurement.version_id == revision.id, Measurement.metric_id == metric.id
            )
        )
        return result.scalar_one_or_none()


async def last_measured_version(
    session: AsyncSession,
    metric: Metric | str,
    project: StoredProject | int | None,
) -> Revision | None:
    """The latest revision of ``project`` that has a measurement for ``metric``.

    Returns None when the metric was never measured for the project.
    """
    project_id = resolve_project_id(project)
    stmt = (
        select(Revision)
        .join(Measurement, Measurement.version_id == Revision.id)
        .where(Revision.project_id == project_id)
    )
    if isinstance(metric, Metric):
        stmt = stmt.where(Measurement.metric_id == metric.id)
    else:
        stmt = stmt.join(Metric, Metric.id == Measurement.metric_id).where(
            Metric.mnemonic == metric
        )
    stmt = stmt.order_by(Revision.order.desc()).limit(1)
    async with read_transaction(session):
        result = await session.execute(stmt)
        return result.scalars().first()


async def file_count_by_status(
    session: AsyncSession, revision: Revision | None, status: FileStatus
) -> int:
    """Number of entries changed at ``revision`` (not cumulative) with ``status``."""
    revision = require_revision(revision)
    stmt = (
        select(func.count())
        .select_from(FileEntry)
        .where(FileEntry.version_id == revision.id, FileEntry.status == status)
    )
    async with read_transaction(session):
        result = await session.execute(stmt)
        return result.scalar() or 0


async def file_counts(session: AsyncSession, revision: Revision | None) -> dict[FileStatus, int]:
    """Entries changed at ``revision`` counted per status, zeros included."""
    revision = require_revision(revision)
    stmt = (
        select(FileEntry.status, func.count())
        .where(FileEntry.version_id == revision.id)
        .group_by(FileEntry.status)
    )
    async with read_transaction(session):
        result = await session.execute(stmt)
        found: dict[FileStatus, int] = {row[0]: row[1] for row in result.all()}
    return {status: found.get(status, 0) for status in FileStatus}


async def add_tag(session: AsyncSession, revision: Revision | None, name: str) -> Tag:
    """Attach a named tag to ``revision``. Tagging twice is a no-op."""
    revision = require_revision(revision)
    name = name.strip()
    if not name:
        raise InvalidArgumentError("Tag name must not be empty")
    async with unit_of_work(session):
        existing = await session.execute(
            select(Tag).where(Tag.version_id == revision.id, Tag.name == name)
        )
        tag = existing.scalar_one_or_none()
        if tag is None:
            tag = Tag(revision=revision, name=name)
            session.add(tag)
            await session.flush()
    return tag


async def get_tags(session: AsyncSession, revision: Revision | None) -> list[Tag]:
    """Tags attached to ``revision``, ordered by name."""
    revision = require_revision(revision)
    async with read_transaction(session):
        result = await session.execute(
            select(Tag).where(Tag.version_id == revision.id).order_by(Tag.name)
        )
        return list(result.scalars().all())


async def get_revision_by_tag(
    session: AsyncSession, project: StoredProject | int | None, name: str
) -> Revision | None:
    """The earliest revision of ``project`` carrying tag ``name``."""
    project_id = resolve_project_id(project)
    stmt = (
        select(Revision)
        .join(Tag, Tag.version_id == Revision.id)
        .where(Revision.project_id == project_id, Tag.name == name)
        .order_by(Revision.order.asc())
        .limit(1)
    )
    async with read_transaction(session):
        result = await session.execute(stmt)
        return result.scalars().first()
