"""Snapshot queries: files changed at a revision and files live as of it."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import select

from revindex.database import read_transaction
from revindex.models.file import FileEntry, LiveFile
from revindex.services.history_service import require_revision

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from revindex.models.revision import Revision


class FileKind(enum.StrEnum):
    """Which live entries a snapshot query returns."""

    FILES = "files"
    DIRECTORIES = "directories"
    ALL = "all"


async def version_files(session: AsyncSession, revision: Revision | None) -> list[FileEntry]:
    """Entries changed at ``revision`` itself, ordered by path."""
    revision = require_revision(revision)
    stmt = (
        select(FileEntry)
        .where(FileEntry.version_id == revision.id)
        .order_by(FileEntry.path)
    )
    async with read_transaction(session):
        result = await session.execute(stmt)
        return list(result.scalars().all())


async def files_for_version(
    session: AsyncSession,
    revision: Revision | None,
    kind: FileKind = FileKind.ALL,
) -> list[FileEntry]:
    """Entries live as of ``revision``, ordered by path.

    Reads the live-file association materialized at ingestion, so the cost
    follows the size of the snapshot rather than the length of history.
    The result may be empty but is never None.
    """
    revision = require_revision(revision)
    stmt = (
        select(FileEntry)
        .join(LiveFile, LiveFile.file_id == FileEntry.id)
        .where(LiveFile.version_id == revision.id)
    )
    if kind == FileKind.FILES:
        stmt = stmt.where(FileEntry.is_directory.is_(False))
    elif kind == FileKind.DIRECTORIES:
        stmt = stmt.where(FileEntry.is_directory.is_(True))
    stmt = stmt.order_by(FileEntry.path)
    async with read_transaction(session):
        result = await session.execute(stmt)
        return list(result.scalars().all())


async def all_files_for_version(
    session: AsyncSession, revision: Revision | None
) -> list[FileEntry]:
    """Plain files visible in ``revision``."""
    return await files_for_version(session, revision, FileKind.FILES)


async def all_directories_for_version(
    session: AsyncSession, revision: Revision | None
) -> list[FileEntry]:
    """Directories visible in ``revision``."""
    return await files_for_version(session, revision, FileKind.DIRECTORIES)


async def live_paths(session: AsyncSession, revision: Revision | None) -> set[str]:
    """Paths of every entry live as of ``revision``."""
    revision = require_revision(revision)
    stmt = (
        select(FileEntry.path)
        .join(LiveFile, LiveFile.file_id == FileEntry.id)
        .where(LiveFile.version_id == revision.id)
    )
    async with read_transaction(session):
        result = await session.execute(stmt)
        return {row[0] for row in result.all()}


async def get_live_file(
    session: AsyncSession, revision: Revision | None, path: str
) -> FileEntry | None:
    """The entry for ``path`` live as of ``revision``, or None if not live."""
    revision = require_revision(revision)
    stmt = (
        select(FileEntry)
        .join(LiveFile, LiveFile.file_id == FileEntry.id)
        .where(LiveFile.version_id == revision.id, FileEntry.path == path)
    )
    async with read_transaction(session):
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


async def live_entries_by_path(
    session: AsyncSession, revision: Revision | None
) -> dict[str, FileEntry]:
    """Live entries of ``revision`` keyed by path.

    Returns an empty mapping for None, which ingestion uses for the first
    revision of a project.
    """
    if revision is None:
        return {}
    return {entry.path: entry for entry in await files_for_version(session, revision)}
