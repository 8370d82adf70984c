"""File entry and live-file association models."""

from __future__ import annotations

import enum
import posixpath

from sqlalchemy import Boolean, Enum, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from revindex.models.base import Base
from revindex.models.revision import Revision


class FileStatus(enum.StrEnum):
    """State of a path as recorded by the revision that changed it."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    REPLACED = "REPLACED"


class FileEntry(Base):
    """The state of one path as introduced by one revision."""

    __tablename__ = "project_files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("project_versions.id", ondelete="CASCADE"), nullable=False
    )
    path: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[FileStatus] = mapped_column(
        Enum(FileStatus, native_enum=False, length=16), nullable=False
    )
    is_directory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    revision: Mapped[Revision] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("version_id", "path"),
        Index("idx_files_version_status", "version_id", "status"),
    )

    @property
    def name(self) -> str:
        """Last component of the path."""
        return posixpath.basename(self.path)

    @property
    def directory(self) -> str:
        """Parent directory of the path."""
        return posixpath.dirname(self.path) or "/"

    def __repr__(self) -> str:
        return f"FileEntry({self.path!r}, {self.status.value})"


class LiveFile(Base):
    """Association of a revision with a file entry live as of that revision.

    Holds the entries introduced at the revision plus every entry carried
    forward unchanged from its predecessor. Maintained by ingestion only.
    """

    __tablename__ = "files_for_version"

    version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("project_versions.id", ondelete="CASCADE"), primary_key=True
    )
    file_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("project_files.id", ondelete="CASCADE"), primary_key=True
    )

    file: Mapped[FileEntry] = relationship(lazy="joined")

    __table_args__ = (Index("idx_live_files_file", "file_id"),)
