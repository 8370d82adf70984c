"""Project revision and tag models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from revindex.exceptions import InvalidArgumentError, InvalidComparisonError
from revindex.models.base import Base
from revindex.models.project import Developer, StoredProject
from revindex.services.datetime_service import from_epoch_millis

if TYPE_CHECKING:
    from datetime import datetime


class Revision(Base):
    """One committed change-set of a project.

    ``order`` is assigned by the ingester, strictly increasing within a
    project, and is the only field used for before/after comparisons.
    Timestamps can collide or go backwards under clock skew.
    """

    __tablename__ = "project_versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stored_projects.id", ondelete="CASCADE"), nullable=False
    )
    revision_id: Mapped[str] = mapped_column(String, nullable=False)
    order: Mapped[int] = mapped_column("version_order", BigInteger, nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    committer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("developers.id"), nullable=True
    )
    commit_msg: Mapped[str] = mapped_column(Text, nullable=False, default="")
    properties: Mapped[str | None] = mapped_column(Text, nullable=True)

    project: Mapped[StoredProject] = relationship(lazy="joined")
    committer: Mapped[Developer | None] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("project_id", "revision_id"),
        UniqueConstraint("project_id", "version_order"),
        Index("idx_versions_project_timestamp", "project_id", "timestamp"),
    )

    @property
    def date(self) -> datetime:
        """The commit timestamp as an aware UTC datetime."""
        return from_epoch_millis(self.timestamp)

    def _project_label(self) -> str:
        project = self.__dict__.get("project")
        if project is not None:
            return repr(project)
        return f"StoredProject(id={self.project_id})"

    def _check_comparable(self, other: Revision | None) -> Revision:
        if other is None:
            raise InvalidArgumentError("Cannot compare a revision against None")
        if self.project_id != other.project_id:
            raise InvalidComparisonError(
                f"Project {other._project_label()} != {self._project_label()}, "
                "cannot compare versions"
            )
        return other

    def lte(self, other: Revision | None) -> bool:
        """True if this revision is at or before ``other``."""
        return self.order <= self._check_comparable(other).order

    def lt(self, other: Revision | None) -> bool:
        """True if this revision is strictly before ``other``."""
        return self.order < self._check_comparable(other).order

    def gte(self, other: Revision | None) -> bool:
        """True if this revision is at or after ``other``."""
        return self.order >= self._check_comparable(other).order

    def gt(self, other: Revision | None) -> bool:
        """True if this revision is strictly after ``other``."""
        return self.order > self._check_comparable(other).order

    def eq(self, other: Revision | None) -> bool:
        """Semantic equality: same external revision id and same order.

        Unlike object identity this holds for two separately loaded copies
        of the same persisted revision.
        """
        other = self._check_comparable(other)
        return self.revision_id == other.revision_id and self.order == other.order

    def __repr__(self) -> str:
        project = self.__dict__.get("project")
        name = project.name if project is not None else self.project_id
        return f"Revision({name!r}, r{self.revision_id})"


class Tag(Base):
    """Named marker attached to a revision after ingestion."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("project_versions.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    revision: Mapped[Revision] = relationship(lazy="joined")

    __table_args__ = (UniqueConstraint("version_id", "name"),)
