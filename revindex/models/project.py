"""Project and developer models."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from revindex.models.base import Base


class StoredProject(Base):
    """A project whose source-control history is tracked."""

    __tablename__ = "stored_projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"StoredProject({self.name!r})"


class Developer(Base):
    """A committer known to one project."""

    __tablename__ = "developers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stored_projects.id", ondelete="CASCADE"), nullable=False
    )
    username: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (UniqueConstraint("project_id", "username"),)
