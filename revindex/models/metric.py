"""Metric and measurement models."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from revindex.models.base import Base
from revindex.models.revision import Revision


class Metric(Base):
    """A metric that plugins compute against revisions."""

    __tablename__ = "metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mnemonic: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")


class Measurement(Base):
    """Value of one metric for one revision."""

    __tablename__ = "version_measurements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("project_versions.id", ondelete="CASCADE"), nullable=False
    )
    metric_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("metrics.id", ondelete="CASCADE"), nullable=False
    )
    result: Mapped[str] = mapped_column(Text, nullable=False)

    revision: Mapped[Revision] = relationship(lazy="joined")
    metric: Mapped[Metric] = relationship(lazy="joined")

    __table_args__ = (UniqueConstraint("version_id", "metric_id"),)
