"""SQLAlchemy ORM models for the revision index."""

from revindex.models.base import Base
from revindex.models.file import FileEntry, FileStatus, LiveFile
from revindex.models.metric import Measurement, Metric
from revindex.models.project import Developer, StoredProject
from revindex.models.revision import Revision, Tag

__all__ = [
    "Base",
    "Developer",
    "FileEntry",
    "FileStatus",
    "LiveFile",
    "Measurement",
    "Metric",
    "Revision",
    "StoredProject",
    "Tag",
]
