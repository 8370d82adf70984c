"""Revision and snapshot response schemas."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from revindex.models.file import FileStatus
from revindex.services.datetime_service import format_iso

if TYPE_CHECKING:
    from revindex.models.file import FileEntry
    from revindex.models.project import StoredProject
    from revindex.models.revision import Revision


class ProjectResponse(BaseModel):
    """Project summary."""

    id: int
    name: str

    @classmethod
    def from_model(cls, project: StoredProject) -> ProjectResponse:
        return cls(id=project.id, name=project.name)


class RevisionResponse(BaseModel):
    """One revision of a project."""

    project: str
    revision_id: str
    order: int
    timestamp: int
    date: str
    committer: str | None = None
    commit_msg: str = ""

    @classmethod
    def from_model(cls, revision: Revision) -> RevisionResponse:
        return cls(
            project=revision.project.name,
            revision_id=revision.revision_id,
            order=revision.order,
            timestamp=revision.timestamp,
            date=format_iso(revision.date),
            committer=revision.committer.username if revision.committer else None,
            commit_msg=revision.commit_msg,
        )


class RevisionListResponse(BaseModel):
    """A page of revisions in ascending order."""

    revisions: list[RevisionResponse]
    next_after: int | None = None


class FileEntryResponse(BaseModel):
    """State of one path as introduced by a revision."""

    path: str
    name: str
    directory: str
    status: FileStatus
    is_directory: bool
    revision_id: str

    @classmethod
    def from_model(cls, entry: FileEntry) -> FileEntryResponse:
        return cls(
            path=entry.path,
            name=entry.name,
            directory=entry.directory,
            status=entry.status,
            is_directory=entry.is_directory,
            revision_id=entry.revision.revision_id,
        )


class SnapshotResponse(BaseModel):
    """Entries live as of a revision."""

    revision: RevisionResponse
    files: list[FileEntryResponse] = Field(default_factory=list)


class ChangeSetResponse(BaseModel):
    """Entries changed at a revision with per-status counts."""

    revision: RevisionResponse
    changes: list[FileEntryResponse] = Field(default_factory=list)
    counts: dict[FileStatus, int] = Field(default_factory=dict)


class TagResponse(BaseModel):
    """Tag attached to a revision."""

    name: str
    revision_id: str
