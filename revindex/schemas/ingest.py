"""Ingestion request schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from revindex.models.file import FileStatus


class FileChange(BaseModel):
    """One path touched by a commit."""

    path: str = Field(min_length=1)
    status: FileStatus
    is_directory: bool = False

    @field_validator("path")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        """Strip whitespace and trailing slashes; reject empty paths."""
        _ = cls
        stripped = v.strip()
        if stripped != "/":
            stripped = stripped.rstrip("/")
        if not stripped:
            raise ValueError("File path must not be empty")
        return stripped


class CommitterInfo(BaseModel):
    """Committer as reported by the source-control system."""

    username: str = Field(min_length=1)
    name: str | None = None
    email: str | None = None


class RevisionCreate(BaseModel):
    """A commit discovered by the source-control updater."""

    revision_id: str = Field(min_length=1)
    order: int = Field(ge=1)
    timestamp: int
    committer: CommitterInfo | None = None
    commit_msg: str = ""
    properties: str | None = None
    changes: list[FileChange] = Field(default_factory=list)

    @field_validator("changes")
    @classmethod
    def paths_must_be_unique(cls, v: list[FileChange]) -> list[FileChange]:
        """Reject change sets that touch the same path twice."""
        _ = cls
        seen: set[str] = set()
        for change in v:
            if change.path in seen:
                raise ValueError(f"Path changed more than once in one revision: {change.path}")
            seen.add(change.path)
        return v
