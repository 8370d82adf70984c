"""Live-set composition for revision snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar

from revindex.models.file import FileStatus

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class Change(Protocol):
    """Anything carrying a path and the status it was given."""

    path: str
    status: FileStatus


ChangeT = TypeVar("ChangeT", bound=Change)


def compose_live_set(
    previous: Mapping[str, ChangeT],
    changes: Iterable[ChangeT],
) -> dict[str, ChangeT]:
    """Derive the live set of a revision from its predecessor's.

    A path is live at a revision when its most recent change at or before
    that revision is not a deletion. Given the predecessor's live set
    (path -> entry) and the entries changed at the new revision, every
    changed path takes its new entry, deleted paths drop out, and untouched
    paths are carried forward. Cost is proportional to the live set, not
    to the length of history.

    Args:
        previous: live entries of the preceding revision, keyed by path.
        changes: entries changed at the new revision; one per path.

    Returns:
        The new live set keyed by path.

    Raises:
        ValueError: if ``changes`` mentions the same path twice.
    """
    live = dict(previous)
    seen: set[str] = set()
    for change in changes:
        if change.path in seen:
            raise ValueError(f"Path changed more than once in one revision: {change.path}")
        seen.add(change.path)
        if change.status == FileStatus.DELETED:
            live.pop(change.path, None)
        else:
            live[change.path] = change
    return live


def carried_forward(
    previous: Mapping[str, ChangeT],
    live: Mapping[str, ChangeT],
) -> list[str]:
    """Paths whose entry was inherited unchanged from the predecessor."""
    return sorted(path for path, entry in live.items() if previous.get(path) is entry)
