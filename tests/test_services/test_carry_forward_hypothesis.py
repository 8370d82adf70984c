"""Property-based tests for live-set composition over whole histories."""

from __future__ import annotations

from dataclasses import dataclass

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from revindex.models.file import FileStatus
from revindex.services.carry_forward import compose_live_set

PROPERTY_SETTINGS = settings(
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)


@dataclass(frozen=True)
class _Change:
    path: str
    status: FileStatus
    order: int


_PATH = st.sampled_from(["a", "b", "c", "d/e", "d/f", "g"])
_STATUS = st.sampled_from(list(FileStatus))


@st.composite
def _history(draw: st.DrawFn) -> list[list[_Change]]:
    """A list of change sets, one per revision, each touching unique paths."""
    revisions = draw(st.integers(min_value=1, max_value=12))
    history: list[list[_Change]] = []
    for order in range(1, revisions + 1):
        paths = draw(st.lists(_PATH, unique=True, max_size=4))
        history.append([_Change(p, draw(_STATUS), order) for p in paths])
    return history


def _replay(history: list[list[_Change]]) -> list[dict[str, _Change]]:
    snapshots: list[dict[str, _Change]] = []
    live: dict[str, _Change] = {}
    for changes in history:
        live = compose_live_set(live, changes)
        snapshots.append(live)
    return snapshots


def _by_definition(history: list[list[_Change]], upto: int) -> dict[str, _Change]:
    """Live set of revision ``upto`` computed from the whole history."""
    latest: dict[str, _Change] = {}
    for changes in history[: upto + 1]:
        for change in changes:
            latest[change.path] = change
    return {p: c for p, c in latest.items() if c.status != FileStatus.DELETED}


class TestComposeLiveSetProperties:
    @PROPERTY_SETTINGS
    @given(history=_history())
    def test_incremental_matches_full_rescan(self, history: list[list[_Change]]) -> None:
        snapshots = _replay(history)
        for index, snapshot in enumerate(snapshots):
            assert snapshot == _by_definition(history, index)

    @PROPERTY_SETTINGS
    @given(history=_history(), data=st.data())
    def test_monotonic_snapshot(self, history: list[list[_Change]], data: st.DataObject) -> None:
        snapshots = _replay(history)
        a = data.draw(st.integers(min_value=0, max_value=len(history) - 1))
        b = data.draw(st.integers(min_value=a, max_value=len(history) - 1))
        deleted_between = {
            c.path
            for changes in history[a + 1 : b + 1]
            for c in changes
            if c.status == FileStatus.DELETED
        }
        for path in snapshots[a]:
            if path not in deleted_between:
                assert path in snapshots[b]

    @PROPERTY_SETTINGS
    @given(history=_history())
    def test_no_deleted_entry_is_live(self, history: list[list[_Change]]) -> None:
        for snapshot in _replay(history):
            assert all(c.status != FileStatus.DELETED for c in snapshot.values())
