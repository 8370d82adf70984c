"""Revision index exception types.

Convention:
- ``InvalidComparisonError``: two revisions of different projects were
  compared. Orders are only meaningful inside one project.
- ``InvalidArgumentError``: a required revision or project was missing, or
  an ingestion precondition (monotonic order, unique revision id) failed.

Both derive from ``ValueError`` so the global ``ValueError`` handler returns
their message as a 422 detail. Lookups that find nothing return ``None``
rather than raising. Database errors from SQLAlchemy propagate unchanged.
"""

from __future__ import annotations


class InvalidComparisonError(ValueError):
    """Raised when ordering predicates are applied across projects."""


class InvalidArgumentError(ValueError):
    """Raised when a required revision or project argument is absent or invalid."""
