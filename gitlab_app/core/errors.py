"""Error taxonomy for record mapping, aggregation, and graph construction."""

from __future__ import annotations


class DashboardDataError(Exception):
    """Base class for data problems the presentation layer can report."""


class MalformedRecordError(DashboardDataError):
    """A required field is missing or cannot be parsed.

    Raised per record; callers skip the record and count the skip.
    """

    def __init__(self, kind: str, field: str, detail: str | None = None):
        self.kind = kind
        self.field = field
        self.detail = detail
        message = f"{kind} record has missing or invalid '{field}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DataIntegrityError(DashboardDataError):
    """Structural inconsistency that makes a graph ambiguous."""


class GraphSizeLimitError(DataIntegrityError):
    """Graph exceeds the configured node limit for layering."""


class EmptyIntervalSetWarning(UserWarning):
    """No interval window matched any logged time."""
