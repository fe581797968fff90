"""DashboardService: orchestrates fetching, mapping, and interval indexing."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from gitlab_app.analytics.intervals import IntervalIndex

from .config import EXCLUDED_ITERATION_IDS
from .gitlab_client import GitLabAPI
from .mappers import MappedRecords, map_issues, map_iterations, map_merge_requests
from .models import Issue, MergeRequest

ProgressCallback = Callable[[str, int | None, int | None], None]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DataQualityReport:
    """Counts of records dropped by the latest load of each record kind."""

    skipped: dict[str, int] = field(default_factory=dict)
    errors_by_kind: dict[str, list[str]] = field(default_factory=dict)

    def record(self, kind: str, mapped: MappedRecords) -> None:
        """Replace everything previously recorded for ``kind``."""
        self.skipped[kind] = mapped.skipped
        self.skipped[f"{kind} time logs"] = mapped.skipped_entries
        self.errors_by_kind[kind] = list(mapped.errors)

    @property
    def errors(self) -> list[str]:
        return [line for lines in self.errors_by_kind.values() for line in lines]

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())


class DashboardService:
    def __init__(self, api: GitLabAPI, *, excluded_iteration_ids=EXCLUDED_ITERATION_IDS):
        self.api = api
        self.excluded_iteration_ids = frozenset(excluded_iteration_ids)
        self.quality = DataQualityReport()

    # ------------------ Fetch Methods ------------------
    def load_index(self, *, progress: ProgressCallback | None = None) -> IntervalIndex:
        if progress:
            progress("Querying iterations", None, None)
        mapped = map_iterations(self.api.fetch_iterations())
        self._track("iterations", mapped)
        return IntervalIndex.build(mapped.items, exclude_ids=self.excluded_iteration_ids)

    def load_issues(self, *, progress: ProgressCallback | None = None) -> list[Issue]:
        if progress:
            progress("Querying issues (all pages)", None, None)
        raw = self._dedupe(self.api.fetch_issues(), key="id")
        mapped = map_issues(raw)
        self._track("issues", mapped)
        return mapped.items

    def load_merge_requests(self, *, progress: ProgressCallback | None = None) -> list[MergeRequest]:
        if progress:
            progress("Querying merge requests (all pages)", None, None)
        mapped = map_merge_requests(self.api.fetch_merge_requests())
        self._track("merge requests", mapped)
        return mapped.items

    def load_members(self, *, progress: ProgressCallback | None = None) -> list[dict[str, Any]]:
        if progress:
            progress("Querying group members", None, None)
        return self.api.fetch_group_members()

    # ------------------ Internal Helpers ------------------
    def _track(self, kind: str, mapped: MappedRecords) -> None:
        self.quality.record(kind, mapped)
        if mapped.total_skipped:
            logger.warning(
                "Mapping %s: kept %s, skipped %s record(s) and %s nested entr%s",
                kind,
                len(mapped.items),
                mapped.skipped,
                mapped.skipped_entries,
                "y" if mapped.skipped_entries == 1 else "ies",
            )

    @staticmethod
    def _dedupe(raw_records: list[dict[str, Any]], *, key: str) -> list[dict[str, Any]]:
        """Keep the first occurrence per ``key``; records without it pass through."""
        seen: set[Any] = set()
        out: list[dict[str, Any]] = []
        for record in raw_records:
            value = record.get(key) if isinstance(record, dict) else None
            if value is not None:
                if value in seen:
                    continue
                seen.add(value)
            out.append(record)
        return out
