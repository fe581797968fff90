"""Merge request quality metrics per iteration."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from gitlab_app.core.config import SECONDS_PER_HOUR
from gitlab_app.core.models import MergeIntervalStats, MergeMetrics, MergeRequest

from .intervals import IntervalIndex


@dataclass(slots=True)
class _IntervalTotals:
    count: int = 0
    comments: int = 0
    pipeline_failures: int = 0
    merged_count: int = 0
    merge_hours: float = 0.0


def merge_duration_hours(mr: MergeRequest) -> float | None:
    if mr.merged_at is None:
        return None
    return (mr.merged_at - mr.created_at).total_seconds() / SECONDS_PER_HOUR


def aggregate_merge_requests(mrs: Iterable[MergeRequest], index: IntervalIndex) -> MergeMetrics:
    """Average comments, failed pipelines and merge duration per iteration.

    Each merge request belongs to at most one iteration: the first window, in
    index order, containing its creation time. Merge duration averages only
    include merged requests.
    """
    totals: dict[str, _IntervalTotals] = {label: _IntervalTotals() for label in index.labels()}
    for mr in mrs:
        window = index.first_window_containing(mr.created_at)
        if window is None:
            continue
        bucket = totals[window.label]
        bucket.count += 1
        bucket.comments += mr.note_count
        bucket.pipeline_failures += mr.failed_pipelines
        duration = merge_duration_hours(mr)
        if duration is not None:
            bucket.merge_hours += duration
            bucket.merged_count += 1

    metrics = MergeMetrics()
    for label, bucket in totals.items():
        if bucket.count > 0:
            metrics.per_interval[label] = MergeIntervalStats(
                count=bucket.count,
                avg_comments=bucket.comments / bucket.count,
                avg_pipeline_failures=bucket.pipeline_failures / bucket.count,
            )
        if bucket.merged_count > 0:
            metrics.per_interval_duration[label] = bucket.merge_hours / bucket.merged_count
    return metrics


def merge_request_rows(mrs: Iterable[MergeRequest]) -> list[dict[str, Any]]:
    """Per-request table rows, newest first."""
    ordered = sorted(mrs, key=lambda mr: mr.created_at, reverse=True)
    return [
        {
            "title": mr.title or "",
            "created_at": mr.created_at,
            "merge_duration_hours": merge_duration_hours(mr),
            "approvals": mr.approval_count,
            "comments": mr.note_count,
            "pipeline_failures": mr.failed_pipelines,
        }
        for mr in ordered
    ]
