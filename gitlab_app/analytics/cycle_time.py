"""Lead and cycle time per iteration."""

from __future__ import annotations

from collections.abc import Iterable

from gitlab_app.core.config import SECONDS_PER_HOUR
from gitlab_app.core.models import Issue, SprintCycleStats

from .intervals import IntervalIndex


def sprint_cycle_times(issues: Iterable[Issue], index: IntervalIndex) -> dict[str, SprintCycleStats]:
    """Average lead and cycle time (hours) of closed issues per iteration.

    Lead time runs from creation to close. Cycle time runs from the later of
    creation and iteration start to close. Issues are grouped by their own
    iteration assignment; iterations without a closed issue are omitted.
    """
    by_iteration: dict[str, list[Issue]] = {}
    for issue in issues:
        if issue.iteration is None or issue.iteration.id is None:
            continue
        if issue.created_at is None or issue.closed_at is None:
            continue
        by_iteration.setdefault(issue.iteration.id, []).append(issue)

    out: dict[str, SprintCycleStats] = {}
    for interval in index:
        members = by_iteration.get(interval.id)
        if not members:
            continue
        lead_total = 0.0
        cycle_total = 0.0
        for issue in members:
            lead_total += (issue.closed_at - issue.created_at).total_seconds()
            effective_start = issue.created_at
            if interval.start is not None and interval.start > effective_start:
                effective_start = interval.start
            cycle_total += (issue.closed_at - effective_start).total_seconds()
        count = len(members)
        out[interval.label] = SprintCycleStats(
            issues_count=count,
            avg_lead_time_hours=lead_total / count / SECONDS_PER_HOUR,
            avg_cycle_time_hours=cycle_total / count / SECONDS_PER_HOUR,
        )
    return out
