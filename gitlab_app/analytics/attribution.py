"""Time attribution: distribute logged seconds across members and iterations.

All values stay in seconds. Conversion to hours and rounding happen in the
presentation helpers (``gitlab_app.visual.tables``).
"""

from __future__ import annotations

import logging
import warnings
from collections import defaultdict
from collections.abc import Iterable

from gitlab_app.core.errors import EmptyIntervalSetWarning
from gitlab_app.core.models import Issue, SprintWorkload, TimeAttribution, TimeLogEntry

from .intervals import IntervalIndex

logger = logging.getLogger(__name__)


def split_entry(issue: Issue, entry: TimeLogEntry) -> list[tuple[str, float]]:
    """Return ``(member, seconds)`` shares for one time log entry.

    Assigned issues split the entry evenly across assignees; unassigned issues
    credit the entry's own author with the full amount.
    """
    if issue.assignees:
        share = entry.seconds / len(issue.assignees)
        return [(member, share) for member in issue.assignees]
    return [(entry.owner_username, entry.seconds)]


def attribute_time(issues: Iterable[Issue], index: IntervalIndex) -> TimeAttribution:
    """Attribute every time log entry to the windows containing it.

    An entry inside several (overlapping) windows counts once per window. An
    entry outside every window still counts toward ``total_seconds``.
    """
    per_member: defaultdict[str, defaultdict[str, float]] = defaultdict(lambda: defaultdict(float))
    per_interval: defaultdict[str, float] = defaultdict(float)
    total_seconds = 0.0
    issues_with_logs = 0
    entries_seen = 0
    entries_matched = 0

    for issue in issues:
        if issue.time_logs:
            issues_with_logs += 1
        for entry in issue.time_logs:
            entries_seen += 1
            total_seconds += entry.seconds
            windows = index.windows_containing(entry.logged_at)
            if windows:
                entries_matched += 1
            shares = split_entry(issue, entry)
            for window in windows:
                per_interval[window.label] += entry.seconds
                for member, seconds in shares:
                    per_member[member][window.label] += seconds

    if entries_seen and not entries_matched:
        logger.warning(
            "None of %s time log entries fall inside the %s known iteration(s)", entries_seen, len(index)
        )
        warnings.warn(
            "No iteration window contains any logged time",
            EmptyIntervalSetWarning,
            stacklevel=2,
        )

    return TimeAttribution(
        per_member={member: dict(by_label) for member, by_label in per_member.items()},
        per_interval=dict(per_interval),
        total_seconds=total_seconds,
        issues_with_logs_count=issues_with_logs,
    )


def member_totals(issues: Iterable[Issue]) -> dict[str, float]:
    """Global logged seconds per member, ignoring iterations.

    Uses the same split rule as ``attribute_time``. Ordered by descending total.
    """
    totals: defaultdict[str, float] = defaultdict(float)
    for issue in issues:
        for entry in issue.time_logs:
            for member, seconds in split_entry(issue, entry):
                totals[member] += seconds
    return dict(sorted(totals.items(), key=lambda kv: kv[1], reverse=True))


def sprint_workload(issues: Iterable[Issue], index: IntervalIndex) -> dict[str, SprintWorkload]:
    """Planned weight vs. logged seconds per iteration, by each issue's own iteration.

    Every indexed iteration is present (zeros when nothing is assigned to it),
    ordered by start date.
    """
    by_id: dict[str, SprintWorkload] = {i.id: SprintWorkload() for i in index}
    for issue in issues:
        ref = issue.iteration
        if ref is None or ref.id not in by_id:
            continue
        workload = by_id[ref.id]
        workload.total_weight += issue.weight or 0
        workload.total_seconds += sum(entry.seconds for entry in issue.time_logs)

    out: dict[str, SprintWorkload] = {}
    for interval_id in dict.fromkeys(i.id for i in index.sorted_by_start()):
        workload = by_id[interval_id]
        interval = index.get(interval_id)
        if interval.label in out:
            existing = out[interval.label]
            existing.total_weight += workload.total_weight
            existing.total_seconds += workload.total_seconds
        else:
            out[interval.label] = workload
    return out
