"""Pure helpers to build the overview/sprints context (no Streamlit)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from gitlab_app.analytics.attribution import attribute_time, member_totals, sprint_workload
from gitlab_app.analytics.cycle_time import sprint_cycle_times
from gitlab_app.analytics.intervals import IntervalIndex
from gitlab_app.core.models import Issue, TimeAttribution
from gitlab_app.visual.tables import (
    cycle_time_frame,
    interval_hours_frame,
    member_hours_frame,
    member_iteration_table,
    to_hours,
    workload_frame,
)


@dataclass(slots=True)
class OverviewContext:
    total_hours: float
    total_issues: int
    issues_logged: int
    attribution: TimeAttribution
    interval_hours: pd.DataFrame
    member_hours: pd.DataFrame
    cycle_times: pd.DataFrame
    workload: pd.DataFrame


def build_overview_context(issues: Sequence[Issue], index: IntervalIndex) -> OverviewContext:
    attribution = attribute_time(issues, index)
    return OverviewContext(
        total_hours=to_hours(attribution.total_seconds),
        total_issues=len(issues),
        issues_logged=attribution.issues_with_logs_count,
        attribution=attribution,
        interval_hours=interval_hours_frame(attribution, index),
        member_hours=member_hours_frame(member_totals(issues)),
        cycle_times=cycle_time_frame(sprint_cycle_times(issues, index)),
        workload=workload_frame(sprint_workload(issues, index)),
    )


def build_member_table(
    issues: Sequence[Issue],
    index: IntervalIndex,
    members: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Member x iteration hours; iterations where nobody logged time are dropped."""
    table = member_iteration_table(attribute_time(issues, index), index, members)
    if table.empty:
        return table
    return table.loc[:, (table > 0).any(axis=0)]
