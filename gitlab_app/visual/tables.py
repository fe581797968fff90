"""Presentation tables: seconds -> hours conversion and DataFrame shaping."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict
from typing import Any

import pandas as pd
import pytz

from gitlab_app.analytics.intervals import IntervalIndex
from gitlab_app.core.config import HOURS_DECIMALS, SECONDS_PER_HOUR, TIMEZONE
from gitlab_app.core.models import (
    GraphEdge,
    GraphNode,
    MergeMetrics,
    SprintCycleStats,
    SprintWorkload,
    TimeAttribution,
)


def to_hours(seconds: float) -> float:
    return round(seconds / SECONDS_PER_HOUR, HOURS_DECIMALS)


def interval_hours_frame(attribution: TimeAttribution, index: IntervalIndex) -> pd.DataFrame:
    """Logged hours per iteration, iteration order, only iterations with time."""
    rows = []
    for label in dict.fromkeys(index.labels()):
        seconds = attribution.per_interval.get(label, 0.0)
        if seconds > 0:
            rows.append({"iteration": label, "hours": to_hours(seconds)})
    return pd.DataFrame(rows, columns=["iteration", "hours"])


def member_hours_frame(totals: Mapping[str, float]) -> pd.DataFrame:
    rows = [{"member": member, "hours": to_hours(seconds)} for member, seconds in totals.items()]
    df = pd.DataFrame(rows, columns=["member", "hours"])
    if df.empty:
        return df
    return df.sort_values(by="hours", ascending=False, kind="stable").reset_index(drop=True)


def member_iteration_table(
    attribution: TimeAttribution,
    index: IntervalIndex,
    members: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Member x iteration hours matrix (iterations ordered by start date).

    ``members`` fixes the row set (e.g. group members); otherwise every member
    with attributed time appears.
    """
    labels = list(dict.fromkeys(i.label for i in index.sorted_by_start()))
    rows = list(members) if members is not None else sorted(attribution.per_member)
    data = {
        label: [to_hours(attribution.per_member.get(member, {}).get(label, 0.0)) for member in rows]
        for label in labels
    }
    table = pd.DataFrame(data, index=pd.Index(rows, name="member"), columns=labels)
    return table


def merge_metrics_frame(metrics: MergeMetrics) -> pd.DataFrame:
    labels = list(dict.fromkeys([*metrics.per_interval, *metrics.per_interval_duration]))
    rows = []
    for label in labels:
        stats = metrics.per_interval.get(label)
        duration = metrics.per_interval_duration.get(label)
        rows.append(
            {
                "iteration": label,
                "merge_requests": stats.count if stats else 0,
                "avg_comments": round(stats.avg_comments, HOURS_DECIMALS) if stats else None,
                "avg_pipeline_failures": round(stats.avg_pipeline_failures, HOURS_DECIMALS) if stats else None,
                "avg_merge_duration_hours": round(duration, HOURS_DECIMALS) if duration is not None else None,
            }
        )
    return pd.DataFrame(
        rows,
        columns=[
            "iteration",
            "merge_requests",
            "avg_comments",
            "avg_pipeline_failures",
            "avg_merge_duration_hours",
        ],
    )


def merge_request_table(rows: Iterable[dict[str, Any]], tz: pytz.BaseTzInfo | None = None) -> pd.DataFrame:
    """Per-request rows with creation times shown in the display timezone."""
    df = pd.DataFrame(list(rows))
    if df.empty:
        return df
    tz = tz or pytz.timezone(TIMEZONE)
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True, errors="coerce").dt.tz_convert(tz)
    df["merge_duration_hours"] = pd.to_numeric(df["merge_duration_hours"], errors="coerce").round(HOURS_DECIMALS)
    return df


def cycle_time_frame(stats: Mapping[str, SprintCycleStats]) -> pd.DataFrame:
    rows = [
        {
            "iteration": label,
            "avg_lead_time_hours": round(s.avg_lead_time_hours, HOURS_DECIMALS),
            "avg_cycle_time_hours": round(s.avg_cycle_time_hours, HOURS_DECIMALS),
            "issues": s.issues_count,
        }
        for label, s in stats.items()
    ]
    return pd.DataFrame(rows, columns=["iteration", "avg_lead_time_hours", "avg_cycle_time_hours", "issues"])


def workload_frame(workloads: Mapping[str, SprintWorkload]) -> pd.DataFrame:
    """Long-form weights vs. logged hours per iteration (for grouped bars)."""
    rows = []
    for label, w in workloads.items():
        rows.append({"iteration": label, "measure": "Total Weights", "value": w.total_weight})
        rows.append({"iteration": label, "measure": "Total Logged Hours", "value": to_hours(w.total_seconds)})
    return pd.DataFrame(rows, columns=["iteration", "measure", "value"])


def graph_frames(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Node and edge frames with coordinates resolved for plotting."""
    nodes_df = pd.DataFrame([asdict(n) for n in nodes], columns=["id", "label", "level", "x", "y"])
    pos = {n.id: (n.x, n.y) for n in nodes}
    edge_rows = []
    for edge in edges:
        if edge.source not in pos or edge.target not in pos:
            continue
        (x, y), (x2, y2) = pos[edge.source], pos[edge.target]
        edge_rows.append({"source": edge.source, "target": edge.target, "x": x, "y": y, "x2": x2, "y2": y2})
    edges_df = pd.DataFrame(edge_rows, columns=["source", "target", "x", "y", "x2", "y2"])
    return nodes_df, edges_df
