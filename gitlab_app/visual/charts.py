"""Chart builders (Altair) for iteration, member, merge and graph views."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

import altair as alt
import pandas as pd

from gitlab_app.core.config import CHART_PALETTE


def build_color_map(keys: Iterable[str], palette: Sequence[str] = CHART_PALETTE) -> dict[str, str]:
    """Assign palette colours to keys in first-seen order (cycling).

    Built once per render pass and handed to the chart builders.
    """
    colors: dict[str, str] = {}
    for key in keys:
        if key not in colors:
            colors[key] = palette[len(colors) % len(palette)]
    return colors


def interval_hours_chart(df: pd.DataFrame, color: str = CHART_PALETTE[1]):
    if df.empty:
        return None
    return (
        alt.Chart(df)
        .mark_bar(color=color)
        .encode(
            x=alt.X("iteration:N", title="Iteration", sort=list(df["iteration"])),
            y=alt.Y("hours:Q", title="Logged Hours"),
            tooltip=[
                alt.Tooltip("iteration:N", title="Iteration"),
                alt.Tooltip("hours:Q", title="Hours", format=".2f"),
            ],
        )
        .properties(height=300)
    )


def member_hours_chart(df: pd.DataFrame, color_map: Mapping[str, str]):
    if df.empty:
        return None
    members = list(df["member"])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("member:N", title="Member", sort=members),
            y=alt.Y("hours:Q", title="Hours"),
            color=alt.Color(
                "member:N",
                scale=alt.Scale(domain=members, range=[color_map[m] for m in members]),
                legend=None,
            ),
            tooltip=[
                alt.Tooltip("member:N", title="Member"),
                alt.Tooltip("hours:Q", title="Hours", format=".2f"),
            ],
        )
        .properties(height=300)
    )


def merge_trend_chart(df: pd.DataFrame, field: str, title: str, color: str = CHART_PALETTE[2]):
    """Line chart of one per-iteration merge metric; iterations without a value are dropped."""
    if df.empty or field not in df.columns:
        return None
    data = df[["iteration", field]].dropna()
    if data.empty:
        return None
    return (
        alt.Chart(data)
        .mark_line(point=True, color=color)
        .encode(
            x=alt.X("iteration:N", title="Iteration", sort=list(data["iteration"])),
            y=alt.Y(f"{field}:Q", title=title),
            tooltip=[
                alt.Tooltip("iteration:N", title="Iteration"),
                alt.Tooltip(f"{field}:Q", title=title, format=".2f"),
            ],
        )
        .properties(height=220)
    )


def workload_chart(df: pd.DataFrame, color_map: Mapping[str, str]):
    if df.empty:
        return None
    measures = list(dict.fromkeys(df["measure"]))
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("iteration:N", title="Iteration", sort=list(dict.fromkeys(df["iteration"]))),
            xOffset="measure:N",
            y=alt.Y("value:Q", title="Weight / Hours"),
            color=alt.Color(
                "measure:N",
                scale=alt.Scale(domain=measures, range=[color_map[m] for m in measures]),
                title=None,
            ),
            tooltip=["iteration:N", "measure:N", alt.Tooltip("value:Q", format=".2f")],
        )
        .properties(height=320)
    )


def dependency_graph_chart(nodes_df: pd.DataFrame, edges_df: pd.DataFrame, *, height: float, width: float):
    """Static layered graph: blocker on the left, blocked issues to the right."""
    if nodes_df.empty:
        return None
    x_scale = alt.Scale(domain=[0, width + 100], nice=False)
    y_scale = alt.Scale(domain=[0, height], reverse=True, nice=False)
    edges = (
        alt.Chart(edges_df)
        .mark_rule(color="#9e9e9e", strokeWidth=1.2)
        .encode(
            x=alt.X("x:Q", scale=x_scale, axis=None),
            y=alt.Y("y:Q", scale=y_scale, axis=None),
            x2="x2:Q",
            y2="y2:Q",
        )
    )
    points = (
        alt.Chart(nodes_df)
        .mark_circle(size=400, color="black")
        .encode(
            x=alt.X("x:Q", scale=x_scale, axis=None),
            y=alt.Y("y:Q", scale=y_scale, axis=None),
            tooltip=[
                alt.Tooltip("id:N", title="Issue"),
                alt.Tooltip("label:N", title="Title"),
                alt.Tooltip("level:Q", title="Level"),
            ],
        )
    )
    labels = (
        alt.Chart(nodes_df)
        .mark_text(align="left", dx=14, fontSize=12)
        .encode(
            x=alt.X("x:Q", scale=x_scale, axis=None),
            y=alt.Y("y:Q", scale=y_scale, axis=None),
            text="label:N",
        )
    )
    return (edges + points + labels).properties(height=int(height), width=int(width))
