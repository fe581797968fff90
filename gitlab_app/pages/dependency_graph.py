"""Dependency graph page: open issues laid out by blocking depth."""

from __future__ import annotations

import streamlit as st

from gitlab_app.analytics.intervals import IntervalIndex
from gitlab_app.app import register_page
from gitlab_app.core.config import ALL_INTERVALS, GRAPH_CANVAS_HEIGHT, GRAPH_CANVAS_WIDTH
from gitlab_app.core.errors import DashboardDataError
from gitlab_app.core.service import DashboardService
from gitlab_app.features.dependency_graph.context import build_graph_context, iteration_options
from gitlab_app.visual.charts import dependency_graph_chart
from gitlab_app.visual.progress import ProgressReporter, show_data_quality


@register_page("Dependency Graph")
def dependency_graph_page():
    st.title("Issues Dependency Graph")
    service: DashboardService | None = st.session_state.get("dashboard_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    if st.button("Fetch Issues", type="primary"):
        reporter = ProgressReporter("Loading issues dependency graph")
        try:
            st.session_state["graph_index"] = service.load_index(progress=reporter.callback)
            st.session_state["graph_issues"] = service.load_issues(progress=reporter.callback)
            reporter.complete("Issues loaded.")
        except (DashboardDataError, RuntimeError) as exc:
            reporter.error(f"Failed to load issues: {exc}")
            return

    issues = st.session_state.get("graph_issues")
    index: IntervalIndex | None = st.session_state.get("graph_index")
    if issues is None or index is None:
        st.info("No data loaded yet.")
        return
    show_data_quality(service.quality)

    options = iteration_options(index)
    selected = st.selectbox(
        "Select Iteration",
        options,
        format_func=lambda v: "All Iterations" if v == ALL_INTERVALS else v,
    )
    try:
        ctx = build_graph_context(issues, index, selected)
    except DashboardDataError as exc:
        st.error(f"Cannot build dependency graph: {exc}")
        return

    if ctx.skipped:
        st.warning(f"{ctx.skipped} issue(s) without a numeric id were left out of the graph.")
    if ctx.unresolved:
        st.warning(
            f"{len(ctx.unresolved)} issue(s) are part of, or blocked by, a dependency cycle and are drawn at level 0."
        )
        with st.expander("Dependency cycles"):
            for cycle in ctx.cycles:
                st.text(" -> ".join([*cycle, cycle[0]]))

    chart = dependency_graph_chart(ctx.nodes_df, ctx.edges_df, height=GRAPH_CANVAS_HEIGHT, width=GRAPH_CANVAS_WIDTH)
    if chart is None:
        st.info("No blocking relations between open issues.")
        return
    st.altair_chart(chart)
