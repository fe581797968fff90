"""Sprints page: planned weights vs. logged hours, lead and cycle time."""

from __future__ import annotations

import streamlit as st

from gitlab_app.app import register_page
from gitlab_app.core.errors import DashboardDataError
from gitlab_app.core.service import DashboardService
from gitlab_app.features.overview.context import build_overview_context
from gitlab_app.visual.charts import build_color_map, workload_chart
from gitlab_app.visual.progress import ProgressReporter, show_data_quality


@register_page("Sprints")
def sprints_page():
    st.title("Sprints")
    service: DashboardService | None = st.session_state.get("dashboard_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    if st.button("Fetch Sprint Data", type="primary"):
        reporter = ProgressReporter("Loading sprint data")
        try:
            index = service.load_index(progress=reporter.callback)
            issues = service.load_issues(progress=reporter.callback)
            st.session_state["overview_ctx"] = build_overview_context(issues, index)
            reporter.complete("Sprint data ready.")
        except (DashboardDataError, RuntimeError) as exc:
            reporter.error(f"Failed to load sprint data: {exc}")
            return

    ctx = st.session_state.get("overview_ctx")
    if ctx is None:
        st.info("No data loaded yet.")
        return
    show_data_quality(service.quality)

    st.subheader("Issue Weights vs Logged Hours")
    colors = build_color_map(ctx.workload["measure"], palette=("#2c3c58", "#F44335"))
    chart = workload_chart(ctx.workload, colors)
    if chart is None:
        st.info("No iterations found.")
    else:
        st.altair_chart(chart, use_container_width=True)

    st.subheader("Sprint Cycle & Lead Time")
    if ctx.cycle_times.empty:
        st.info("No closed issues assigned to an iteration.")
    else:
        st.dataframe(ctx.cycle_times, hide_index=True)
