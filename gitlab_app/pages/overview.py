"""Overview page: logged hours, issue counts, hours per iteration and member."""

from __future__ import annotations

import streamlit as st

from gitlab_app.app import register_page
from gitlab_app.core.errors import DashboardDataError
from gitlab_app.core.service import DashboardService
from gitlab_app.features.overview.context import build_overview_context
from gitlab_app.visual.charts import build_color_map, interval_hours_chart, member_hours_chart
from gitlab_app.visual.progress import ProgressReporter, show_data_quality


@register_page("Overview")
def overview_page():
    st.title("Overview")
    service: DashboardService | None = st.session_state.get("dashboard_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    if st.button("Fetch GitLab Data", type="primary"):
        reporter = ProgressReporter("Loading data from GitLab")
        try:
            index = service.load_index(progress=reporter.callback)
            issues = service.load_issues(progress=reporter.callback)
            st.session_state["overview_ctx"] = build_overview_context(issues, index)
            reporter.complete(f"Loaded {len(issues)} issue(s) across {len(index)} iteration(s).")
        except (DashboardDataError, RuntimeError) as exc:
            reporter.error(f"Failed to load overview: {exc}")
            return

    ctx = st.session_state.get("overview_ctx")
    if ctx is None:
        st.info("No data loaded yet.")
        return
    show_data_quality(service.quality)

    c1, c2, c3 = st.columns(3)
    c1.metric("Hours Worked", f"{ctx.total_hours:.2f}")
    c2.metric("Total Issues", ctx.total_issues)
    c3.metric("Issues Logged", ctx.issues_logged)

    left, right = st.columns(2)
    with left:
        st.subheader("Iteration Logged Hours")
        chart = interval_hours_chart(ctx.interval_hours)
        if chart is None:
            st.info("No logged time falls inside an iteration.")
        else:
            st.altair_chart(chart, use_container_width=True)
    with right:
        st.subheader("Member Hours")
        colors = build_color_map(ctx.member_hours["member"])
        chart = member_hours_chart(ctx.member_hours, colors)
        if chart is None:
            st.info("No logged time.")
        else:
            st.altair_chart(chart, use_container_width=True)
