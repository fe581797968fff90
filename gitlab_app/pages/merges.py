"""Merge requests page: per-iteration quality trends and per-request table."""

from __future__ import annotations

import streamlit as st

from gitlab_app.app import register_page
from gitlab_app.core.errors import DashboardDataError
from gitlab_app.core.service import DashboardService
from gitlab_app.features.merges.context import build_merge_context
from gitlab_app.visual.charts import merge_trend_chart
from gitlab_app.visual.progress import ProgressReporter, show_data_quality

TRENDS = (
    ("avg_comments", "Avg Comments per MR"),
    ("avg_pipeline_failures", "Avg Pipeline Failures per MR"),
    ("avg_merge_duration_hours", "Avg Merge Duration (hours)"),
)


@register_page("Merge Requests")
def merges_page():
    st.title("Merge Requests")
    service: DashboardService | None = st.session_state.get("dashboard_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    if st.button("Fetch Merge Requests", type="primary"):
        reporter = ProgressReporter("Loading merge requests")
        try:
            index = service.load_index(progress=reporter.callback)
            mrs = service.load_merge_requests(progress=reporter.callback)
            st.session_state["merge_ctx"] = build_merge_context(mrs, index)
            reporter.complete(f"Loaded {len(mrs)} merge request(s).")
        except (DashboardDataError, RuntimeError) as exc:
            reporter.error(f"Failed to load merge requests: {exc}")
            return

    ctx = st.session_state.get("merge_ctx")
    if ctx is None:
        st.info("No data loaded yet.")
        return
    show_data_quality(service.quality)

    for column, (field, title) in zip(st.columns(len(TRENDS)), TRENDS):
        with column:
            st.subheader(title)
            chart = merge_trend_chart(ctx.per_iteration, field, title)
            if chart is None:
                st.info("No data.")
            else:
                st.altair_chart(chart, use_container_width=True)

    st.markdown("---")
    st.subheader("Merge Request Metrics")
    if ctx.requests.empty:
        st.info("No merge requests.")
        return
    st.dataframe(ctx.requests, hide_index=True)
