"""Members page: hours per member per iteration."""

from __future__ import annotations

import streamlit as st

from gitlab_app.app import register_page
from gitlab_app.core.errors import DashboardDataError
from gitlab_app.core.service import DashboardService
from gitlab_app.features.overview.context import build_member_table
from gitlab_app.visual.progress import ProgressReporter, show_data_quality


@register_page("Members")
def members_page():
    st.title("Member Iteration Metrics")
    service: DashboardService | None = st.session_state.get("dashboard_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return
    only_group = st.checkbox("Only group members", value=True)

    if st.button("Fetch Member Metrics", type="primary"):
        reporter = ProgressReporter("Loading member iteration metrics")
        try:
            index = service.load_index(progress=reporter.callback)
            issues = service.load_issues(progress=reporter.callback)
            members = None
            if only_group:
                members = [m["username"] for m in service.load_members(progress=reporter.callback) if m.get("username")]
            st.session_state["member_table"] = build_member_table(issues, index, members)
            reporter.complete("Member metrics ready.")
        except (DashboardDataError, RuntimeError) as exc:
            reporter.error(f"Failed to load member metrics: {exc}")
            return

    table = st.session_state.get("member_table")
    if table is None:
        st.info("No data loaded yet.")
        return
    show_data_quality(service.quality)
    if table.empty:
        st.info("No member logged time inside an iteration.")
        return
    st.caption("Hours per iteration; time on issues with several assignees is split evenly.")
    st.dataframe(table, column_config={c: st.column_config.NumberColumn(c, format="%.2f hrs") for c in table.columns})
    st.download_button(
        "Download CSV",
        data=table.to_csv().encode("utf-8"),
        file_name="member_iteration_hours.csv",
        mime="text/csv",
    )
