"""Connection setup page: collect GitLab settings and initialize DashboardService."""

from __future__ import annotations

import streamlit as st

from gitlab_app.app import register_page
from gitlab_app.core.config import GITLAB_DEFAULT_URL, resolve_connection
from gitlab_app.core.gitlab_client import GitLabAPI
from gitlab_app.core.service import DashboardService


@register_page("Setup / Connection")
def setup_page():
    st.title("GitLab Connection Setup")
    st.caption("Values are pre-filled from secrets or environment when available.")

    defaults = resolve_connection(st.secrets)
    url = st.text_input("GraphQL endpoint", value=defaults.url or GITLAB_DEFAULT_URL)
    group = st.text_input("Group full path", value=defaults.group or "")
    token = st.text_input("Authorization header value", type="password", value=defaults.token or "")
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not (url and group and token):
            st.error("All fields required.")
            return
        try:
            api = GitLabAPI(url, token, group)
            st.session_state["gitlab_group"] = group
            st.session_state["dashboard_service"] = DashboardService(api)
            st.success("Connection initialized.")
        except Exception as e:  # pragma: no cover
            st.error(f"Failed to initialize GitLab client: {e}")

    if "dashboard_service" in st.session_state:
        st.info("DashboardService ready.")
