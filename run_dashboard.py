"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``gitlab_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from gitlab_app.app import main
from gitlab_app.core.config import resolve_connection

st.set_page_config(layout="wide")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def _auto_init_dashboard_service():
    """Initialize the GitLab service from secrets / environment if available."""
    if "dashboard_service" in st.session_state:
        return

    settings = resolve_connection(st.secrets)
    if settings.complete:
        try:
            from gitlab_app.core.gitlab_client import GitLabAPI
            from gitlab_app.core.service import DashboardService

            api = GitLabAPI(settings.url, settings.token, settings.group)
            st.session_state["gitlab_group"] = settings.group
            st.session_state["dashboard_service"] = DashboardService(api)
            st.sidebar.success(f"Connected to group {settings.group}")
        except Exception as e:
            st.sidebar.error(f"GitLab connection failed: {e}")
            st.session_state.pop("dashboard_service", None)
    else:
        st.sidebar.warning("GitLab settings not found. Please use the Setup page.")


_auto_init_dashboard_service()

PAGES_DIR = Path(__file__).parent / "gitlab_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"gitlab_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:  # pragma: no cover - defensive
        logger.error("Failed importing page %s: %s", mod_name, e)

if __name__ == "__main__":
    main()
