"""Central configuration, constants, and connection settings resolution."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

# =============================================================================
# GitLab Connection Settings
# =============================================================================
GITLAB_DEFAULT_URL = "https://gitlab.com/api/graphql"
TIMEZONE = "UTC"  # display timezone; aggregation always compares UTC instants

# Environment variable names used when Streamlit secrets are absent.
# The REACT_APP_* names match the deployment of the previous dashboard.
CONNECTION_ENV_VARS: dict[str, Sequence[str]] = {
    "url": ("GITLAB_URL", "REACT_APP_GITLAB_URL"),
    "token": ("GITLAB_TOKEN", "REACT_APP_GITLAB_TOKEN"),
    "group": ("GITLAB_GROUP", "REACT_APP_GITLAB_GROUP"),
}

# =============================================================================
# GraphQL Fetch Tuning
# =============================================================================
GRAPHQL_PAGE_SIZE: int = 100  # GitLab caps connection pages at 100 nodes
GRAPHQL_NESTED_PAGE_SIZE: int = 100  # notes / pipelines / timelogs per record
GRAPHQL_TIMEOUT_SECONDS: float = 30.0

# =============================================================================
# Iterations
# =============================================================================
ALL_INTERVALS = "all"

# Iterations dropped before any aggregation (e.g. a mis-dated sprint that
# overlaps every other window). Empty by default.
EXCLUDED_ITERATION_IDS: frozenset[str] = frozenset()

# =============================================================================
# Metrics
# =============================================================================
SECONDS_PER_HOUR: float = 3600.0
HOURS_DECIMALS: int = 2

# =============================================================================
# Dependency Graph Layout
# =============================================================================
GRAPH_CANVAS_WIDTH: float = 1200.0
GRAPH_CANVAS_HEIGHT: float = 800.0
GRAPH_CANVAS_MARGIN: float = 50.0
GRAPH_MAX_NODES: int = 5000  # above this the layering pass refuses to run
GRAPH_NODE_FALLBACK_LABEL = "No Title"

# =============================================================================
# Charts
# =============================================================================
# Matches the dashboard colour theme (primary, dark, info, success, warning, error)
CHART_PALETTE: Sequence[str] = (
    "#e91e63",
    "#2c3c58",
    "#1A73E8",
    "#4CAF50",
    "#fb8c00",
    "#F44335",
)


@dataclass(slots=True)
class ConnectionSettings:
    url: str | None
    token: str | None
    group: str | None

    @property
    def complete(self) -> bool:
        return bool(self.url and self.token and self.group)


def resolve_connection(
    secrets: Mapping | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConnectionSettings:
    """Resolve GitLab connection settings.

    Lookup order per value: ``[gitlab]`` secrets section, top-level secrets,
    then the environment variables listed in ``CONNECTION_ENV_VARS``.

    Parameters
    ----------
    secrets : Mapping or None
        Streamlit ``st.secrets`` (or any mapping with the same layout).
    environ : Mapping or None
        Environment mapping, defaults to ``os.environ``.

    Returns
    -------
    ConnectionSettings
        Values that could not be resolved are ``None``.
    """
    try:
        secrets = dict(secrets or {})
    except FileNotFoundError:  # st.secrets without a secrets.toml
        secrets = {}
    environ = os.environ if environ is None else environ
    section = secrets.get("gitlab", {}) or {}

    def _lookup(kind: str) -> str | None:
        names = CONNECTION_ENV_VARS[kind]
        primary = names[0]
        value = section.get(primary) or secrets.get(primary)
        if value:
            return str(value)
        for name in names:
            env_value = environ.get(name)
            if env_value:
                return env_value
        return None

    return ConnectionSettings(url=_lookup("url"), token=_lookup("token"), group=_lookup("group"))

