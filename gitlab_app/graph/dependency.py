"""Build the blocked-by dependency graph of open issues."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from gitlab_app.analytics.intervals import IntervalIndex
from gitlab_app.core.config import ALL_INTERVALS, GRAPH_NODE_FALLBACK_LABEL
from gitlab_app.core.errors import DataIntegrityError, MalformedRecordError
from gitlab_app.core.models import DependencyGraph, GraphEdge, GraphNode, Issue

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")


def numeric_node_id(opaque_id: str) -> str:
    """Numeric node id from an opaque global id.

    ``gid://gitlab/Issue/1234`` -> ``"1234"``.
    """
    tail = str(opaque_id).rsplit("/", 1)[-1]
    digits = _NON_DIGITS.sub("", tail)
    if not digits:
        raise MalformedRecordError("issue", "id", f"no numeric segment in {opaque_id!r}")
    return digits


def resolve_interval_label(issue: Issue, index: IntervalIndex | None = None) -> str | None:
    ref = issue.iteration
    if ref is None:
        return None
    if index is not None:
        label = index.label_for(ref.id)
        if label is not None:
            return label
    return ref.label


def build_dependency_graph(
    issues: Iterable[Issue],
    selected_interval_label: str = ALL_INTERVALS,
    *,
    index: IntervalIndex | None = None,
) -> DependencyGraph:
    """Nodes and ``blocker -> blocked`` edges among open issues.

    Parameters
    ----------
    issues : Iterable[Issue]
        Fully paginated issue records.
    selected_interval_label : str
        ``"all"`` or an iteration label; other iterations are filtered out.
    index : IntervalIndex, optional
        Used to resolve each issue's iteration label by id.

    Returns
    -------
    DependencyGraph
        Only issues with at least one incident edge become nodes. ``skipped``
        counts issues whose id has no numeric segment.

    Raises
    ------
    DataIntegrityError
        Two distinct issue ids map to the same numeric node id.
    """
    eligible: list[Issue] = []
    for issue in issues:
        if not issue.is_open:
            continue
        if selected_interval_label != ALL_INTERVALS:
            if resolve_interval_label(issue, index) != selected_interval_label:
                continue
        eligible.append(issue)

    numeric_ids: dict[str, str] = {}  # opaque id -> numeric id
    owners: dict[str, str] = {}  # numeric id -> opaque id
    nodes: list[GraphNode] = []
    skipped = 0
    for issue in eligible:
        if issue.id in numeric_ids:
            continue
        try:
            node_id = numeric_node_id(issue.id)
        except MalformedRecordError as exc:
            skipped += 1
            logger.warning("Skipping issue in dependency graph: %s", exc)
            continue
        other = owners.get(node_id)
        if other is not None and other != issue.id:
            raise DataIntegrityError(f"Issue ids {other!r} and {issue.id!r} both map to graph node {node_id!r}")
        owners[node_id] = issue.id
        numeric_ids[issue.id] = node_id
        label = (issue.title or "").strip() or GRAPH_NODE_FALLBACK_LABEL
        nodes.append(GraphNode(id=node_id, label=label))

    edges: list[GraphEdge] = []
    seen: set[str] = set()
    for issue in eligible:
        target = numeric_ids.get(issue.id)
        if target is None or issue.id in seen:
            continue
        seen.add(issue.id)
        for blocker in issue.blocked_by:
            if blocker.closed_at is not None:
                continue
            source = numeric_ids.get(blocker.id)
            if source is None:
                continue
            edges.append(GraphEdge(source=source, target=target))

    linked = {e.source for e in edges} | {e.target for e in edges}
    connected = [node for node in nodes if node.id in linked]
    return DependencyGraph(nodes=connected, edges=edges, skipped=skipped)
