"""Pure helpers to build the dependency graph context (no Streamlit)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import pandas as pd

from gitlab_app.analytics.intervals import IntervalIndex
from gitlab_app.core.config import (
    ALL_INTERVALS,
    GRAPH_CANVAS_HEIGHT,
    GRAPH_CANVAS_MARGIN,
    GRAPH_CANVAS_WIDTH,
)
from gitlab_app.core.models import GraphEdge, GraphNode, Issue
from gitlab_app.graph.dependency import build_dependency_graph
from gitlab_app.graph.layering import compute_levels, find_dependency_cycles, layer_nodes
from gitlab_app.visual.tables import graph_frames


@dataclass(slots=True)
class GraphContext:
    nodes: list[GraphNode]
    edges: list[GraphEdge]
    nodes_df: pd.DataFrame
    edges_df: pd.DataFrame
    skipped: int = 0
    unresolved: list[str] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)


def iteration_options(index: IntervalIndex) -> list[str]:
    return [ALL_INTERVALS, *dict.fromkeys(index.labels())]


def build_graph_context(
    issues: Sequence[Issue],
    index: IntervalIndex,
    selected: str = ALL_INTERVALS,
    *,
    width: float = GRAPH_CANVAS_WIDTH,
    height: float = GRAPH_CANVAS_HEIGHT,
    margin: float = GRAPH_CANVAS_MARGIN,
) -> GraphContext:
    graph = build_dependency_graph(issues, selected, index=index)
    positioned = layer_nodes(graph.nodes, graph.edges, width=width, height=height, margin=margin)
    unresolved = compute_levels(graph.nodes, graph.edges).unresolved if positioned else []
    cycles = find_dependency_cycles(graph.nodes, graph.edges) if unresolved else []
    nodes_df, edges_df = graph_frames(positioned, graph.edges)
    return GraphContext(
        nodes=positioned,
        edges=graph.edges,
        nodes_df=nodes_df,
        edges_df=edges_df,
        skipped=graph.skipped,
        unresolved=unresolved,
        cycles=cycles,
    )
