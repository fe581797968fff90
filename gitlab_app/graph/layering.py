"""Longest-path layering and 2-D layout of the dependency graph."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence
from dataclasses import replace
from itertools import islice

import networkx as nx

from gitlab_app.core.config import (
    GRAPH_CANVAS_HEIGHT,
    GRAPH_CANVAS_MARGIN,
    GRAPH_CANVAS_WIDTH,
    GRAPH_MAX_NODES,
)
from gitlab_app.core.errors import GraphSizeLimitError
from gitlab_app.core.models import GraphEdge, GraphNode, LevelAssignment

logger = logging.getLogger(__name__)


def _check_size(nodes: Sequence[GraphNode], max_nodes: int | None) -> None:
    limit = GRAPH_MAX_NODES if max_nodes is None else max_nodes
    if len(nodes) > limit:
        raise GraphSizeLimitError(f"Dependency graph has {len(nodes)} nodes; layering is limited to {limit}")


def compute_levels(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    *,
    max_nodes: int | None = None,
) -> LevelAssignment:
    """Assign each node its longest-path depth (Kahn's algorithm on indegree).

    A target's level is raised to ``source level + 1`` for every incoming edge
    relaxed, so every edge between leveled nodes points strictly forward.
    Nodes on or downstream of a cycle never reach indegree 0; they keep level 0
    and are listed in ``unresolved``. Work is bounded by ``V + E`` steps.
    """
    _check_size(nodes, max_nodes)
    levels: dict[str, int] = {}
    for node in nodes:
        levels.setdefault(node.id, 0)
    indegree: dict[str, int] = dict.fromkeys(levels, 0)
    outgoing: dict[str, list[str]] = {node_id: [] for node_id in levels}
    for edge in edges:
        if edge.source not in levels or edge.target not in levels:
            continue
        indegree[edge.target] += 1
        outgoing[edge.source].append(edge.target)

    queue: deque[str] = deque(node_id for node_id in levels if indegree[node_id] == 0)
    order: list[str] = []
    steps = 0
    while queue:
        current = queue.popleft()
        order.append(current)
        steps += 1
        for target in outgoing[current]:
            steps += 1
            candidate = levels[current] + 1
            if candidate > levels[target]:
                levels[target] = candidate
            indegree[target] -= 1
            if indegree[target] == 0:
                queue.append(target)

    dequeued = set(order)
    unresolved = [node_id for node_id in levels if node_id not in dequeued]
    if unresolved:
        logger.warning(
            "%s node(s) sit on or behind a dependency cycle and keep level 0: %s",
            len(unresolved),
            ", ".join(unresolved[:20]),
        )
    return LevelAssignment(levels=levels, order=order, steps=steps, unresolved=unresolved)


def layer_nodes(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    *,
    width: float = GRAPH_CANVAS_WIDTH,
    height: float = GRAPH_CANVAS_HEIGHT,
    margin: float = GRAPH_CANVAS_MARGIN,
    max_nodes: int | None = None,
) -> list[GraphNode]:
    """Return copies of ``nodes`` with ``level``, ``x`` and ``y`` populated.

    Levels become equal-width vertical bands; nodes of a level are spread
    evenly down the band in input order.
    """
    if not nodes:
        return []
    assignment = compute_levels(nodes, edges, max_nodes=max_nodes)
    leveled = [replace(node, level=assignment.levels[node.id]) for node in nodes]
    max_level = max(node.level for node in leveled)

    groups: dict[int, list[GraphNode]] = {}
    for node in leveled:
        groups.setdefault(node.level, []).append(node)
    for level, members in groups.items():
        x = level / (max_level + 1) * width + margin
        spacing = height / (len(members) + 1)
        for idx, node in enumerate(members):
            node.x = x
            node.y = (idx + 1) * spacing
    return leveled


def find_dependency_cycles(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    *,
    limit: int = 50,
) -> list[list[str]]:
    """Up to ``limit`` elementary cycles among ``nodes``, each as an ordered list of node ids."""
    graph = nx.DiGraph()
    graph.add_nodes_from(node.id for node in nodes)
    graph.add_edges_from((e.source, e.target) for e in edges if e.source in graph and e.target in graph)
    return [list(cycle) for cycle in islice(nx.simple_cycles(graph), limit)]
