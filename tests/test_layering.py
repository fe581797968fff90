import pytest

from gitlab_app.core.errors import GraphSizeLimitError
from gitlab_app.core.models import GraphEdge, GraphNode
from gitlab_app.graph.layering import compute_levels, find_dependency_cycles, layer_nodes


def _nodes(*ids):
    return [GraphNode(id=i, label=f"Issue {i}") for i in ids]


def _edges(*pairs):
    return [GraphEdge(source=s, target=t) for s, t in pairs]


def test_longest_path_level_wins():
    nodes = _nodes("a", "b", "c", "d")
    edges = _edges(("a", "b"), ("b", "c"), ("a", "c"), ("c", "d"))
    levels = compute_levels(nodes, edges).levels
    assert levels == {"a": 0, "b": 1, "c": 2, "d": 3}
    for e in edges:
        assert levels[e.target] > levels[e.source]


def test_cycle_with_acyclic_tail_terminates():
    # tail: t1 -> t2 -> t3; cycle: x -> y -> z -> x
    nodes = _nodes("t1", "t2", "t3", "x", "y", "z")
    edges = _edges(("t1", "t2"), ("t2", "t3"), ("x", "y"), ("y", "z"), ("z", "x"))
    out = compute_levels(nodes, edges)
    assert out.steps <= len(nodes) + len(edges)
    assert out.levels["t1"] == 0 and out.levels["t2"] == 1 and out.levels["t3"] == 2
    assert sorted(out.unresolved) == ["x", "y", "z"]
    assert all(out.levels[n] == 0 for n in ("x", "y", "z"))


def test_nodes_downstream_of_cycle_are_unresolved():
    nodes = _nodes("a", "b", "c")
    edges = _edges(("a", "b"), ("b", "a"), ("b", "c"))
    out = compute_levels(nodes, edges)
    assert out.order == []
    assert out.unresolved == ["a", "b", "c"]


def test_layout_coordinates():
    nodes = _nodes("a", "b", "c")
    edges = _edges(("a", "b"), ("a", "c"))
    out = layer_nodes(nodes, edges, width=300, height=300, margin=50)
    by_id = {n.id: n for n in out}
    assert by_id["a"].level == 0 and by_id["a"].x == 50 and by_id["a"].y == 150
    # level 1 holds b then c (input order), stacked evenly
    assert by_id["b"].x == 200 and by_id["c"].x == 200
    assert by_id["b"].y == 100 and by_id["c"].y == 200
    # input nodes untouched
    assert nodes[1].level == 0 and nodes[1].x == 0.0


def test_layout_order_follows_input_order():
    nodes = _nodes("9", "3", "5")
    edges = _edges(("9", "5"), ("3", "5"))
    out = layer_nodes(nodes, edges, width=100, height=90, margin=0)
    assert [n.id for n in out] == ["9", "3", "5"]
    assert [(n.id, n.y) for n in out if n.level == 0] == [("9", 30.0), ("3", 60.0)]


def test_empty_graph():
    assert layer_nodes([], []) == []


def test_size_limit():
    with pytest.raises(GraphSizeLimitError):
        compute_levels(_nodes("a", "b", "c"), [], max_nodes=2)


def test_cycles_are_reported():
    nodes = _nodes("t1", "x", "y", "z")
    edges = _edges(("t1", "x"), ("x", "y"), ("y", "z"), ("z", "x"))
    cycles = find_dependency_cycles(nodes, edges)
    assert len(cycles) == 1
    assert sorted(cycles[0]) == ["x", "y", "z"]
    assert find_dependency_cycles(_nodes("a", "b"), _edges(("a", "b"))) == []
