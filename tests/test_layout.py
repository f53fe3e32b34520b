"""Tests for the layered layout engine."""

import pytest

from app.learning_map import (
    InvalidGraphError,
    LayoutOptions,
    LearningMap,
    compute_layout,
    create_graph,
    graft_subgraph,
)
from app.learning_map.layout import assign_ranks
from app.learning_map.models import Edge
from conftest import edge, node


def test_ranks_follow_longest_path(html_graph):
    assert assign_ranks(html_graph) == {'1': 0, '2': 1, '3': 2, '4': 2}


def test_rank_uses_longest_not_shortest_path():
    graph = create_graph(
        [node('a'), node('b'), node('c'), node('d')],
        [edge('a', 'b'), edge('b', 'c'), edge('a', 'c'), edge('c', 'd')],
    )
    assert assign_ranks(graph) == {'a': 0, 'b': 1, 'c': 2, 'd': 3}


def test_disconnected_nodes_are_rank_zero():
    graph = create_graph([node('a'), node('b'), node('c')], [edge('a', 'b')])
    assert assign_ranks(graph) == {'a': 0, 'b': 1, 'c': 0}


def test_cycle_terminates():
    graph = create_graph(
        [node('a'), node('b'), node('c'), node('d')],
        [edge('a', 'b'), edge('b', 'c'), edge('c', 'b'), edge('c', 'd')],
    )
    assert assign_ranks(graph) == {'a': 0, 'b': 1, 'c': 2, 'd': 3}


def test_cycle_without_root_and_self_loop_terminate():
    graph = create_graph(
        [node('a'), node('b'), node('c')],
        [edge('a', 'b'), edge('b', 'a'), edge('c', 'c')],
    )
    assert assign_ranks(graph) == {'a': 0, 'b': 0, 'c': 0}


def test_nodes_only_reached_through_a_rootless_cycle_stay_at_rank_zero():
    graph = create_graph(
        [node('x'), node('y'), node('z')],
        [edge('x', 'y'), edge('y', 'x'), edge('y', 'z')],
    )
    assert assign_ranks(graph) == {'x': 0, 'y': 0, 'z': 0}


def test_rootless_cycle_does_not_shift_rooted_nodes():
    graph = create_graph(
        [node('r'), node('x'), node('y'), node('z')],
        [edge('r', 'z'), edge('x', 'y'), edge('y', 'x'), edge('y', 'z')],
    )
    assert assign_ranks(graph) == {'r': 0, 'x': 0, 'y': 0, 'z': 1}


def test_long_chain_does_not_hit_recursion_limit():
    ids = [str(i) for i in range(3000)]
    graph = create_graph([node(i) for i in ids], [edge(a, b) for a, b in zip(ids, ids[1:])])
    assert assign_ranks(graph)['2999'] == 2999


def test_positions(html_graph):
    layout = compute_layout(html_graph)

    assert layout.positions['1'].x == -110
    assert layout.positions['1'].y == 0
    assert layout.positions['2'].y == 250
    # rank 2 holds "3" and "4" side by side, centred on x = 0
    assert layout.positions['3'].x == -220 - 50
    assert layout.positions['4'].x == 50
    assert layout.positions['3'].y == layout.positions['4'].y == 500
    assert layout.width == 540
    assert layout.height == 600


def test_siblings_do_not_overlap():
    graph = create_graph(
        [node('r'), *(node(str(i)) for i in range(5))], [edge('r', str(i)) for i in range(5)]
    )
    options = LayoutOptions(node_width=100, nodesep=10)
    layout = compute_layout(graph, options)

    xs = sorted(layout.positions[str(i)].x for i in range(5))
    assert all(b - a >= options.node_width + options.nodesep for a, b in zip(xs, xs[1:]))


def test_same_rank_keeps_insertion_order():
    graph = create_graph(
        [node('root'), node('z'), node('a'), node('m')],
        [edge('root', 'z'), edge('root', 'a'), edge('root', 'm')],
    )
    layout = compute_layout(graph)
    xs = [layout.positions[node_id].x for node_id in ('z', 'a', 'm')]
    assert xs == sorted(xs)


def test_layout_is_idempotent(html_graph):
    assert compute_layout(html_graph) == compute_layout(html_graph)


def test_layout_depends_on_graph_value_only(html_graph):
    subgraph = create_graph([node('a'), node('b')], [edge('a', 'b')])
    grown = graft_subgraph(html_graph, '2', subgraph)
    rebuilt = create_graph(list(grown.nodes), list(grown.edges))

    assert compute_layout(grown) == compute_layout(rebuilt)


def test_layout_after_expansion(html_graph):
    subgraph = create_graph([node('a'), node('b')], [edge('a', 'b')])
    layout = compute_layout(graft_subgraph(html_graph, '2', subgraph))
    assert layout.ranks == {'1': 0, '2': 1, '3': 2, '4': 2, '2-a': 2, '2-b': 3}


def test_empty_graph_layout():
    layout = compute_layout(LearningMap())
    assert layout.positions == {}
    assert layout.width == layout.height == 0


def test_layout_fails_fast_on_dangling_edge():
    graph = LearningMap(nodes=(node('a'),), edges=(Edge(source='a', target='ghost'),))
    with pytest.raises(InvalidGraphError):
        compute_layout(graph)
