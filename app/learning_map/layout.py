"""
Layered top-to-bottom layout of a learning map.

Each node is ranked by the longest path from a root (rank 0 when no root
reaches it), nodes sharing a rank keep their insertion order, and every rank
is centred horizontally on x = 0.
The result depends on the graph value only, so the whole map is laid out
again after every merge.
"""

from pydantic import BaseModel, ConfigDict

from app.learning_map.graph import ordered_roots, validate_graph
from app.learning_map.models import LearningMap


class LayoutOptions(BaseModel):
    """Fixed node box and spacing between boxes, in pixels"""

    model_config = ConfigDict(frozen=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    node_width: float = 220
    node_height: float = 100
    nodesep: float = 100
    ranksep: float = 150


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    x: float
    y: float


class Layout(BaseModel):
    """Ranks and top-left corner positions of every node"""

    model_config = ConfigDict(frozen=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    ranks: dict[str, int]
    positions: dict[str, Position]
    width: float = 0
    height: float = 0


def _children_map(graph: LearningMap) -> dict[str, list[str]]:
    children: dict[str, list[str]] = {node_id: [] for node_id in graph.node_ids}
    for edge in graph.edges:
        children[edge.source].append(edge.target)
    return children


def assign_ranks(graph: LearningMap) -> dict[str, int]:
    """
    Longest-path rank of every node.

    A depth-first traversal starting from the roots orders the nodes and marks
    edges leading back into the current path. Those edges only exist when the
    graph has a cycle; they are ignored, so a reentered node keeps the rank it
    already has and ranking terminates. Nodes no root reaches, such as a cycle
    with no way in, stay at rank 0.
    """
    children = _children_map(graph)

    visiting: set[str] = set()
    done: set[str] = set()
    back_edges: set[tuple[str, str]] = set()
    finish_order: list[str] = []

    for start in ordered_roots(graph):
        visiting.add(start)
        stack = [(start, iter(children[start]))]
        while stack:
            node_id, pending = stack[-1]
            child = next(pending, None)
            if child is None:
                stack.pop()
                visiting.discard(node_id)
                done.add(node_id)
                finish_order.append(node_id)
            elif child in visiting:
                back_edges.add((node_id, child))
            elif child not in done:
                visiting.add(child)
                stack.append((child, iter(children[child])))

    ranks = {node_id: 0 for node_id in graph.node_ids}
    for node_id in reversed(finish_order):
        for child in children[node_id]:
            if (node_id, child) not in back_edges:
                ranks[child] = max(ranks[child], ranks[node_id] + 1)
    return ranks


def compute_layout(graph: LearningMap, options: LayoutOptions | None = None) -> Layout:
    """
    Position every node of the map.

    Raises
    ------
    InvalidGraphError
        If the graph has duplicate ids or dangling edges; nothing is laid out
    """
    validate_graph(graph)
    options = options or LayoutOptions()

    ranks = assign_ranks(graph)

    layers: dict[int, list[str]] = {}
    for node_id in graph.node_ids:
        layers.setdefault(ranks[node_id], []).append(node_id)

    positions: dict[str, Position] = {}
    width = 0.0
    for rank, layer in layers.items():
        layer_width = len(layer) * options.node_width + (len(layer) - 1) * options.nodesep
        width = max(width, layer_width)
        left = -layer_width / 2
        y = rank * (options.node_height + options.ranksep)
        for index, node_id in enumerate(layer):
            positions[node_id] = Position(
                x=left + index * (options.node_width + options.nodesep), y=y
            )

    rank_count = max(layers, default=-1) + 1
    height = (
        rank_count * options.node_height + (rank_count - 1) * options.ranksep
        if rank_count
        else 0.0
    )
    return Layout(ranks=ranks, positions=positions, width=width, height=height)
