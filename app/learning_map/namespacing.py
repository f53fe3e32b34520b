"""Id rewriting for sub-graphs spliced under an existing node"""

import logging
from collections.abc import Collection

from app.learning_map.errors import InvalidGraphError
from app.learning_map.graph import ID_SEPARATOR, REPEAT_MARKER, merge_graph, ordered_roots
from app.learning_map.models import Edge, LearningMap

logger = logging.getLogger(__name__)


def namespace_prefix(parent_id: str, taken_ids: Collection[str], subgraph: LearningMap) -> str:
    """
    Pick the prefix for ids of a sub-graph grafted under ``parent_id``.

    The first expansion of a node uses ``{parent}-``. A node expanded again gets
    ``{parent}-~2-``, ``{parent}-~3-`` and so on, the first one whose ids are all
    free. Sub-graph ids never contain ``-`` or ``~`` (see ``escape_id``), so the
    parent, the expansion count and the generated id can always be read back
    from a namespaced id, and grafts under different parents never collide.
    """
    taken = set(taken_ids)
    prefix = f'{parent_id}{ID_SEPARATOR}'
    generation = 1
    while any(f'{prefix}{node_id}' in taken for node_id in subgraph.node_ids):
        generation += 1
        prefix = f'{parent_id}{ID_SEPARATOR}{REPEAT_MARKER}{generation}{ID_SEPARATOR}'
    return prefix


def namespace_subgraph(
    parent_id: str, subgraph: LearningMap, taken_ids: Collection[str] = ()
) -> tuple[LearningMap, list[Edge]]:
    """
    Rewrite sub-graph ids under the parent namespace and build its attach edges.

    Parameters
    ----------
    parent_id : str
        Node the sub-graph is grafted under
    subgraph : LearningMap
        Freshly generated graph with generator-chosen ids
    taken_ids : Collection[str]
        Ids already used by the map the sub-graph is merged into

    Returns
    -------
    tuple[LearningMap, list[Edge]]
        Rewritten sub-graph and one ``parent -> root`` edge per sub-graph root
    """
    if not subgraph.nodes:
        return LearningMap(), []

    reserved = [
        node_id
        for node_id in subgraph.node_ids
        if ID_SEPARATOR in node_id or REPEAT_MARKER in node_id
    ]
    if reserved:
        raise InvalidGraphError(
            f'Sub-graph id {reserved[0]!r} contains {ID_SEPARATOR!r} or {REPEAT_MARKER!r}'
        )

    prefix = namespace_prefix(parent_id, taken_ids, subgraph)

    nodes = tuple(node.model_copy(update={'id': prefix + node.id}) for node in subgraph.nodes)
    edges = tuple(
        Edge(source=prefix + edge.source, target=prefix + edge.target)
        for edge in subgraph.edges
    )

    # roots are taken from the generator's own ids, before rewriting
    roots = ordered_roots(subgraph)
    if not roots:
        logger.warning(
            'Sub-graph for node %s has no root, attaching through its first node', parent_id
        )
        roots = [subgraph.nodes[0].id]

    attach_edges = [Edge(source=parent_id, target=prefix + root) for root in roots]
    return LearningMap(nodes=nodes, edges=edges), attach_edges


def graft_subgraph(graph: LearningMap, parent_id: str, subgraph: LearningMap) -> LearningMap:
    """Namespace ``subgraph`` against ``graph`` and merge it under ``parent_id``"""
    namespaced, attach_edges = namespace_subgraph(parent_id, subgraph, graph.node_ids)
    return merge_graph(graph, namespaced, attach_edges)
