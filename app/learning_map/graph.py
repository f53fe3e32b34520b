import json
import logging
import re
from collections.abc import Iterable

from pydantic import ValidationError

from app.learning_map.errors import IdCollisionError, InvalidGraphError
from app.learning_map.models import Edge, LearningMap, LearningNode

logger = logging.getLogger(__name__)

# joins a parent id and a grafted child id
ID_SEPARATOR = '-'
# marks the expansion count of a node expanded more than once
REPEAT_MARKER = '~'

_ID_ESCAPES = {'%': '%25', ID_SEPARATOR: '%2D', REPEAT_MARKER: '%7E'}


def _unique_edges(edges: Iterable[Edge]) -> tuple[Edge, ...]:
    """Collapse duplicate (source, target) pairs, keeping the first occurrence"""
    seen: set[tuple[str, str]] = set()
    unique = []
    for edge in edges:
        key = (edge.source, edge.target)
        if key not in seen:
            seen.add(key)
            unique.append(edge)
    return tuple(unique)


def validate_graph(graph: LearningMap) -> None:
    """Raise InvalidGraphError if node ids repeat or an edge points to a missing node"""
    ids: set[str] = set()
    for node in graph.nodes:
        if node.id in ids:
            raise InvalidGraphError(f'Duplicate node id {node.id!r}')
        ids.add(node.id)

    for edge in graph.edges:
        missing = [end for end in (edge.source, edge.target) if end not in ids]
        if missing:
            raise InvalidGraphError(
                f'Edge {edge.source!r} -> {edge.target!r} references unknown node {missing[0]!r}'
            )


def create_graph(nodes: Iterable[LearningNode], edges: Iterable[Edge]) -> LearningMap:
    """Build a validated learning map, duplicate edges are collapsed"""
    graph = LearningMap(nodes=tuple(nodes), edges=_unique_edges(edges))
    validate_graph(graph)
    return graph


def merge_graph(
    base: LearningMap, addition: LearningMap, attach_edges: Iterable[Edge] = ()
) -> LearningMap:
    """
    Union of two graphs plus the edges connecting them.

    Parameters
    ----------
    base : LearningMap
        Graph being extended, its nodes keep their place in front
    addition : LearningMap
        Graph with ids disjoint from ``base``
    attach_edges : Iterable[Edge]
        Extra edges, usually from a ``base`` node to the roots of ``addition``

    Returns
    -------
    LearningMap
        New graph value; neither input is modified

    Raises
    ------
    IdCollisionError
        If ``base`` and ``addition`` share node ids
    InvalidGraphError
        If an attach edge references a node found in neither graph
    """
    collisions = set(base.node_ids) & set(addition.node_ids)
    if collisions:
        raise IdCollisionError(collisions)

    return create_graph(
        nodes=(*base.nodes, *addition.nodes),
        edges=(*base.edges, *addition.edges, *attach_edges),
    )


def ordered_roots(graph: LearningMap) -> list[str]:
    """Ids of nodes without incoming edges, in node insertion order"""
    targets = {edge.target for edge in graph.edges}
    return [node.id for node in graph.nodes if node.id not in targets]


def roots_of(graph: LearningMap) -> set[str]:
    """Ids of nodes that are not the target of any edge"""
    return set(ordered_roots(graph))


def escape_id(node_id: str) -> str:
    """Percent-escape the id separator and repeat marker in a generator-chosen id"""
    return ''.join(_ID_ESCAPES.get(char, char) for char in node_id)


def _strip_markdown_fences(text: str) -> str:
    text = text.strip()
    text = re.sub(r'^```(?:json)?\s*\n?', '', text)
    text = re.sub(r'\n?```\s*$', '', text)
    return text.strip()


def parse_learning_map(text: str | None) -> LearningMap:
    """
    Parse generator output into a validated learning map.

    Expects a JSON object with ``nodes`` and ``edges``, optionally wrapped
    in a markdown code fence. Anything else is rejected as InvalidGraphError,
    dangling edges are not repaired. Generated ids are escaped so they never
    contain the characters used to build namespaced ids.
    """
    if not text or not text.strip():
        raise InvalidGraphError('Generator returned an empty response')

    cleaned = _strip_markdown_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning('Failed to parse generated map as JSON. Raw: %s', text[:200])
        raise InvalidGraphError(f'Generator output is not valid JSON: {e}') from e

    if not isinstance(data, dict):
        raise InvalidGraphError('Generator output is not a JSON object')

    try:
        raw_map = LearningMap.model_validate(
            {'nodes': data.get('nodes') or [], 'edges': data.get('edges') or []}
        )
    except ValidationError as e:
        logger.warning('Generated map has an unexpected shape: %s', e.errors()[:3])
        raise InvalidGraphError(f'Generator output does not match the map format: {e}') from e

    return create_graph(
        (node.model_copy(update={'id': escape_id(node.id)}) for node in raw_map.nodes),
        (
            Edge(source=escape_id(edge.source), target=escape_id(edge.target))
            for edge in raw_map.edges
        ),
    )
