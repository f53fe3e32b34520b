import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from app.learning_map.errors import (
    ExpansionFailedError,
    ExpansionTimeoutError,
    GenerationTimeoutError,
    GeneratorError,
    LearningMapError,
    NodeBusyError,
    UnknownNodeError,
)
from app.learning_map.graph import parse_learning_map
from app.learning_map.layout import Layout, LayoutOptions, compute_layout
from app.learning_map.models import LearningMap
from app.learning_map.namespacing import graft_subgraph
from app.learning_map.presentation import RenderedMap, render_map

logger = logging.getLogger(__name__)


class MapGenerator(Protocol):
    """Anything that turns a topic into the JSON text of a learning map"""

    async def generate(self, topic: str) -> str: ...


@dataclass(eq=False)
class PendingExpansion:
    node_id: str
    topic: str
    generation: int


class ExpansionCoordinator:
    """
    Owner of one learning map and of the expansions running against it.

    The map is replaced by value on every change, so a reader always sees a
    complete map. Expansions of different nodes may run at the same time;
    each one is merged into the map that is current when its generator call
    returns. A node has at most one expansion in flight, tracked in the
    pending table from which the ``expanding`` flags are derived.
    """

    def __init__(
        self,
        generator: MapGenerator,
        *,
        timeout: float | None = 60.0,
        layout_options: LayoutOptions | None = None,
    ):
        self._generator: MapGenerator = generator
        self._timeout: float | None = timeout
        self._layout_options: LayoutOptions = layout_options or LayoutOptions()

        self._graph: LearningMap = LearningMap()
        self._layout: Layout = compute_layout(self._graph, self._layout_options)
        self._topic: str | None = None
        # bumped whenever the map is replaced, stale expansions compare against it
        self._generation: int = 0
        self._pending: dict[str, PendingExpansion] = {}

    @property
    def graph(self) -> LearningMap:
        return self._graph

    @property
    def layout(self) -> Layout:
        return self._layout

    @property
    def topic(self) -> str | None:
        return self._topic

    @property
    def expanding(self) -> frozenset[str]:
        return frozenset(self._pending)

    def render(self) -> RenderedMap:
        return render_map(self._graph, self._layout, self.expanding)

    async def _generate(self, topic: str) -> str:
        try:
            return await asyncio.wait_for(self._generator.generate(topic), self._timeout)
        except TimeoutError as e:
            raise GenerationTimeoutError(
                f'Content generator did not answer within {self._timeout} seconds'
            ) from e
        except GeneratorError:
            raise
        except Exception as e:
            logger.error('Content generator failed for %r: %r', topic, e)
            raise GeneratorError(f'Content generator call failed: {e!r}') from e

    async def submit_topic(self, topic: str) -> LearningMap:
        """
        Generate a brand new map for ``topic`` and replace the current one.

        Expansions still running against the previous map are discarded when
        they complete. On failure the current map stays as it is.

        Raises
        ------
        ValueError
            If the topic is blank
        GeneratorError
            If the generator fails or times out
        InvalidGraphError
            If the generator output is not a valid map
        """
        topic = topic.strip()
        if not topic:
            raise ValueError('Topic must not be empty')

        logger.info('Generating map for topic %r', topic)
        raw = await self._generate(topic)
        graph = parse_learning_map(raw)
        layout = compute_layout(graph, self._layout_options)

        self._generation += 1
        self._pending = {}
        self._graph, self._layout, self._topic = graph, layout, topic
        logger.info(
            'Map for %r created with %d nodes and %d edges',
            topic,
            len(graph.nodes),
            len(graph.edges),
        )
        return graph

    async def expand(self, node_id: str, topic_label: str | None = None) -> LearningMap:
        """
        Grow the map with a generated sub-graph under ``node_id``.

        Parameters
        ----------
        node_id : str
            Node to expand
        topic_label : str | None
            Topic sent to the generator, the node label by default

        Returns
        -------
        LearningMap
            The new map, a superset of the previous one

        Raises
        ------
        UnknownNodeError
            If the node is not in the map
        NodeBusyError
            If the node is already being expanded; nothing changes
        ExpansionFailedError
            If generation, parsing or merging failed; the map is left untouched
        ExpansionTimeoutError
            If the generator did not answer in time
        """
        node = self._graph.get_node(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        if node_id in self._pending:
            raise NodeBusyError(node_id)

        topic = (topic_label or '').strip() or node.label
        pending = PendingExpansion(
            node_id=node_id,
            topic=topic,
            generation=self._generation,
        )
        self._pending[node_id] = pending
        logger.info('Expanding node %s with topic %r', node_id, topic)

        try:
            raw = await self._generate(topic)
            subgraph = parse_learning_map(raw)
            if pending.generation != self._generation:
                raise ExpansionFailedError(node_id, 'the map was replaced during expansion')

            graph = graft_subgraph(self._graph, node_id, subgraph)
            layout = compute_layout(graph, self._layout_options)
        except GenerationTimeoutError as e:
            logger.warning('Expansion of node %s timed out', node_id)
            raise ExpansionTimeoutError(node_id, str(e)) from e
        except ExpansionFailedError:
            raise
        except LearningMapError as e:
            logger.warning('Expansion of node %s failed: %s', node_id, e)
            raise ExpansionFailedError(node_id, str(e)) from e
        finally:
            if self._pending.get(node_id) is pending:
                del self._pending[node_id]

        self._graph, self._layout = graph, layout
        logger.info('Node %s expanded with %d new nodes', node_id, len(subgraph.nodes))
        return graph
