from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

type Level = Literal['Beginner', 'Intermediate', 'Advanced']
type ResourceKind = Literal['article', 'video', 'book']


class Resource(BaseModel):
    """Learning resource attached to a node: an article, a video or a book"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    title: str
    url: str
    kind: ResourceKind = Field(alias='type')


class LearningNode(BaseModel):
    """
    A single concept of the learning map.

    Nodes are immutable once created. Whether a node is currently being
    expanded is session state and lives in the expansion coordinator.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    id: str = Field(min_length=1)
    label: str
    description: str
    level: Level
    resources: tuple[Resource, ...] = ()


class Edge(BaseModel):
    """Directed link from a concept to the concept learned after it"""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    source: str
    target: str


class LearningMap(BaseModel):
    """
    Directed graph of learning nodes.

    Node order is insertion order and is used by the layout as a tie-break.
    Build instances with ``create_graph`` / ``merge_graph`` so that every edge
    endpoint is guaranteed to exist.
    """

    model_config = ConfigDict(frozen=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    nodes: tuple[LearningNode, ...] = ()
    edges: tuple[Edge, ...] = ()

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def get_node(self, node_id: str) -> LearningNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)

    def __contains__(self, node_id: object) -> bool:
        return any(node.id == node_id for node in self.nodes)
