from collections.abc import Collection
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.learning_map.layout import Layout, Position
from app.learning_map.models import Edge, LearningMap, Level, Resource

NODE_TYPE = 'learningNode'
EDGE_TYPE = 'bezier'


class RenderNodeData(BaseModel):
    model_config = ConfigDict(frozen=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    label: str
    description: str
    level: Level
    resources: tuple[Resource, ...]
    expanding: bool = False


class RenderNode(BaseModel):
    model_config = ConfigDict(frozen=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    id: str
    type: Literal['learningNode'] = NODE_TYPE
    position: Position
    data: RenderNodeData


class EdgeStyle(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    stroke_width: int = Field(default=2, alias='strokeWidth')


class RenderEdge(BaseModel):
    model_config = ConfigDict(frozen=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    id: str
    source: str
    target: str
    type: Literal['bezier'] = EDGE_TYPE
    animated: bool = False
    style: EdgeStyle = EdgeStyle()


class RenderedMap(BaseModel):
    """Render-ready nodes and edges, in the shape a flow-chart widget consumes"""

    model_config = ConfigDict(frozen=True)  # pyright: ignore[reportUnannotatedClassAttribute]

    nodes: tuple[RenderNode, ...] = ()
    edges: tuple[RenderEdge, ...] = ()


def edge_id(edge: Edge) -> str:
    return f'{edge.source}-{edge.target}'


def render_map(
    graph: LearningMap, layout: Layout, expanding: Collection[str] = ()
) -> RenderedMap:
    """
    Combine a map, its layout and the set of expanding nodes into render records.

    Holds no state and never changes the map; call it again whenever any of the
    three inputs changes.
    """
    nodes = tuple(
        RenderNode(
            id=node.id,
            position=layout.positions[node.id],
            data=RenderNodeData(
                label=node.label,
                description=node.description,
                level=node.level,
                resources=node.resources,
                expanding=node.id in expanding,
            ),
        )
        for node in graph.nodes
    )
    edges = tuple(
        RenderEdge(id=edge_id(edge), source=edge.source, target=edge.target)
        for edge in graph.edges
    )
    return RenderedMap(nodes=nodes, edges=edges)
