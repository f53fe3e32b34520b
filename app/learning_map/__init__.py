"""Learning map engine: graph model, id namespacing, layout and expansion"""

from .coordinator import ExpansionCoordinator, MapGenerator
from .errors import (
    ExpansionFailedError,
    ExpansionTimeoutError,
    GenerationTimeoutError,
    GeneratorError,
    IdCollisionError,
    InvalidGraphError,
    LearningMapError,
    NodeBusyError,
    UnknownNodeError,
    UnknownSessionError,
)
from .graph import create_graph, merge_graph, parse_learning_map, roots_of
from .layout import Layout, LayoutOptions, compute_layout
from .models import Edge, LearningMap, LearningNode, Resource
from .namespacing import graft_subgraph, namespace_subgraph
from .presentation import RenderedMap, render_map

__all__ = [
    'Edge',
    'ExpansionCoordinator',
    'ExpansionFailedError',
    'ExpansionTimeoutError',
    'GenerationTimeoutError',
    'GeneratorError',
    'IdCollisionError',
    'InvalidGraphError',
    'Layout',
    'LayoutOptions',
    'LearningMap',
    'LearningMapError',
    'LearningNode',
    'MapGenerator',
    'NodeBusyError',
    'RenderedMap',
    'Resource',
    'UnknownNodeError',
    'UnknownSessionError',
    'compute_layout',
    'create_graph',
    'graft_subgraph',
    'merge_graph',
    'namespace_subgraph',
    'parse_learning_map',
    'render_map',
    'roots_of',
]
