import asyncio
import json
import os

import pytest

# Settings are read at import time of app.main
os.environ.setdefault('OPENAI_API_KEY', 'test-key')
os.environ.setdefault('GENERATION_TIMEOUT', '5')

from app.learning_map import Edge, LearningNode, create_graph  # noqa: E402


def node(node_id: str, label: str | None = None, level: str = 'Beginner') -> LearningNode:
    return LearningNode(
        id=node_id,
        label=label or f'Concept {node_id}',
        description=f'About {label or node_id}',
        level=level,
    )


def edge(source: str, target: str) -> Edge:
    return Edge(source=source, target=target)


def map_json(nodes: list[str], edges: list[tuple[str, str]]) -> str:
    """Generator-style JSON text for the given node ids and edges"""
    return json.dumps(
        {
            'nodes': [
                {
                    'id': node_id,
                    'label': f'Concept {node_id}',
                    'description': f'About {node_id}',
                    'resources': [
                        {'title': 'MDN', 'url': 'https://developer.mozilla.org', 'type': 'article'}
                    ],
                    'level': 'Beginner',
                }
                for node_id in nodes
            ],
            'edges': [{'source': s, 'target': t} for s, t in edges],
        }
    )


HTML_MAP = map_json(['1', '2', '3', '4'], [('1', '2'), ('2', '3'), ('2', '4')])
CSS_MAP = map_json(['a', 'b'], [('a', 'b')])


class FakeGenerator:
    """
    Scripted content generator.

    ``responses`` maps a topic to JSON text or to an exception to raise.
    Topics listed in ``gates`` wait for their event before answering.
    """

    def __init__(self, responses: dict[str, str | Exception] | None = None, default: str = CSS_MAP):
        self.responses: dict[str, str | Exception] = responses or {}
        self.default: str = default
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []

    def gate(self, topic: str) -> asyncio.Event:
        self.gates[topic] = asyncio.Event()
        return self.gates[topic]

    async def generate(self, topic: str) -> str:
        self.calls.append(topic)
        if topic in self.gates:
            await self.gates[topic].wait()
        response = self.responses.get(topic, self.default)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def html_graph():
    return create_graph(
        [node('1', 'HTML'), node('2', 'CSS'), node('3', 'Selectors'), node('4', 'Box model')],
        [edge('1', '2'), edge('2', '3'), edge('2', '4')],
    )


@pytest.fixture
def generator():
    return FakeGenerator({'HTML': HTML_MAP, 'CSS': CSS_MAP})
