"""Tests for render records built from a map and its layout."""

import json

import pytest
from pydantic import ValidationError

from app.learning_map import compute_layout, parse_learning_map, render_map
from conftest import HTML_MAP


@pytest.fixture
def graph():
    return parse_learning_map(HTML_MAP)


def test_render_nodes(graph):
    layout = compute_layout(graph)
    rendered = render_map(graph, layout)

    assert [n.id for n in rendered.nodes] == ['1', '2', '3', '4']
    first = rendered.nodes[0]
    assert first.type == 'learningNode'
    assert first.position == layout.positions['1']
    assert first.data.label == 'Concept 1'
    assert first.data.level == 'Beginner'
    assert first.data.expanding is False


def test_render_edges(graph):
    rendered = render_map(graph, compute_layout(graph))

    assert [e.id for e in rendered.edges] == ['1-2', '2-3', '2-4']
    assert rendered.edges[0].type == 'bezier'
    assert rendered.edges[0].animated is False


def test_render_marks_expanding_nodes(graph):
    rendered = render_map(graph, compute_layout(graph), expanding={'2'})
    assert [n.data.expanding for n in rendered.nodes] == [False, True, False, False]


def test_render_is_json_serializable(graph):
    data = json.loads(render_map(graph, compute_layout(graph)).model_dump_json(by_alias=True))

    assert data['edges'][0]['style'] == {'strokeWidth': 2}
    assert data['nodes'][0]['data']['resources'][0]['type'] == 'article'
    assert set(data['nodes'][0]['position']) == {'x', 'y'}


def test_render_records_are_immutable(graph):
    rendered = render_map(graph, compute_layout(graph))
    with pytest.raises(ValidationError):
        rendered.nodes[0].id = 'other'
