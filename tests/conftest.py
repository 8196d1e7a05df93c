"""Shared test fixtures — fake ports and sample graphs."""

from __future__ import annotations

import json

import pytest

from clusterview.adapters.classifiers.keyword import KeywordClassifier
from clusterview.domain.models import Edge, GraphState, Node, RenderFrame
from clusterview.ports.renderer import RendererPort
from clusterview.services.controller import ViewController


# ── Fake renderer ──


class RecordingRenderer(RendererPort):
    """Keeps every frame it is asked to draw."""

    def __init__(self) -> None:
        self.frames: list[RenderFrame] = []

    def render(self, frame: RenderFrame) -> str:
        self.frames.append(frame)
        return f"<frame {frame.view.value} {len(frame.clusters)}>"


# ── Graph builders ──


def make_graph(
    groups: dict[str, list[str]],
    links: list[tuple[str, str, float]],
    *,
    with_ids: bool = False,
) -> GraphState:
    """Nodes whose id == label, grouped as given; edges from triples."""
    nodes = [Node(id=nid, label=nid, group=g) for g, ids in groups.items() for nid in ids]
    edges = [
        Edge(source=s, target=t, weight=w, id=f"e{i}" if with_ids else None)
        for i, (s, t, w) in enumerate(links)
    ]
    return GraphState(nodes=nodes, edges=edges, group_order=list(groups))


def by_id(clusters):
    return {c.id: c for c in clusters}


# ── Fixtures ──


@pytest.fixture
def recording_renderer():
    return RecordingRenderer()


@pytest.fixture
def keyword_classifier():
    return KeywordClassifier()


@pytest.fixture
def three_node_graph():
    """a-b strong, b-c weak, all in GroupX."""
    return make_graph(
        {"GroupX": ["a", "b", "c"]},
        [("a", "b", 0.8), ("b", "c", 0.3)],
        with_ids=True,
    )


@pytest.fixture
def controller(recording_renderer, keyword_classifier, three_node_graph):
    ctl = ViewController(
        recording_renderer,
        classifier=keyword_classifier,
        threshold=0.5,
    )
    ctl.load(three_node_graph)
    return ctl


@pytest.fixture
def raw_document():
    return {
        "raw": "apple, bread\nsoup,, apple\n hug , cry",
        "links": [
            ["apple", "bread", 0.8],
            ["bread", "soup", 0.3],
            ["hug", "cry", 0.6],
            ["apple", "ghost", 0.9],
        ],
    }


@pytest.fixture
def node_document():
    return {
        "nodes": [
            {"id": "n1", "label": "apple"},
            {"id": "n2", "label": "bread"},
            {"id": "n3", "label": "mystery", "text": "a warm soup"},
            {"id": "n4", "label": "ball", "group": "Custom"},
        ],
        "links": [
            {"id": "l1", "source": "n1", "target": "n2", "weight": 0.7},
            {"source": "n2", "target": "n3", "weight": "0.4"},
            {"id": "l3", "source": "n1", "target": "missing", "weight": 0.5},
        ],
    }


@pytest.fixture
def config_file(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "classifier:\n"
        "  adapter: keyword\n"
        "renderer:\n"
        "  adapter: none\n"
        "view:\n"
        "  mode: pie\n"
        "  threshold: 0.5\n",
        encoding="utf-8",
    )
    return cfg


@pytest.fixture
def document_file(tmp_path, node_document):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(node_document), encoding="utf-8")
    return path
