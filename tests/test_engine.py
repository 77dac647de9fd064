"""End-to-end tests for the layout pipeline."""

import json
import random

import pytest

from autolayout.bounds import clamp_elements
from autolayout.engine import build_scene, elements_to_json, layout_diagram, layout_from_dict
from autolayout.models import ArrowElement, Edge, Node, ShapeElement, TextElement

from conftest import edges_of, nodes_of


def arrows(elements):
    return [el for el in elements if isinstance(el, ArrowElement)]


def random_diagram(seed: int, n_nodes: int = 15, n_edges: int = 25):
    rng = random.Random(seed)
    kinds = ["box", "diamond", "ellipse", "text"]
    nodes = [
        Node(
            id=f"n{i}",
            kind=rng.choice(kinds),
            width_hint=rng.randint(20, 300),
            height_hint=rng.randint(20, 120),
            label=rng.choice([None, "", "short", "a somewhat longer label that wraps"]),
        )
        for i in range(n_nodes)
    ]
    ids = [n.id for n in nodes] + ["ghost"]
    edges = [
        Edge(source=rng.choice(ids), target=rng.choice(ids), label=rng.choice([None, "yes", "no"]))
        for _ in range(n_edges)
    ]
    return nodes, edges


class TestScenarios:

    def test_two_connected_boxes(self, now):
        nodes = [Node(id="A", kind="box"), Node(id="B", kind="box")]
        elements = layout_diagram(nodes, edges_of("A>B"), now=now)

        shapes = {el.id: el for el in elements if isinstance(el, ShapeElement)}
        a, b = shapes["A"], shapes["B"]
        assert b.y > a.y + a.height

        (arrow,) = arrows(elements)
        assert (arrow.x, arrow.y) == (a.x + a.width / 2, a.y + a.height / 2)
        end_x = arrow.x + arrow.points[1][0]
        end_y = arrow.y + arrow.points[1][1]
        assert (end_x, end_y) == (b.x + b.width / 2, b.y + b.height / 2)

    def test_dangling_edge_dropped(self, now):
        elements = layout_diagram([Node(id="A")], edges_of("A>missing"), now=now)
        assert len(elements) == 1
        assert isinstance(elements[0], ShapeElement)
        assert arrows(elements) == []

    def test_cycle(self, now):
        elements = layout_diagram(nodes_of("A", "B", "C"), edges_of("A>B", "B>C", "C>A"), now=now)
        assert len(arrows(elements)) == 3
        assert len([el for el in elements if isinstance(el, ShapeElement)]) == 3

    def test_long_label_grows_height(self, now):
        text = "An unusually verbose step description that needs several lines to display"
        elements = layout_diagram([Node(id="A", label=text)], [], now=now)
        shape, label = elements
        assert isinstance(label, TextElement)
        assert label.height > 24 + 12
        assert label.width <= shape.width

    def test_empty_nodes(self, now):
        assert layout_diagram([], edges_of("A>B"), now=now) == []

    def test_huge_size_hint(self, now):
        (shape,) = layout_diagram([Node(id="A", width_hint=1.5e308)], [], now=now)
        assert shape.width == 3200
        assert shape.height == 64


class TestProperties:

    @pytest.mark.parametrize("seed", range(8))
    def test_deterministic(self, seed, now):
        nodes, edges = random_diagram(seed)
        first = json.dumps(elements_to_json(layout_diagram(nodes, edges, now=now)))
        second = json.dumps(elements_to_json(layout_diagram(nodes, edges, now=now)))
        assert first == second

    @pytest.mark.parametrize("seed", range(8))
    def test_ids_unique_and_non_empty(self, seed, now):
        nodes, edges = random_diagram(seed)
        ids = [el.id for el in layout_diagram(nodes, edges, now=now)]
        assert all(ids)
        assert len(ids) == len(set(ids))

    @pytest.mark.parametrize("seed", range(8))
    def test_one_arrow_per_valid_edge(self, seed, now):
        nodes, edges = random_diagram(seed)
        node_ids = {n.id for n in nodes}
        elements = layout_diagram(nodes, edges, now=now)
        valid = [e for e in edges if e.source in node_ids and e.target in node_ids]
        found = arrows(elements)
        assert len(found) == len(valid)
        for edge, arrow in zip(valid, found):
            assert arrow.start_binding.element_id == edge.source
            assert arrow.end_binding.element_id == edge.target

    @pytest.mark.parametrize("seed", range(8))
    def test_labels_follow_owner(self, seed, now):
        nodes, edges = random_diagram(seed)
        elements = layout_diagram(nodes, edges, now=now)
        for i, el in enumerate(elements):
            if el.id.endswith("-label"):
                assert elements[i - 1].id == el.id[: -len("-label")]

    def test_containment(self, now):
        # A 40-deep chain runs far past the envelope vertically
        ids = [f"n{i:02d}" for i in range(40)]
        edges = edges_of(*[f"{a}>{b}" for a, b in zip(ids, ids[1:])])
        elements = layout_diagram(nodes_of(*ids), edges, now=now)
        assert all(-5000 <= el.x <= 5000 and -5000 <= el.y <= 5000 for el in elements)
        assert max(el.y for el in elements) == 5000


class TestClampElements:

    def test_clamps_only_position(self, now):
        (shape,) = layout_diagram([Node(id="A")], [], now=now)
        moved = shape.model_copy(update={"x": -9000, "y": 7000, "width": 12345})
        (clamped,) = clamp_elements([moved])
        assert (clamped.x, clamped.y) == (-5000, 5000)
        assert clamped.width == 12345
        assert clamped.id == "A"
        assert moved.x == -9000  # input untouched

    def test_custom_limit(self, now):
        (shape,) = layout_diagram([Node(id="A")], [], now=now)
        (clamped,) = clamp_elements([shape], limit=50)
        assert (clamped.x, clamped.y) == (50, 50)

    def test_inside_envelope_unchanged(self, now):
        elements = layout_diagram(nodes_of("A", "B"), edges_of("A>B"), now=now)
        assert clamp_elements(elements) == elements


class TestSerialization:

    def test_camel_case_keys(self, now):
        elements = layout_diagram(
            nodes_of("A", "B"), [Edge(source="A", target="B", label="go")], now=now
        )
        data = elements_to_json(elements)
        shape, arrow, label = data[0], data[2], data[3]
        assert shape["type"] == "rectangle"
        assert shape["strokeColor"] == "#1e293b"
        assert shape["backgroundColor"] == "#e2e8f0"
        assert shape["versionNonce"] == now + 1
        assert shape["boundElements"] == [{"id": "A->B", "type": "arrow"}]
        assert shape["roundness"] == {"type": 2}
        assert arrow["startBinding"]["elementId"] == "A"
        assert arrow["startArrowhead"] is None
        assert arrow["endArrowhead"] == "arrow"
        assert label["fontSize"] == 16
        assert label["originalText"] == "go"
        assert label["containerId"] is None

    def test_scene_document(self, now):
        elements = layout_diagram(nodes_of("A"), [], now=now)
        scene = build_scene(elements)
        assert scene["type"] == "excalidraw"
        assert scene["version"] == 2
        assert scene["appState"] == {"viewBackgroundColor": "#ffffff"}
        assert scene["files"] == {}
        assert [el["id"] for el in scene["elements"]] == ["A"]
        json.dumps(scene)

    def test_layout_from_producer_dict(self, now):
        data = {
            "nodes": [
                {"id": "1", "type": "rectangle", "x": 5, "y": 9, "w": 120, "h": 60, "text": "Start"},
                {"id": "2", "type": "diamond", "x": 0, "y": 0, "w": 100, "h": 100, "text": "Ok?"},
            ],
            "edges": [{"from": "1", "to": "2", "label": "next"}],
        }
        elements = layout_from_dict(data, now=now)
        assert [el.id for el in elements] == ["1", "1-label", "2", "2-label", "1->2", "1->2-label"]
        assert elements[0].type == "rectangle"
        assert elements[2].type == "diamond"
        # Producer coordinates are ignored
        assert (elements[0].x, elements[0].y) != (5, 9)
