"""
Layout engine entry points.

``layout_diagram`` is the whole pipeline: layering, element synthesis and
bounds clamping. It is a pure function of its arguments; the current time
is passed in by the caller, never read here.
"""

from typing import Any

from loguru import logger

from .bounds import clamp_elements
from .config import DEFAULT_CONFIG, LayoutConfig
from .elements import synthesize_elements
from .layering import compute_layout
from .models import Diagram, Edge, Element, Node

SCENE_SOURCE = "autolayout"


def layout_diagram(
    nodes: list[Node],
    edges: list[Edge],
    *,
    now: int,
    config: LayoutConfig = DEFAULT_CONFIG
) -> list[Element]:
    """
    Lay out a diagram and return its drawable primitives.

    Args:
        nodes: Diagram nodes
        edges: Diagram edges (dangling edges are dropped)
        now: Caller-supplied time in milliseconds
        config: Layout constants

    Returns:
        Ordered, clamped primitive list; empty for an empty node list
    """
    if not nodes:
        return []

    layout = compute_layout(nodes, edges, config)
    elements = synthesize_elements(nodes, edges, layout, now, config)
    clamped = clamp_elements(elements, config.coord_limit)

    logger.debug(
        "Laid out {} nodes / {} edges into {} elements across {} rows",
        len(nodes), len(edges), len(clamped), len(layout.rows)
    )
    return clamped


def layout_from_dict(
    data: dict[str, Any],
    *,
    now: int,
    config: LayoutConfig = DEFAULT_CONFIG
) -> list[Element]:
    """Lay out a raw ``{"nodes": [...], "edges": [...]}`` mapping."""
    diagram = Diagram.from_json_dict(data)
    return layout_diagram(diagram.nodes, diagram.edges, now=now, config=config)


def elements_to_json(elements: list[Element]) -> list[dict]:
    """Serialize primitives with canvas (camelCase) keys."""
    return [el.to_json_dict() for el in elements]


def build_scene(elements: list[Element], background: str = "#ffffff") -> dict:
    """Wrap primitives in a canvas scene document ready to save or import."""
    return {
        "type": "excalidraw",
        "version": 2,
        "source": SCENE_SOURCE,
        "elements": elements_to_json(elements),
        "appState": {"viewBackgroundColor": background},
        "files": {},
    }
