"""
Turn a laid-out diagram into drawable primitives.

For each node: a shape (plus a centered label when the node has text), or a
single text element for text nodes. For each edge: a straight arrow from
the source center to the target center (plus a label at its midpoint).

Output order is nodes first in input order, then edges in input order, with
every label directly after its owner. Identifiers are derived from node ids
and made unique within one output.
"""

from typing import Optional

from loguru import logger

from .config import DEFAULT_CONFIG, LayoutConfig
from .layering import LayoutResult, unique_nodes
from .models import (
    SHAPE_ELEMENT_TYPES,
    ArrowElement,
    Binding,
    BoundElement,
    Edge,
    Element,
    LayoutBox,
    Node,
    NodeKind,
    Roundness,
    ShapeElement,
    TextElement,
)
from .text_metrics import estimate_text

# Offsets added to the injected clock to derive version nonces per element role
_NONCE_SHAPE = 1
_NONCE_NODE_LABEL = 2
_NONCE_ARROW = 3
_NONCE_EDGE_LABEL = 4


class IdAllocator:
    """Hands out element ids, suffixing repeats with ``~2``, ``~3``, ..."""

    def __init__(self):
        self._taken: set[str] = set()

    def claim(self, wanted: str) -> str:
        wanted = wanted or "element"
        candidate = wanted
        n = 1
        while candidate in self._taken:
            n += 1
            candidate = f"{wanted}~{n}"
        self._taken.add(candidate)
        return candidate


def _common(config: LayoutConfig, now: int, nonce_offset: int) -> dict:
    """Styling and bookkeeping fields every element starts from."""
    return {
        "stroke_color": config.stroke_color,
        "background_color": "transparent",
        "fill_style": config.fill_style,
        "stroke_width": config.stroke_width,
        "stroke_style": config.stroke_style,
        "opacity": config.opacity,
        "roughness": config.roughness,
        "seed": now,
        "version_nonce": now + nonce_offset,
        "updated": now,
    }


def _text_element(
    element_id: str,
    text: str,
    x: float,
    y: float,
    width: float,
    height: float,
    font_size: int,
    centered: bool,
    baseline: int,
    nonce_offset: int,
    now: int,
    config: LayoutConfig,
) -> TextElement:
    return TextElement(
        id=element_id,
        x=x,
        y=y,
        width=width,
        height=height,
        text=text,
        original_text=text,
        font_size=font_size,
        font_family=config.font_family,
        text_align="center" if centered else "left",
        vertical_align="middle" if centered else "top",
        line_height=config.line_height_ratio,
        baseline=baseline,
        **_common(config, now, nonce_offset),
    )


def text_node_element(
    node: Node,
    box: LayoutBox,
    element_id: str,
    now: int,
    config: LayoutConfig = DEFAULT_CONFIG
) -> TextElement:
    """Standalone text for a ``text`` node, left/top aligned at the box."""
    content = node.label or ""
    font_size = config.text_font_size
    max_width = min(config.max_text_width, max(config.min_shape_width, box.width))
    metrics = estimate_text(content, font_size, max_width, config)
    return _text_element(
        element_id,
        content,
        x=box.x,
        y=box.y,
        width=max(metrics.width, config.min_shape_width),
        height=max(metrics.height, font_size + 12),
        font_size=font_size,
        centered=False,
        baseline=font_size - 2,
        nonce_offset=_NONCE_SHAPE,
        now=now,
        config=config,
    )


def shape_element(
    node: Node,
    box: LayoutBox,
    element_id: str,
    now: int,
    config: LayoutConfig = DEFAULT_CONFIG
) -> ShapeElement:
    """Filled shape at the node's box."""
    fields = _common(config, now, _NONCE_SHAPE)
    fields["background_color"] = config.background_color
    return ShapeElement(
        id=element_id,
        type=SHAPE_ELEMENT_TYPES[node.kind],
        x=box.x,
        y=box.y,
        width=box.width,
        height=box.height,
        # Diamonds render poorly with rounded corners
        roundness=None if node.kind == NodeKind.DIAMOND else Roundness(type=2),
        **fields,
    )


def node_label_element(
    node: Node,
    box: LayoutBox,
    element_id: str,
    now: int,
    config: LayoutConfig = DEFAULT_CONFIG
) -> TextElement:
    """Label centered inside a node's shape."""
    font_size = config.label_font_size
    usable_width = max(config.min_text_width, box.width - config.label_inset)
    metrics = estimate_text(node.label, font_size, usable_width, config)
    return _text_element(
        element_id,
        node.label,
        x=round(box.x + (box.width - metrics.width) / 2),
        y=round(box.y + (box.height - metrics.height) / 2),
        width=round(metrics.width),
        height=round(metrics.height),
        font_size=font_size,
        centered=True,
        baseline=round(font_size * 0.9),
        nonce_offset=_NONCE_NODE_LABEL,
        now=now,
        config=config,
    )


def arrow_element(
    source: LayoutBox,
    target: LayoutBox,
    element_id: str,
    source_element_id: str,
    target_element_id: str,
    now: int,
    config: LayoutConfig = DEFAULT_CONFIG
) -> ArrowElement:
    """
    Straight arrow from the source box center to the target box center.

    ``x``/``y`` is the polyline origin (the source center), not the top-left
    of a bounding box, and ``points`` are relative to it, so the first point
    is always ``[0, 0]``. ``width``/``height`` are the absolute extents; when
    the target lies left of or above the source, ``(x, x + width)`` does not
    cover the target center.
    """
    x1, y1 = source.center()
    x2, y2 = target.center()
    return ArrowElement(
        id=element_id,
        x=x1,
        y=y1,
        width=abs(x2 - x1),
        height=abs(y2 - y1),
        points=[[0, 0], [x2 - x1, y2 - y1]],
        start_binding=Binding(element_id=source_element_id, gap=config.arrow_binding_gap),
        end_binding=Binding(element_id=target_element_id, gap=config.arrow_binding_gap),
        start_arrowhead=None,
        end_arrowhead="arrow",
        **_common(config, now, _NONCE_ARROW),
    )


def edge_label_element(
    edge: Edge,
    source: LayoutBox,
    target: LayoutBox,
    element_id: str,
    now: int,
    config: LayoutConfig = DEFAULT_CONFIG
) -> TextElement:
    """Label centered on the midpoint of an edge's arrow."""
    x1, y1 = source.center()
    x2, y2 = target.center()
    mid_x = (x1 + x2) / 2
    mid_y = (y1 + y2) / 2
    font_size = config.edge_label_font_size
    metrics = estimate_text(edge.label, font_size, config.edge_label_width, config)
    return _text_element(
        element_id,
        edge.label,
        x=round(mid_x - metrics.width / 2),
        y=round(mid_y - metrics.height / 2),
        width=round(metrics.width),
        height=round(metrics.height),
        font_size=font_size,
        centered=True,
        baseline=font_size - 2,
        nonce_offset=_NONCE_EDGE_LABEL,
        now=now,
        config=config,
    )


def synthesize_elements(
    nodes: list[Node],
    edges: list[Edge],
    layout: LayoutResult,
    now: int,
    config: LayoutConfig = DEFAULT_CONFIG
) -> list[Element]:
    """
    Build the ordered primitive list for a laid-out diagram.

    Args:
        nodes: Diagram nodes
        edges: Diagram edges; dangling ones produce nothing
        layout: Result of ``compute_layout`` for the same nodes/edges
        now: Caller-supplied time in milliseconds, used for seeds and nonces
        config: Layout constants

    Returns:
        Shapes and labels for every node, then arrows and labels for every
        edge whose endpoints both exist
    """
    ids = IdAllocator()
    elements: list[Element] = []
    # node id -> the element arrows bind to
    anchors: dict[str, ShapeElement | TextElement] = {}

    for node in unique_nodes(nodes):
        box = layout.boxes.get(node.id)
        if box is None:
            continue

        if node.kind == NodeKind.TEXT:
            text_el = text_node_element(node, box, ids.claim(node.id), now, config)
            elements.append(text_el)
            anchors[node.id] = text_el
            continue

        shape = shape_element(node, box, ids.claim(node.id), now, config)
        elements.append(shape)
        anchors[node.id] = shape

        if node.has_label:
            elements.append(
                node_label_element(node, box, ids.claim(f"{shape.id}-label"), now, config)
            )

    dropped = 0
    for edge in edges:
        source_box: Optional[LayoutBox] = layout.boxes.get(edge.source)
        target_box: Optional[LayoutBox] = layout.boxes.get(edge.target)
        if source_box is None or target_box is None:
            dropped += 1
            continue

        source_el = anchors[edge.source]
        target_el = anchors[edge.target]
        arrow = arrow_element(
            source_box,
            target_box,
            ids.claim(f"{edge.source}->{edge.target}"),
            source_el.id,
            target_el.id,
            now,
            config,
        )
        elements.append(arrow)
        source_el.bound_elements.append(BoundElement(id=arrow.id))
        if target_el is not source_el:
            target_el.bound_elements.append(BoundElement(id=arrow.id))

        if edge.has_label:
            elements.append(
                edge_label_element(
                    edge, source_box, target_box, ids.claim(f"{arrow.id}-label"), now, config
                )
            )

    if dropped:
        logger.debug("Skipped {} edge(s) with missing endpoints", dropped)

    return elements
