"""
Boundary between a language-model producer and the layout engine.

A model is asked for ``{"nodes": [...], "edges": [...]}`` JSON. What comes
back is untrusted: this module parses it, checks it against a strict
schema, caps the counts and clamps sizes before handing a ``Diagram`` to
the engine. Past this point the engine trusts its input.
"""

import json
from typing import Literal, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import DiagramFormatError
from .models import Diagram, Edge, Node

MAX_NODES = 30
MAX_EDGES = 60
MAX_SIZE = 2000
MAX_NODE_TEXT = 2000
MAX_EDGE_LABEL = 500

DEFAULT_MAX_SHAPES = 12
MAX_SHAPES_CEILING = 20
EDGES_PER_SHAPE = 3


class GeneratedNode(BaseModel):
    """A node as the model emits it."""
    id: str = Field(min_length=1)
    type: Literal["rectangle", "diamond", "ellipse", "text"]
    x: float
    y: float
    w: float = Field(gt=0, le=MAX_SIZE)
    h: float = Field(gt=0, le=MAX_SIZE)
    text: Optional[str] = Field(default=None, max_length=MAX_NODE_TEXT)


class GeneratedEdge(BaseModel):
    """An edge as the model emits it."""
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from", min_length=1)
    to: str = Field(min_length=1)
    label: Optional[str] = Field(default=None, max_length=MAX_EDGE_LABEL)


class GeneratedDiagram(BaseModel):
    """Top-level shape of a model response."""
    nodes: list[GeneratedNode] = Field(max_length=MAX_NODES)
    edges: list[GeneratedEdge] = Field(max_length=MAX_EDGES)


def max_allowed_shapes(max_shapes: Optional[int]) -> int:
    """Effective node cap for a request."""
    requested = DEFAULT_MAX_SHAPES if max_shapes is None else max_shapes
    return max(1, min(requested, MAX_SHAPES_CEILING))


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def clamp_diagram(generated: GeneratedDiagram) -> Diagram:
    """Clamp sizes and truncate text, then convert to engine input."""
    nodes = [
        Node(
            id=n.id,
            kind=n.type,
            width_hint=_clamp(n.w, 1, MAX_SIZE),
            height_hint=_clamp(n.h, 1, MAX_SIZE),
            label=n.text[:MAX_NODE_TEXT] if n.text is not None else None,
        )
        for n in generated.nodes
    ]
    edges = [
        Edge(
            source=e.from_,
            target=e.to,
            label=e.label[:MAX_EDGE_LABEL] if e.label is not None else None,
        )
        for e in generated.edges
    ]
    return Diagram(nodes=nodes, edges=edges)


def parse_diagram_response(content: str, max_shapes: Optional[int] = None) -> Diagram:
    """
    Turn raw model output into a capped, clamped diagram.

    Args:
        content: The model's message content (expected to be a JSON object)
        max_shapes: Requested node cap (default 12, never above 20)

    Returns:
        Diagram ready for ``layout_diagram``

    Raises:
        DiagramFormatError: E_JSON if content isn't JSON, E_SCHEMA if it
            doesn't match the diagram schema
    """
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, TypeError) as e:
        raise DiagramFormatError(
            "E_JSON",
            "The AI returned invalid JSON. Please try again or refine your prompt."
        ) from e

    try:
        generated = GeneratedDiagram.model_validate(parsed)
    except ValidationError as e:
        logger.warning("Model response failed validation: {}", e.error_count())
        raise DiagramFormatError(
            "E_SCHEMA",
            "The AI response did not match the expected diagram format. Please try again.",
            details=[
                {"loc": list(err["loc"]), "msg": err["msg"]}
                for err in e.errors(include_url=False)
            ],
        ) from e

    limit = max_allowed_shapes(max_shapes)
    generated = GeneratedDiagram(
        nodes=generated.nodes[:limit],
        edges=generated.edges[:limit * EDGES_PER_SHAPE],
    )

    logger.info(
        "Accepted model diagram: {} nodes, {} edges (cap {})",
        len(generated.nodes), len(generated.edges), limit
    )
    return clamp_diagram(generated)
