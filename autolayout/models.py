"""
Core data models for the layout engine.

Input side:
- Node: an abstract diagram entity (kind, size hints, optional label)
- Edge: a directed relationship between two node ids (source/target)
- Diagram: a node list plus an edge list, as handed over by a producer

Output side:
- LayoutBox: computed position/size of a node (derived, never persisted)
- ShapeElement / TextElement / ArrowElement: the drawable primitives,
  a closed tagged variant discriminated by ``type``

Field Naming Convention:
- Python attributes are snake_case
- Primitives serialize to the canvas' camelCase keys (strokeColor, ...)
- Producers often emit ``type``/``w``/``h``/``text`` on nodes and
  ``from``/``to`` on edges; those are accepted on input and converted
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class NodeKind(str, Enum):
    """Shape kinds a node can be drawn as."""
    BOX = "box"
    DIAMOND = "diamond"
    ELLIPSE = "ellipse"
    TEXT = "text"


# Canvas element type for each drawable shape kind
SHAPE_ELEMENT_TYPES: dict[NodeKind, str] = {
    NodeKind.BOX: "rectangle",
    NodeKind.DIAMOND: "diamond",
    NodeKind.ELLIPSE: "ellipse",
}


class Node(BaseModel):
    """A node in the input diagram."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    kind: NodeKind = NodeKind.BOX
    width_hint: float = Field(default=100, gt=0)
    height_hint: float = Field(default=40, gt=0)
    label: Optional[str] = None

    @model_validator(mode='before')
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        """Convert producer field names (type/w/h/text) to ours."""
        if isinstance(data, dict):
            data = dict(data)
            if 'type' in data and 'kind' not in data:
                data['kind'] = data.pop('type')
            if data.get('kind') == "rectangle":
                data['kind'] = NodeKind.BOX.value
            if 'w' in data and 'width_hint' not in data:
                data['width_hint'] = data.pop('w')
            if 'h' in data and 'height_hint' not in data:
                data['height_hint'] = data.pop('h')
            if 'text' in data and 'label' not in data:
                data['label'] = data.pop('text')
            # Producer coordinates are ignored; layout always recomputes them
            data.pop('x', None)
            data.pop('y', None)
        return data

    @property
    def has_label(self) -> bool:
        return bool(self.label and self.label.strip())


class Edge(BaseModel):
    """
    A directed edge between two nodes.

    Uses `source` and `target` as canonical field names.
    Accepts `from`/`to` on input.
    """
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    label: Optional[str] = None

    @model_validator(mode='before')
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        """Convert legacy 'from'/'to' fields to 'source'/'target'."""
        if isinstance(data, dict):
            data = dict(data)
            # Handle 'from' -> 'source' (from is a Python keyword)
            if 'from' in data and 'source' not in data:
                data['source'] = data.pop('from')
            if 'from_node' in data and 'source' not in data:
                data['source'] = data.pop('from_node')
            # Handle 'to' -> 'target'
            if 'to' in data and 'target' not in data:
                data['target'] = data.pop('to')
            if 'to_node' in data and 'target' not in data:
                data['target'] = data.pop('to_node')
        return data

    @property
    def has_label(self) -> bool:
        return bool(self.label and self.label.strip())


class Diagram(BaseModel):
    """A node/edge set handed to the layout engine."""
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with canonical field names."""
        return {
            "nodes": [n.model_dump(mode="json", exclude_none=True) for n in self.nodes],
            "edges": [e.model_dump(mode="json", exclude_none=True) for e in self.edges],
        }

    @classmethod
    def from_json_dict(cls, data: dict) -> "Diagram":
        """Create a Diagram from a JSON dict (handles producer field names)."""
        return cls(
            nodes=[Node.model_validate(n) for n in data.get('nodes', [])],
            edges=[Edge.model_validate(e) for e in data.get('edges', [])],
        )


class LayoutBox(BaseModel):
    """Computed position and size of one node."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float
    layer: int = 0

    def center(self) -> tuple[float, float]:
        """Get the center point of the box."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def bounds(self) -> tuple[float, float, float, float]:
        """Get the bounding box (x, y, right, bottom)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


# --- Drawable primitives ---

class _CanvasModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Roundness(_CanvasModel):
    type: int = 2


class BoundElement(_CanvasModel):
    """Back-reference from a shape to an arrow attached to it."""
    id: str
    type: str = "arrow"


class Binding(_CanvasModel):
    """Attachment of an arrow end to an element."""
    element_id: str
    focus: float = 0
    gap: float = 8
    fixed_point: Optional[list[float]] = None


class ElementBase(_CanvasModel):
    """Fields shared by every primitive."""
    id: str = Field(min_length=1)
    x: float
    y: float
    width: float
    height: float
    angle: float = 0
    stroke_color: str
    background_color: str
    fill_style: str
    stroke_width: int
    stroke_style: str
    opacity: int
    roughness: int
    roundness: Optional[Roundness] = None
    seed: int
    version: int = 1
    version_nonce: int
    is_deleted: bool = False
    group_ids: list[str] = Field(default_factory=list)
    bound_elements: list[BoundElement] = Field(default_factory=list)
    updated: int
    link: Optional[str] = None
    locked: bool = False

    def to_json_dict(self) -> dict:
        """Serialize with canvas (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


class ShapeElement(ElementBase):
    type: Literal["rectangle", "diamond", "ellipse"]


class TextElement(ElementBase):
    type: Literal["text"] = "text"
    text: str
    font_size: int
    font_family: int = 1
    text_align: str = "left"
    vertical_align: str = "top"
    line_height: float = 1.2
    baseline: int
    container_id: Optional[str] = None
    original_text: str


class ArrowElement(ElementBase):
    type: Literal["arrow"] = "arrow"
    points: list[list[float]]
    start_binding: Optional[Binding] = None
    end_binding: Optional[Binding] = None
    start_arrowhead: Optional[str] = None
    end_arrowhead: Optional[str] = "arrow"


Element = Annotated[
    Union[ShapeElement, TextElement, ArrowElement],
    Field(discriminator="type"),
]
