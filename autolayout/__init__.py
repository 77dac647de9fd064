"""
autolayout - Diagram auto-layout engine for canvas boards.

Takes abstract nodes and directed edges (typically from a language model)
and produces positioned, styled canvas primitives: shapes, text labels and
connecting arrows.
"""

from .models import (
    # Enums
    NodeKind,
    # Input models
    Node,
    Edge,
    Diagram,
    # Output models
    LayoutBox,
    ShapeElement,
    TextElement,
    ArrowElement,
    Element,
)

from .config import LayoutConfig, DEFAULT_CONFIG, ServerSettings
from .errors import AutoLayoutError, DiagramFormatError, RateLimitError
from .text_metrics import TextMetrics, estimate_text
from .layering import LayoutResult, assign_layers, compute_layout
from .elements import synthesize_elements
from .bounds import clamp_elements
from .engine import layout_diagram, layout_from_dict, build_scene, elements_to_json
from .validation import validate_diagram, validation_summary, ValidationIssue, IssueSeverity
from .analysis import summarize_diagram, find_connected_components, find_cycle_groups
from .generation import parse_diagram_response
from .ratelimit import RateLimiter

__version__ = "0.1.0"

__all__ = [
    # Enums
    "NodeKind",
    # Models
    "Node",
    "Edge",
    "Diagram",
    "LayoutBox",
    "ShapeElement",
    "TextElement",
    "ArrowElement",
    "Element",
    # Config
    "LayoutConfig",
    "DEFAULT_CONFIG",
    "ServerSettings",
    # Errors
    "AutoLayoutError",
    "DiagramFormatError",
    "RateLimitError",
    # Engine
    "TextMetrics",
    "estimate_text",
    "LayoutResult",
    "assign_layers",
    "compute_layout",
    "synthesize_elements",
    "clamp_elements",
    "layout_diagram",
    "layout_from_dict",
    "build_scene",
    "elements_to_json",
    # Validation
    "validate_diagram",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
    # Analysis
    "summarize_diagram",
    "find_connected_components",
    "find_cycle_groups",
    # Model boundary
    "parse_diagram_response",
    "RateLimiter",
]
