"""
Diagram validation - Check diagram input for structural issues.

The layout engine tolerates everything reported here (it drops dangling
edges and falls back on cycles). Validation exists so callers can see
what will be dropped or degraded before they lay a diagram out.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .analysis import find_cycle_groups

if TYPE_CHECKING:
    from .models import Diagram


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Invalid state, must be fixed
    WARNING = "warning"  # Will be dropped or degraded during layout
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in a diagram."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None
    edge_index: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id:
            result["node_id"] = self.node_id
        if self.edge_index is not None:
            result["edge_index"] = self.edge_index
        return result


def validate_diagram(diagram: "Diagram") -> list[ValidationIssue]:
    """
    Validate a diagram and return a list of issues.

    Checks for:
    - Empty diagram - INFO
    - Duplicate node ids (later ones are ignored) - ERROR
    - Dangling edges (source/target doesn't exist) - WARNING
    - Self-referencing edges - WARNING
    - Duplicate edges (same source->target) - WARNING
    - Cycles (layering falls back) - WARNING
    - Orphan nodes (no connections) - INFO

    Args:
        diagram: The diagram to validate

    Returns:
        List of ValidationIssue objects
    """
    issues: list[ValidationIssue] = []

    nodes = diagram.nodes
    edges = diagram.edges

    # Check for empty diagram
    if not nodes:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Diagram has no nodes"
        ))
        return issues

    # Check for duplicate node ids
    node_ids: set[str] = set()
    for node in nodes:
        if node.id in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Duplicate node id (only the first is laid out): {node.id}",
                node_id=node.id
            ))
        node_ids.add(node.id)

    # Check for dangling edge references
    for index, edge in enumerate(edges):
        if edge.source not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Edge references non-existent source node: {edge.source}",
                edge_index=index
            ))
        if edge.target not in node_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Edge references non-existent target node: {edge.target}",
                edge_index=index
            ))

    # Check for self-referencing edges
    for index, edge in enumerate(edges):
        if edge.source == edge.target:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Self-referencing edge (node points to itself)",
                edge_index=index,
                node_id=edge.source
            ))

    # Check for duplicate edges (same source->target)
    seen_pairs: set[tuple[str, str]] = set()
    for index, edge in enumerate(edges):
        pair = (edge.source, edge.target)
        if pair in seen_pairs:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Duplicate edge from {edge.source} to {edge.target}",
                edge_index=index
            ))
        else:
            seen_pairs.add(pair)

    # Check for cycles (self-loops are reported above)
    for group in find_cycle_groups(diagram):
        issues.append(ValidationIssue(
            severity=IssueSeverity.WARNING,
            message=f"Cycle among {', '.join(group)}; layering falls back for these nodes",
            node_id=group[0]
        ))

    # Check for orphan nodes (no connections)
    connected: set[str] = set()
    for edge in edges:
        if edge.source in node_ids and edge.target in node_ids:
            connected.add(edge.source)
            connected.add(edge.target)
    orphans = [n.id for n in nodes if n.id not in connected]
    if orphans and len(nodes) > 1:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message=f"Orphan nodes (no connections): {', '.join(orphans)}"
        ))

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """
    Create a summary of validation issues.

    Args:
        issues: List of validation issues

    Returns:
        Dictionary with counts by severity
    """
    return {
        "total": len(issues),
        "errors": len([i for i in issues if i.severity == IssueSeverity.ERROR]),
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": len([i for i in issues if i.severity == IssueSeverity.ERROR]) == 0
    }
