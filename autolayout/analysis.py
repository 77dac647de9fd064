"""
Diagram analysis - Graph analysis and summarization utilities.

Used by validation and by the summary endpoint/command to describe a
diagram before (or instead of) laying it out.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .layering import assign_layers, unique_nodes

if TYPE_CHECKING:
    from .models import Diagram


@dataclass
class ConnectedComponent:
    """A connected component in the diagram graph."""
    node_ids: list[str] = field(default_factory=list)
    edge_count: int = 0

    @property
    def size(self) -> int:
        return len(self.node_ids)


@dataclass
class NodeConnectionInfo:
    """Connection information for a single node."""
    node_id: str
    label: str
    incoming: int = 0   # Edges pointing to this node
    outgoing: int = 0   # Edges pointing from this node

    @property
    def total(self) -> int:
        return self.incoming + self.outgoing


@dataclass
class DiagramSummary:
    """Structural summary of a diagram."""
    total_nodes: int
    total_edges: int
    dangling_edges: int
    nodes_by_kind: dict[str, int]
    layer_count: int
    connected_components: int
    cycle_count: int
    most_connected_nodes: list[NodeConnectionInfo]
    orphan_count: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_nodes": self.total_nodes,
            "total_edges": self.total_edges,
            "dangling_edges": self.dangling_edges,
            "nodes_by_kind": self.nodes_by_kind,
            "layer_count": self.layer_count,
            "connected_components": self.connected_components,
            "cycle_count": self.cycle_count,
            "most_connected_nodes": [
                {
                    "id": n.node_id,
                    "label": n.label,
                    "connections": n.total,
                    "incoming": n.incoming,
                    "outgoing": n.outgoing
                }
                for n in self.most_connected_nodes
            ],
            "orphan_count": self.orphan_count
        }


def _present_edges(diagram: "Diagram") -> list[tuple[str, str]]:
    """(source, target) pairs whose endpoints both exist."""
    node_ids = {n.id for n in diagram.nodes}
    return [
        (e.source, e.target)
        for e in diagram.edges
        if e.source in node_ids and e.target in node_ids
    ]


def find_connected_components(diagram: "Diagram") -> list[ConnectedComponent]:
    """
    Find all connected components in the diagram using BFS.

    Edges are treated as undirected; dangling edges are ignored.

    Args:
        diagram: The diagram to analyze

    Returns:
        List of ConnectedComponent objects, in node input order
    """
    nodes = unique_nodes(diagram.nodes)
    if not nodes:
        return []

    node_ids = [n.id for n in nodes]

    # Build adjacency list (undirected)
    adjacency: dict[str, set[str]] = {nid: set() for nid in node_ids}
    for source, target in _present_edges(diagram):
        adjacency[source].add(target)
        adjacency[target].add(source)

    edge_owner: dict[str, int] = {}
    visited: set[str] = set()
    components: list[ConnectedComponent] = []

    for start_node in node_ids:
        if start_node in visited:
            continue

        # BFS from this node
        component_nodes: list[str] = []
        queue = deque([start_node])
        visited.add(start_node)

        while queue:
            current = queue.popleft()
            component_nodes.append(current)
            edge_owner[current] = len(components)
            for neighbor in sorted(adjacency[current]):
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)

        components.append(ConnectedComponent(node_ids=component_nodes))

    for source, _target in _present_edges(diagram):
        components[edge_owner[source]].edge_count += 1

    return components


def find_cycle_groups(diagram: "Diagram") -> list[list[str]]:
    """
    Find groups of nodes that sit on a shared directed cycle.

    Uses Tarjan's strongly connected components (iterative, linear in
    nodes + edges). Only components with more than one node are returned;
    self-loops are left to the caller.

    Args:
        diagram: The diagram to search

    Returns:
        List of groups, each a list of node IDs in input order; groups are
        ordered by their first node's input position
    """
    order = [n.id for n in unique_nodes(diagram.nodes)]
    position = {nid: i for i, nid in enumerate(order)}
    successors: dict[str, list[str]] = {nid: [] for nid in order}
    for source, target in _present_edges(diagram):
        successors[source].append(target)

    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    groups: list[list[str]] = []

    def visit(nid: str) -> None:
        index[nid] = lowlink[nid] = len(index)
        stack.append(nid)
        on_stack.add(nid)

    for root in order:
        if root in index:
            continue
        visit(root)
        work = [(root, iter(successors[root]))]

        while work:
            current, children = work[-1]
            descended = False
            for child in children:
                if child not in index:
                    visit(child)
                    work.append((child, iter(successors[child])))
                    descended = True
                    break
                if child in on_stack:
                    lowlink[current] = min(lowlink[current], index[child])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[current])

            if lowlink[current] == index[current]:
                component: list[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == current:
                        break
                if len(component) > 1:
                    groups.append(sorted(component, key=position.__getitem__))

    groups.sort(key=lambda group: position[group[0]])
    return groups


def calculate_node_connections(diagram: "Diagram") -> dict[str, NodeConnectionInfo]:
    """Count incoming/outgoing edges for every node."""
    connections: dict[str, NodeConnectionInfo] = {}
    for node in unique_nodes(diagram.nodes):
        connections[node.id] = NodeConnectionInfo(
            node_id=node.id,
            label=node.label or ""
        )

    for source, target in _present_edges(diagram):
        connections[source].outgoing += 1
        connections[target].incoming += 1

    return connections


def summarize_diagram(diagram: "Diagram", top_n: int = 5) -> DiagramSummary:
    """
    Generate a structural summary of a diagram.

    Args:
        diagram: The diagram to summarize
        top_n: Number of top connected nodes to include

    Returns:
        DiagramSummary object with all analysis results
    """
    nodes = unique_nodes(diagram.nodes)

    kind_counts: dict[str, int] = defaultdict(int)
    for node in nodes:
        kind_counts[node.kind.value] += 1

    layers = assign_layers(nodes, diagram.edges)
    connections = calculate_node_connections(diagram)

    sorted_by_connections = sorted(
        connections.values(),
        key=lambda x: x.total,
        reverse=True
    )
    most_connected = [n for n in sorted_by_connections[:top_n] if n.total > 0]
    orphan_count = sum(1 for n in connections.values() if n.total == 0)

    present = len(_present_edges(diagram))

    return DiagramSummary(
        total_nodes=len(nodes),
        total_edges=len(diagram.edges),
        dangling_edges=len(diagram.edges) - present,
        nodes_by_kind=dict(kind_counts),
        layer_count=(max(layers.values()) + 1) if layers else 0,
        connected_components=len(find_connected_components(diagram)),
        cycle_count=len(find_cycle_groups(diagram)),
        most_connected_nodes=most_connected,
        orphan_count=orphan_count
    )
