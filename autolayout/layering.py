"""
Layered (top-to-bottom) layout for diagram nodes.

Two steps:
- Layer assignment: Kahn-style topological leveling over the edge set
- Row placement: each layer becomes a row, rows are centered on the
  widest one and stacked downward

Nothing here raises on bad graphs. Edges pointing at unknown nodes are
ignored, cycles fall back to layer 0 for whatever the leveling could not
reach, and an empty node list yields an empty layout.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger

from .config import DEFAULT_CONFIG, LayoutConfig
from .models import Edge, LayoutBox, Node


@dataclass
class LayoutResult:
    """Positions for every node plus the rows they were placed in."""
    boxes: dict[str, LayoutBox] = field(default_factory=dict)
    rows: list[list[str]] = field(default_factory=list)
    width: float = 0
    height: float = 0

    def layer_of(self, node_id: str) -> int | None:
        box = self.boxes.get(node_id)
        return box.layer if box else None


def unique_nodes(nodes: Iterable[Node]) -> list[Node]:
    """Drop repeated node ids, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[Node] = []
    for node in nodes:
        if node.id in seen:
            logger.debug("Ignoring duplicate node id {!r}", node.id)
            continue
        seen.add(node.id)
        result.append(node)
    return result


def scaled_size(node: Node, config: LayoutConfig = DEFAULT_CONFIG) -> tuple[int, int]:
    """Box size for a node: hints scaled up, floored to the minimum shape and capped."""
    # Cap before rounding; huge hints scale to inf
    width = min(node.width_hint * config.shape_scale, config.max_shape_size)
    height = min(node.height_hint * config.shape_scale, config.max_shape_size)
    return (
        max(config.min_shape_width, round(width)),
        max(config.min_shape_height, round(height)),
    )


def assign_layers(nodes: list[Node], edges: list[Edge]) -> dict[str, int]:
    """
    Assign every node to a layer following edge direction.

    Sources (no incoming edges) start at layer 0. A node is placed one
    below the deepest predecessor processed before it, and is processed
    once all its predecessors have been. If there are no sources at all,
    the first node seeds the walk. Nodes the walk never reaches (cycles,
    or cut off by one) stay on layer 0.

    Args:
        nodes: Diagram nodes (first occurrence of an id wins)
        edges: Diagram edges; dangling ones are ignored

    Returns:
        Mapping of node id to layer index
    """
    order = [n.id for n in unique_nodes(nodes)]
    if not order:
        return {}

    # Build in-degree counts and adjacency over present nodes only
    in_degree: dict[str, int] = {nid: 0 for nid in order}
    successors: dict[str, list[str]] = {nid: [] for nid in order}
    for edge in edges:
        if edge.source in in_degree and edge.target in in_degree:
            successors[edge.source].append(edge.target)
            in_degree[edge.target] += 1
        else:
            logger.debug("Dropping dangling edge {} -> {}", edge.source, edge.target)

    queue = deque(nid for nid in order if in_degree[nid] == 0)
    if not queue:
        logger.debug("No source nodes (cycle); seeding layering with {!r}", order[0])
        queue.append(order[0])

    layers: dict[str, int] = {}
    remaining = dict(in_degree)
    processed: set[str] = set()

    while queue:
        current = queue.popleft()
        if current in processed:
            continue
        processed.add(current)
        level = max(layers.get(current, 0), 0)
        layers[current] = level

        for child in successors[current]:
            if child in processed:
                continue
            layers[child] = max(layers.get(child, 0), level + 1)
            remaining[child] -= 1
            if remaining[child] == 0:
                queue.append(child)

    # Anything the walk left unfinished sits on the top layer
    for nid in order:
        if nid not in processed:
            layers[nid] = 0

    return layers


def compute_layout(
    nodes: list[Node],
    edges: list[Edge],
    config: LayoutConfig = DEFAULT_CONFIG
) -> LayoutResult:
    """
    Compute non-overlapping positions for all nodes.

    Each layer is one row. Within a row nodes are ordered by id and spaced
    by ``horizontal_gap``; every row is centered on the widest row. Rows
    are stacked from ``margin`` downward, each as tall as its tallest node
    plus ``vertical_gap``.

    Args:
        nodes: Diagram nodes
        edges: Diagram edges
        config: Layout constants

    Returns:
        LayoutResult with a box per node
    """
    nodes = unique_nodes(nodes)
    if not nodes:
        return LayoutResult()

    layers = assign_layers(nodes, edges)
    sizes = {n.id: scaled_size(n, config) for n in nodes}

    # Group by layer, ids sorted for determinism
    grouped: dict[int, list[str]] = defaultdict(list)
    for nid, layer in layers.items():
        grouped[layer].append(nid)
    rows = [sorted(grouped[layer]) for layer in sorted(grouped)]

    def row_width(row: list[str]) -> float:
        return sum(sizes[nid][0] for nid in row) + config.horizontal_gap * (len(row) - 1)

    canvas_width = max(row_width(row) for row in rows)

    boxes: dict[str, LayoutBox] = {}
    y = config.margin
    for row in rows:
        x = config.margin + (canvas_width - row_width(row)) / 2
        row_height = max(sizes[nid][1] for nid in row)
        for nid in row:
            width, height = sizes[nid]
            boxes[nid] = LayoutBox(x=x, y=y, width=width, height=height, layer=layers[nid])
            x += width + config.horizontal_gap
        y += row_height + config.vertical_gap

    logger.debug("Placed {} nodes in {} rows", len(boxes), len(rows))

    return LayoutResult(
        boxes=boxes,
        rows=rows,
        width=canvas_width + config.margin * 2,
        height=y - config.vertical_gap + config.margin,
    )
