"""Topological layering of a vertex/edge set into a drawable hierarchy.

Phases:
  1. Topological order (Kahn's algorithm, FIFO queue)
  2. Layer assignment (longest path from a source)
  3. Coordinate assignment (each layer centered on x = 0)

A cycle is reported as a CycleDetected value rather than raised: it is an
expected outcome for some datasets and the caller keeps its previous graph.
"""

import logging
from collections import deque
from collections.abc import Iterable, Sequence

from keygraph.models import CycleDetected, Layout, NodeId, Point

logger = logging.getLogger(__name__)

DEFAULT_H_SPACING = 120.0
DEFAULT_V_SPACING = 100.0


def _unique_nodes(nodes: Iterable[NodeId]) -> list[NodeId]:
    seen: set[NodeId] = set()
    ordered: list[NodeId] = []
    for node in nodes:
        if node not in seen:
            seen.add(node)
            ordered.append(node)
    return ordered


def topological_sort(
    nodes: Sequence[NodeId], edges: Sequence[tuple[NodeId, NodeId]],
) -> tuple[list[NodeId], bool]:
    """Kahn's algorithm.

    Returns (order, complete). `complete` is False when the edges contain a
    cycle, in which case `order` holds only the nodes consumed before the
    queue ran dry.
    """
    in_degree: dict[NodeId, int] = {node: 0 for node in nodes}
    successors: dict[NodeId, list[NodeId]] = {node: [] for node in nodes}

    for source, target in edges:
        if source not in in_degree or target not in in_degree:
            raise ValueError(f"Edge {source} -> {target} references a node outside the layout")
        successors[source].append(target)
        in_degree[target] += 1

    queue = deque(node for node in nodes if in_degree[node] == 0)
    order: list[NodeId] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for succ in successors[node]:
            in_degree[succ] -= 1
            if in_degree[succ] == 0:
                queue.append(succ)

    return order, len(order) == len(nodes)


def assign_layers(
    order: Sequence[NodeId], edges: Sequence[tuple[NodeId, NodeId]],
) -> dict[NodeId, int]:
    """Layer 0 for sources, otherwise one below the deepest predecessor.

    `order` must be a complete topological order of the nodes.
    """
    predecessors: dict[NodeId, list[NodeId]] = {}
    for source, target in edges:
        predecessors.setdefault(target, []).append(source)

    layer_of: dict[NodeId, int] = {}
    for node in order:
        preds = predecessors.get(node)
        layer_of[node] = 1 + max(layer_of[p] for p in preds) if preds else 0
    return layer_of


def group_layers(order: Sequence[NodeId], layer_of: dict[NodeId, int]) -> list[list[NodeId]]:
    """Bucket nodes by layer, keeping topological-discovery order inside each."""
    if not order:
        return []
    layers: list[list[NodeId]] = [[] for _ in range(max(layer_of.values()) + 1)]
    for node in order:
        layers[layer_of[node]].append(node)
    return layers


def assign_positions(
    layers: Sequence[Sequence[NodeId]],
    h_spacing: float = DEFAULT_H_SPACING,
    v_spacing: float = DEFAULT_V_SPACING,
) -> dict[NodeId, Point]:
    positions: dict[NodeId, Point] = {}
    for depth, layer_nodes in enumerate(layers):
        n = len(layer_nodes)
        for i, node in enumerate(layer_nodes):
            positions[node] = ((i - (n - 1) / 2) * h_spacing, depth * v_spacing)
    return positions


def layout(
    nodes: Iterable[NodeId],
    edges: Iterable[tuple[NodeId, NodeId]],
    h_spacing: float = DEFAULT_H_SPACING,
    v_spacing: float = DEFAULT_V_SPACING,
) -> Layout | CycleDetected:
    """Lay out a DAG in horizontal layers, or report that it is not one."""
    node_list = _unique_nodes(nodes)
    edge_list = [(source, target) for source, target in edges]

    order, complete = topological_sort(node_list, edge_list)
    if not complete:
        logger.warning(
            "Cycle detected: %d of %d nodes could not be ordered",
            len(node_list) - len(order), len(node_list),
        )
        return CycleDetected(
            nodes=tuple(node_list),
            edges=tuple(edge_list),
            ordered=tuple(order),
        )

    layer_of = assign_layers(order, edge_list)
    layers = group_layers(order, layer_of)
    positions = assign_positions(layers, h_spacing, v_spacing)

    logger.debug("Laid out %d nodes in %d layers", len(node_list), len(layers))
    return Layout(
        positions=positions,
        layers=tuple(tuple(layer) for layer in layers),
        layer_of=layer_of,
    )
