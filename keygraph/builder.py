"""Build the graph around a focal character from raw upgrade edges."""

import logging
from collections.abc import Iterable, Sequence

from keygraph.config import LayoutConfig
from keygraph.layering import layout
from keygraph.models import (
    CycleDetected,
    EdgeKind,
    Graph,
    GraphEdge,
    GraphSelection,
    NodeId,
    RawEdge,
)

logger = logging.getLogger(__name__)


def collect_nodes(start: NodeId, pairs: Iterable[tuple[NodeId, NodeId]]) -> set[NodeId]:
    """Every node reachable from `start` along (from, to) pairs, start included.

    Iterative depth-first walk with an explicit stack; each node is expanded
    at most once.
    """
    adjacency: dict[NodeId, list[NodeId]] = {}
    for a, b in pairs:
        adjacency.setdefault(a, []).append(b)

    visited = {start}
    stack = [start]
    while stack:
        node = stack.pop()
        for neighbor in adjacency.get(node, ()):
            if neighbor not in visited:
                visited.add(neighbor)
                stack.append(neighbor)
    return visited


def build_graph(
    target: NodeId | None,
    resil_edges: Sequence[RawEdge],
    non_resil_edges: Sequence[RawEdge],
    include_non_resil_descendants: bool = False,
) -> GraphSelection | None:
    """Compute the vertex and edge set around `target`.

    Upward (who fed into target) always follows both edge kinds. Downward
    (who target fed into) follows non-resilient edges only when
    `include_non_resil_descendants` is set.

    Returns None when no target is given; callers keep whatever they had.
    """
    if not target or not target.strip():
        return None

    up_pairs = [(e.target, e.source) for e in resil_edges]
    up_pairs.extend((e.target, e.source) for e in non_resil_edges)
    ancestors = collect_nodes(target, up_pairs)

    down_pairs = [(e.source, e.target) for e in resil_edges]
    if include_non_resil_descendants:
        down_pairs.extend((e.source, e.target) for e in non_resil_edges)
    descendants = collect_nodes(target, down_pairs)

    nodes = ancestors | descendants | {target}

    edges: list[GraphEdge] = []
    for e in resil_edges:
        if e.source in nodes and e.target in nodes:
            edges.append(GraphEdge(source=e.source, target=e.target, kind=EdgeKind.RESIL, labels=e.labels))

    for e in non_resil_edges:
        both_in_graph = e.source in nodes and e.target in nodes
        # The last step into the focal node is shown even with the toggle off
        into_target = e.target == target and e.source in nodes
        if (include_non_resil_descendants and both_in_graph) or into_target:
            edges.append(GraphEdge(source=e.source, target=e.target, kind=EdgeKind.NONRESIL, labels=e.labels))

    ancestors.discard(target)
    descendants.discard(target)
    logger.debug(
        "Selection for %s: %d ancestors, %d descendants, %d edges",
        target, len(ancestors), len(descendants), len(edges),
    )
    return GraphSelection(
        target=target,
        nodes=frozenset(nodes),
        ancestors=frozenset(ancestors),
        descendants=frozenset(descendants),
        edges=tuple(edges),
    )


def rebuild_graph(
    target: NodeId | None,
    resil_edges: Sequence[RawEdge],
    non_resil_edges: Sequence[RawEdge],
    include_non_resil_descendants: bool = False,
    layout_config: LayoutConfig | None = None,
) -> Graph | CycleDetected | None:
    """Select and lay out the graph around `target` in one step.

    Returns None for an empty target and CycleDetected when the selected
    edges are not acyclic; otherwise a complete, immutable Graph.
    """
    selection = build_graph(target, resil_edges, non_resil_edges, include_non_resil_descendants)
    if selection is None:
        return None

    layout_config = layout_config or LayoutConfig()
    result = layout(
        sorted(selection.nodes),
        [(e.source, e.target) for e in selection.edges],
        h_spacing=layout_config.h_spacing,
        v_spacing=layout_config.v_spacing,
    )
    if isinstance(result, CycleDetected):
        return result

    ordered_nodes = tuple(node for layer in result.layers for node in layer)
    logger.info(
        "Built graph for %s: %d nodes, %d edges, %d layers",
        selection.target, len(ordered_nodes), len(selection.edges), len(result.layers),
    )
    return Graph(
        target=selection.target,
        nodes=ordered_nodes,
        edges=selection.edges,
        positions=result.positions,
        layers=result.layers,
    )
