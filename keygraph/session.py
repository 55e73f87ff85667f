"""Interactive state: the current graph, viewport, hover and selection.

Each rebuild trigger (search, toggle flip, dataset change) recomputes the whole
graph from the latest inputs. A new Graph replaces the old one in a single
assignment; a failed rebuild leaves the old one in place.
"""

import logging

from keygraph.builder import rebuild_graph
from keygraph.config import Config
from keygraph.models import CycleDetected, Dataset, Graph, GraphEdge, NodeId, Point
from keygraph.picker import Viewport, pick_in_viewport
from keygraph.search import parse_character_input

logger = logging.getLogger(__name__)


class GraphSession:
    """Holds the inputs and the displayed graph for one viewer."""

    def __init__(self, config: Config, width: float = 0.0, height: float = 0.0) -> None:
        self.config = config
        self.dataset: Dataset | None = None
        self.target: NodeId | None = None
        self.include_non_resil = False
        self.graph: Graph | None = None
        self.notice: str | None = None
        self.viewport = Viewport(
            width=width or config.render.width,
            height=height or config.render.height,
        )
        self.hovered_edge: GraphEdge | None = None
        self.selected_edge: GraphEdge | None = None
        self._drag_start: Point | None = None

    def __repr__(self) -> str:
        nodes = len(self.graph.nodes) if self.graph else 0
        return (
            f"GraphSession(target={self.target!r}, nodes={nodes}, "
            f"non_resil={self.include_non_resil}, zoom={self.viewport.zoom:.2f})"
        )

    @property
    def dragging(self) -> bool:
        return self._drag_start is not None

    # --- Rebuild triggers ---

    def rebuild(self) -> Graph | CycleDetected | None:
        """Recompute the graph for the current target, toggle and dataset."""
        if self.dataset is None or not self.target:
            return None

        result = rebuild_graph(
            self.target,
            self.dataset.resil_edges,
            self.dataset.non_resil_edges,
            self.include_non_resil,
            self.config.layout,
        )
        if result is None:
            return None
        if isinstance(result, CycleDetected):
            logger.warning("Keeping previous graph for %s: %s", self.target, result.message)
            self.notice = result.message
            return result

        self.notice = None
        self.hovered_edge = None
        self.selected_edge = None
        self.graph = result
        return result

    def search(self, text: str, slug_mapping: dict[str, str] | None = None) -> Graph | CycleDetected | None:
        target = parse_character_input(text, slug_mapping)
        if target is None:
            return None
        logger.info("Searching for %s", target)
        self.target = target
        result = self.rebuild()
        self.viewport = self.viewport.reset()
        return result

    def set_include_non_resil(self, enabled: bool) -> Graph | CycleDetected | None:
        self.include_non_resil = enabled
        return self.rebuild()

    def set_dataset(self, dataset: Dataset) -> Graph | CycleDetected | None:
        """Swap in newly loaded edges (season or key level changed)."""
        self.dataset = dataset
        return self.rebuild()

    def dismiss_notice(self) -> None:
        self.notice = None

    # --- Pointer handling ---

    def pointer_down(self, point: Point) -> None:
        if self.hovered_edge is not None:
            self.selected_edge = self.hovered_edge
            return
        pan = self.viewport.pan
        self._drag_start = (point[0] - pan[0], point[1] - pan[1])

    def pointer_move(self, point: Point) -> GraphEdge | None:
        if self._drag_start is not None:
            self.viewport = self.viewport.drag(self._drag_start, point)
            return None
        self.hovered_edge = pick_in_viewport(point, self.viewport, self.graph, self.config.picker)
        return self.hovered_edge

    def pointer_up(self) -> None:
        self._drag_start = None

    def wheel(self, delta: float) -> float:
        self.viewport = self.viewport.zoomed(delta, self.config.picker)
        return self.viewport.zoom

    def resize(self, width: float, height: float) -> None:
        self.viewport = self.viewport.resized(width, height)

    def clear_selection(self) -> None:
        self.selected_edge = None
