"""Pointer hit-testing against rendered edges under pan and zoom."""

import logging
import math
from dataclasses import dataclass, replace

from keygraph.config import PickerConfig
from keygraph.models import Graph, GraphEdge, Point

logger = logging.getLogger(__name__)

_DEFAULT_PICKER = PickerConfig()


@dataclass(frozen=True)
class Viewport:
    """Pan/zoom affine transform between screen and canvas space.

    Canvas origin is drawn at the viewport center shifted by `pan`, scaled by
    `zoom`. Every change returns a new Viewport.
    """

    width: float
    height: float
    pan: Point = (0.0, 0.0)
    zoom: float = 1.0

    @property
    def center(self) -> Point:
        return (self.width / 2, self.height / 2)

    def screen_to_canvas(self, screen_point: Point) -> Point:
        return screen_to_canvas(screen_point, self.center, self.pan, self.zoom)

    def canvas_to_screen(self, canvas_point: Point) -> Point:
        cx, cy = self.center
        return (
            canvas_point[0] * self.zoom + cx + self.pan[0],
            canvas_point[1] * self.zoom + cy + self.pan[1],
        )

    def zoomed(self, wheel_delta: float, config: PickerConfig = _DEFAULT_PICKER) -> "Viewport":
        """Apply one wheel step: scrolling down zooms out, up zooms in."""
        step = config.zoom_out_step if wheel_delta > 0 else config.zoom_in_step
        zoom = max(config.min_zoom, min(config.max_zoom, self.zoom * step))
        return replace(self, zoom=zoom)

    def panned_to(self, pan: Point) -> "Viewport":
        return replace(self, pan=(pan[0], pan[1]))

    def drag(self, drag_start: Point, pointer: Point) -> "Viewport":
        """Pan so the canvas follows the pointer; `drag_start` is pointer minus pan at press time."""
        return self.panned_to((pointer[0] - drag_start[0], pointer[1] - drag_start[1]))

    def resized(self, width: float, height: float) -> "Viewport":
        return replace(self, width=width, height=height)

    def reset(self) -> "Viewport":
        return replace(self, pan=(0.0, 0.0), zoom=1.0)


def screen_to_canvas(screen_point: Point, viewport_center: Point, pan: Point, zoom: float) -> Point:
    return (
        (screen_point[0] - viewport_center[0] - pan[0]) / zoom,
        (screen_point[1] - viewport_center[1] - pan[1]) / zoom,
    )


def distance_to_segment(point: Point, start: Point, end: Point) -> float | None:
    """Euclidean distance from `point` to the segment start-end.

    Returns None for a zero-length segment.
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return None

    t = ((point[0] - start[0]) * dx + (point[1] - start[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    proj_x = start[0] + t * dx
    proj_y = start[1] + t * dy
    return math.hypot(point[0] - proj_x, point[1] - proj_y)


def pick_edge(
    screen_point: Point,
    pan: Point,
    zoom: float,
    graph: Graph | None,
    viewport_size: tuple[float, float],
    config: PickerConfig = _DEFAULT_PICKER,
) -> GraphEdge | None:
    """First edge (in graph order) within the hit radius of a screen point.

    The radius is `hit_radius_px / zoom` canvas units so it looks the same on
    screen at every zoom level.
    """
    if graph is None or not graph.edges:
        return None

    center = (viewport_size[0] / 2, viewport_size[1] / 2)
    p = screen_to_canvas(screen_point, center, pan, zoom)
    threshold = config.hit_radius_px / zoom

    for edge in graph.edges:
        distance = distance_to_segment(p, graph.positions[edge.source], graph.positions[edge.target])
        if distance is None:
            continue
        if distance < threshold:
            logger.debug("Pointer %s hit %s -> %s (d=%.2f)", screen_point, edge.source, edge.target, distance)
            return edge
    return None


def pick_in_viewport(
    screen_point: Point,
    viewport: Viewport,
    graph: Graph | None,
    config: PickerConfig = _DEFAULT_PICKER,
) -> GraphEdge | None:
    return pick_edge(
        screen_point, viewport.pan, viewport.zoom, graph,
        (viewport.width, viewport.height), config,
    )
