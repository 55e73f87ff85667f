"""Edge, arrowhead and label-box geometry.

Everything here is a pure function of node centers and the visual constants
in GeometryConfig, so it can be called per edge and per node on every redraw.
"""

import math
from dataclasses import dataclass
from typing import Callable

from keygraph.config import GeometryConfig
from keygraph.models import NodeId, Point

TextMeasure = Callable[[str], float]

_DEFAULT_GEOMETRY = GeometryConfig()


@dataclass(frozen=True)
class EdgeGeometry:
    """Drawable primitives for one directed edge."""

    line_start: Point
    line_end: Point
    arrow_polygon: tuple[Point, Point, Point]  # tip, then the two base corners
    angle: float


@dataclass(frozen=True)
class LabelBox:
    """Rounded label box centered on a node."""

    label: str
    center: Point
    width: float
    height: float
    radius: float

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        cx, cy = self.center
        return (
            cx - self.width / 2,
            cy - self.height / 2,
            cx + self.width / 2,
            cy + self.height / 2,
        )


def edge_angle(from_pos: Point, to_pos: Point) -> float:
    return math.atan2(to_pos[1] - from_pos[1], to_pos[0] - from_pos[0])


def arrow_depth(config: GeometryConfig = _DEFAULT_GEOMETRY) -> float:
    """Axial depth of the arrowhead, from tip to base."""
    return config.arrow_size * math.cos(math.radians(config.arrow_half_angle_deg))


def arrowhead(
    to_pos: Point, angle: float, config: GeometryConfig = _DEFAULT_GEOMETRY,
) -> tuple[Point, Point, Point]:
    """Triangle whose tip sits `arrow_standoff` units before the target center."""
    half = math.radians(config.arrow_half_angle_deg)
    size = config.arrow_size
    tip_x = to_pos[0] - math.cos(angle) * config.arrow_standoff
    tip_y = to_pos[1] - math.sin(angle) * config.arrow_standoff
    return (
        (tip_x, tip_y),
        (tip_x - size * math.cos(angle - half), tip_y - size * math.sin(angle - half)),
        (tip_x - size * math.cos(angle + half), tip_y - size * math.sin(angle + half)),
    )


def edge_geometry(
    from_pos: Point, to_pos: Point, config: GeometryConfig = _DEFAULT_GEOMETRY,
) -> EdgeGeometry:
    """Line segment and arrowhead for an edge between two node centers.

    The stroke stops at the arrowhead's base so it never runs into the filled
    triangle. Identical endpoints give angle 0, same as atan2(0, 0).
    """
    angle = edge_angle(from_pos, to_pos)
    pullback = config.arrow_standoff + arrow_depth(config)
    line_end = (
        to_pos[0] - math.cos(angle) * pullback,
        to_pos[1] - math.sin(angle) * pullback,
    )
    return EdgeGeometry(
        line_start=(from_pos[0], from_pos[1]),
        line_end=line_end,
        arrow_polygon=arrowhead(to_pos, angle, config),
        angle=angle,
    )


def node_label(node_id: NodeId) -> str:
    """Character name without the realm suffix."""
    return node_id.split("-", 1)[0]


def estimate_text_width(text: str, font_size: int) -> float:
    # Rough average advance for a sans-serif face
    return len(text) * font_size * 0.6


def label_box(
    node_id: NodeId,
    position: Point,
    measure: TextMeasure | None = None,
    config: GeometryConfig = _DEFAULT_GEOMETRY,
) -> LabelBox:
    label = node_label(node_id)
    if measure is None:
        text_width = estimate_text_width(label, config.font_size)
    else:
        text_width = measure(label)
    return LabelBox(
        label=label,
        center=(position[0], position[1]),
        width=text_width + config.label_padding * 2,
        height=config.box_height,
        radius=config.corner_radius,
    )
