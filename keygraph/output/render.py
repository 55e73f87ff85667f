"""Render a laid out graph to an image with Pillow."""

import logging
from datetime import datetime
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from keygraph.config import Config, GeometryConfig, RenderConfig
from keygraph.geometry import edge_geometry, label_box
from keygraph.models import EdgeKind, Graph, NodeId
from keygraph.picker import Viewport

logger = logging.getLogger(__name__)

Color = tuple[int, int, int, int]

# Ramp endpoints: earliest timestamp -> dark purple, latest -> yellow
RAMP_START = (68, 1, 84)
RAMP_END = (253, 231, 37)


class TimestampColors:
    """Linear color ramp over the dataset's timestamp range."""

    def __init__(self, timestamps: dict[NodeId, datetime], unknown: Color) -> None:
        self._times = {node: ts.timestamp() for node, ts in timestamps.items()}
        self._unknown = unknown
        self._min = min(self._times.values()) if self._times else 0.0
        self._max = max(self._times.values()) if self._times else 0.0

    def __call__(self, node: NodeId) -> Color:
        when = self._times.get(node)
        if when is None:
            return self._unknown
        span = self._max - self._min
        t = (when - self._min) / span if span else 0.0
        return (
            int(RAMP_START[0] + t * (RAMP_END[0] - RAMP_START[0])),
            int(RAMP_START[1] + t * (RAMP_END[1] - RAMP_START[1])),
            int(RAMP_START[2] + t * (RAMP_END[2] - RAMP_START[2])),
            255,
        )


def load_font(render: RenderConfig, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    size = max(1, size)
    if render.font_path:
        return ImageFont.truetype(render.font_path, size)
    return ImageFont.load_default(size=size)


def fit_viewport(
    graph: Graph,
    width: float,
    height: float,
    margin: float = 40.0,
    min_zoom: float = 0.1,
    max_zoom: float = 1.0,
) -> Viewport:
    """Viewport that shows every node, never zooming in past `max_zoom`."""
    xs = [x for x, _ in graph.positions.values()]
    ys = [y for _, y in graph.positions.values()]
    if not xs:
        return Viewport(width=width, height=height)

    span_x = (max(xs) - min(xs)) + 2 * margin
    span_y = (max(ys) - min(ys)) + 2 * margin
    zoom = min(width / span_x, height / span_y, max_zoom)
    zoom = max(min_zoom, zoom)

    mid_x = (max(xs) + min(xs)) / 2
    mid_y = (max(ys) + min(ys)) / 2
    return Viewport(width=width, height=height, pan=(-mid_x * zoom, -mid_y * zoom), zoom=zoom)


def _scaled_width(width: float, zoom: float) -> int:
    return max(1, round(width * zoom))


def render_graph(
    graph: Graph,
    timestamps: dict[NodeId, datetime],
    viewport: Viewport,
    config: Config,
) -> Image.Image:
    """Draw edges, arrowheads and node boxes as seen through `viewport`."""
    render = config.render
    geom: GeometryConfig = config.geometry
    zoom = viewport.zoom

    image = Image.new("RGBA", (int(viewport.width), int(viewport.height)), render.background)
    draw = ImageDraw.Draw(image, "RGBA")
    to_screen = viewport.canvas_to_screen

    for edge in graph.edges:
        shape = edge_geometry(graph.positions[edge.source], graph.positions[edge.target], geom)
        if edge.kind == EdgeKind.RESIL:
            color, width = render.resil_edge_color, render.resil_edge_width
        else:
            color, width = render.nonresil_edge_color, render.nonresil_edge_width
        draw.line(
            [to_screen(shape.line_start), to_screen(shape.line_end)],
            fill=color,
            width=_scaled_width(width, zoom),
        )
        draw.polygon([to_screen(p) for p in shape.arrow_polygon], fill=color)

    # Measure at canvas scale, draw at screen scale
    measure_font = load_font(render, geom.font_size)
    draw_font = load_font(render, round(geom.font_size * zoom))
    colors = TimestampColors(timestamps, render.unknown_node_color)

    for node in graph.nodes:
        box = label_box(node, graph.positions[node], measure_font.getlength, geom)
        x0, y0, x1, y1 = box.bounds
        sx0, sy0 = to_screen((x0, y0))
        sx1, sy1 = to_screen((x1, y1))
        draw.rounded_rectangle(
            [(sx0, sy0), (sx1, sy1)],
            radius=box.radius * zoom,
            fill="white",
            outline=colors(node),
            width=_scaled_width(render.node_border_width, zoom),
        )

        cx, cy = to_screen(box.center)
        bbox = draw.textbbox((0, 0), box.label, font=draw_font)
        tw = bbox[2] - bbox[0]
        th = bbox[3] - bbox[1]
        draw.text(
            (cx - tw / 2 - bbox[0], cy - th / 2 - bbox[1]),
            box.label,
            fill=render.target_text_color if node == graph.target else render.text_color,
            font=draw_font,
        )

    return image


def save_graph_image(
    graph: Graph,
    timestamps: dict[NodeId, datetime],
    output_path: Path,
    config: Config,
    viewport: Viewport | None = None,
) -> Path:
    if viewport is None:
        viewport = fit_viewport(
            graph, config.render.width, config.render.height,
            min_zoom=config.picker.min_zoom,
        )
    image = render_graph(graph, timestamps, viewport, config)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(output_path)
    logger.info("Wrote %dx%d graph image to %s", image.width, image.height, output_path)
    return output_path
