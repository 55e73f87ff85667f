"""Tests for edge, arrowhead and label-box geometry."""

import math

import pytest

from keygraph.config import GeometryConfig
from keygraph.geometry import (
    arrow_depth,
    edge_geometry,
    estimate_text_width,
    label_box,
    node_label,
)

DEPTH = 8 * math.cos(math.pi / 6)


class TestEdgeGeometry:
    def test_vertical_edge(self):
        shape = edge_geometry((0, 0), (0, 100))
        assert shape.angle == pytest.approx(math.pi / 2)
        assert shape.line_start == (0, 0)
        assert shape.line_end == pytest.approx((0, 100 - 20 - DEPTH))
        tip, wing_a, wing_b = shape.arrow_polygon
        assert tip == pytest.approx((0, 80))
        assert wing_a == pytest.approx((-4, 80 - DEPTH))
        assert wing_b == pytest.approx((4, 80 - DEPTH))

    def test_horizontal_edge(self):
        shape = edge_geometry((0, 0), (100, 0))
        assert shape.line_end == pytest.approx((100 - 20 - DEPTH, 0))
        assert shape.arrow_polygon[0] == pytest.approx((80, 0))

    def test_line_ends_at_arrow_base(self):
        shape = edge_geometry((-37, 12), (140, 305))
        _, wing_a, wing_b = shape.arrow_polygon
        base_mid = ((wing_a[0] + wing_b[0]) / 2, (wing_a[1] + wing_b[1]) / 2)
        assert shape.line_end == pytest.approx(base_mid)

    def test_arrow_is_isosceles(self):
        tip, wing_a, wing_b = edge_geometry((10, 10), (-90, 210)).arrow_polygon
        assert math.dist(tip, wing_a) == pytest.approx(8)
        assert math.dist(tip, wing_b) == pytest.approx(8)
        assert math.dist(wing_a, wing_b) == pytest.approx(8)  # 30 degree half-angle

    def test_tip_keeps_standoff_from_target(self):
        target = (250, -40)
        tip = edge_geometry((0, 0), target).arrow_polygon[0]
        assert math.dist(tip, target) == pytest.approx(20)

    def test_degenerate_edge(self):
        shape = edge_geometry((5, 5), (5, 5))
        assert shape.angle == 0
        assert shape.arrow_polygon[0] == pytest.approx((-15, 5))

    def test_custom_config(self):
        config = GeometryConfig(arrow_size=10, arrow_standoff=0)
        shape = edge_geometry((0, 0), (0, 50), config)
        assert shape.arrow_polygon[0] == pytest.approx((0, 50))
        assert shape.line_end == pytest.approx((0, 50 - arrow_depth(config)))


class TestLabels:
    @pytest.mark.parametrize("node_id, label", [
        ("Thrall-Draenor", "Thrall"),
        ("Jaina-Argent Dawn", "Jaina"),
        ("Velen-Azjol-Nerub", "Velen"),
        ("Solo", "Solo"),
    ])
    def test_node_label(self, node_id, label):
        assert node_label(node_id) == label

    def test_label_box_with_measure(self):
        box = label_box("Thrall-Draenor", (100, 200), measure=lambda text: 40.0)
        assert box.label == "Thrall"
        assert box.width == 56
        assert box.height == 24
        assert box.radius == 4
        assert box.bounds == (72, 188, 128, 212)

    def test_label_box_measures_label_only(self):
        seen = []
        label_box("Anduin-Stormrage", (0, 0), measure=lambda text: seen.append(text) or 10.0)
        assert seen == ["Anduin"]

    def test_label_box_fallback_estimate(self):
        box = label_box("Abc-Realm", (0, 0))
        assert box.width == pytest.approx(estimate_text_width("Abc", 12) + 16)
