"""Tests for pointer hit-testing and the viewport transform."""

import pytest

from keygraph.builder import rebuild_graph
from keygraph.config import PickerConfig
from keygraph.models import EdgeKind, Graph, GraphEdge, RawEdge
from keygraph.picker import Viewport, distance_to_segment, pick_edge, pick_in_viewport

SIZE = (800, 600)
CENTER = (400, 300)

ZOOMS = [0.1, 0.25, 0.5, 1.0, 2.0, 3.5, 5.0]


def _graph(positions, pairs):
    edges = tuple(GraphEdge(source=a, target=b, kind=EdgeKind.RESIL, labels=(f"{a}{b}",)) for a, b in pairs)
    return Graph(
        target=pairs[-1][1] if pairs else next(iter(positions)),
        nodes=tuple(positions),
        edges=edges,
        positions=positions,
        layers=(tuple(positions),),
    )


def _screen(canvas_point, pan=(0, 0), zoom=1.0):
    return (
        canvas_point[0] * zoom + CENTER[0] + pan[0],
        canvas_point[1] * zoom + CENTER[1] + pan[1],
    )


class TestDistanceToSegment:
    def test_perpendicular(self):
        assert distance_to_segment((5, 3), (0, 0), (10, 0)) == pytest.approx(3)

    def test_clamped_to_start(self):
        assert distance_to_segment((-3, 4), (0, 0), (10, 0)) == pytest.approx(5)

    def test_clamped_to_end(self):
        assert distance_to_segment((13, 4), (0, 0), (10, 0)) == pytest.approx(5)

    def test_zero_length(self):
        assert distance_to_segment((1, 1), (2, 2), (2, 2)) is None


class TestPickEdge:
    @pytest.mark.parametrize("zoom", ZOOMS)
    def test_midpoint_hits_at_every_zoom(self, zoom):
        graph = _graph({"A": (0.0, 0.0), "B": (0.0, 100.0)}, [("A", "B")])
        pan = (35.0, -20.0)
        point = _screen((0, 50), pan, zoom)
        assert pick_edge(point, pan, zoom, graph, SIZE) == graph.edges[0]

    @pytest.mark.parametrize("zoom", ZOOMS)
    def test_apparent_radius_constant_on_screen(self, zoom):
        graph = _graph({"A": (0.0, 0.0), "B": (0.0, 100.0)}, [("A", "B")])
        mid = _screen((0, 50), zoom=zoom)
        assert pick_edge((mid[0] + 9, mid[1]), (0, 0), zoom, graph, SIZE) is not None
        assert pick_edge((mid[0] + 11, mid[1]), (0, 0), zoom, graph, SIZE) is None

    def test_far_point_misses(self):
        graph = _graph({"A": (0.0, 0.0), "B": (0.0, 100.0), "C": (120.0, 100.0)}, [("A", "B"), ("A", "C")])
        assert pick_edge(_screen((-200, -200)), (0, 0), 1.0, graph, SIZE) is None

    def test_first_edge_wins(self):
        # Two overlapping edges; the second is closer but the first is returned
        graph = _graph(
            {"A": (0.0, 0.0), "B": (0.0, 100.0), "C": (4.0, 0.0), "D": (4.0, 100.0)},
            [("A", "B"), ("C", "D")],
        )
        edge = pick_edge(_screen((3, 50)), (0, 0), 1.0, graph, SIZE)
        assert (edge.source, edge.target) == ("A", "B")

    def test_zero_length_segment_skipped(self):
        graph = _graph({"A": (0.0, 0.0), "B": (0.0, 0.0), "C": (0.0, 100.0)}, [("A", "B"), ("A", "C")])
        edge = pick_edge(_screen((0, 0)), (0, 0), 1.0, graph, SIZE)
        assert (edge.source, edge.target) == ("A", "C")

    def test_no_graph(self):
        assert pick_edge((0, 0), (0, 0), 1.0, None, SIZE) is None

    def test_custom_radius(self):
        graph = _graph({"A": (0.0, 0.0), "B": (0.0, 100.0)}, [("A", "B")])
        config = PickerConfig(hit_radius_px=20)
        point = _screen((15, 50))
        assert pick_edge(point, (0, 0), 1.0, graph, SIZE) is None
        assert pick_edge(point, (0, 0), 1.0, graph, SIZE, config) is not None

    def test_on_built_graph(self):
        graph = rebuild_graph("Y-R1", [RawEdge(source="X-R1", target="Y-R1", labels=["111"])], [], False)
        edge = pick_edge(_screen((0, 50)), (0, 0), 1.0, graph, SIZE)
        assert edge.labels == ("111",)


class TestViewport:
    def test_round_trip(self):
        vp = Viewport(width=800, height=600, pan=(12, -7), zoom=2.5)
        canvas = vp.screen_to_canvas((100, 250))
        assert vp.canvas_to_screen(canvas) == pytest.approx((100, 250))

    def test_origin_at_center(self):
        vp = Viewport(width=800, height=600)
        assert vp.screen_to_canvas((400, 300)) == (0, 0)

    def test_wheel_down_zooms_out(self):
        vp = Viewport(width=800, height=600)
        assert vp.zoomed(120).zoom == pytest.approx(0.9)
        assert vp.zoomed(-120).zoom == pytest.approx(1.1)

    def test_zoom_clamped(self):
        vp = Viewport(width=800, height=600, zoom=4.9)
        assert vp.zoomed(-1).zoom == 5.0
        vp = Viewport(width=800, height=600, zoom=0.105)
        assert vp.zoomed(1).zoom == 0.1

    def test_immutable_updates(self):
        vp = Viewport(width=800, height=600)
        moved = vp.drag((10, 10), (50, 70))
        assert moved.pan == (40, 60)
        assert vp.pan == (0.0, 0.0)
        assert moved.reset() == vp

    def test_pick_in_viewport(self):
        graph = _graph({"A": (0.0, 0.0), "B": (0.0, 100.0)}, [("A", "B")])
        vp = Viewport(width=SIZE[0], height=SIZE[1], pan=(10, 10), zoom=2.0)
        assert pick_in_viewport(_screen((0, 50), (10, 10), 2.0), vp, graph) is not None
