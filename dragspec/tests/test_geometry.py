"""
Tests for points, metrics and projection.
"""

import math

import pytest

from ..engine_core.geometry import (
    METRICS,
    Point,
    chebyshev,
    euclidean,
    horizontal,
    manhattan,
    project_onto_polyline,
    scaled,
    vertical,
)


class TestMetrics:

    def test_metric_values(self):
        a, b = Point(0, 0), Point(3, 4)
        assert euclidean(a, b) == 5
        assert manhattan(a, b) == 7
        assert chebyshev(a, b) == 4
        assert horizontal(a, b) == 3
        assert vertical(a, b) == 4

    def test_scaled(self):
        assert scaled(euclidean, 2.0)(Point(0, 0), Point(3, 4)) == 10

    def test_registry(self):
        assert set(METRICS) == {"euclidean", "manhattan", "chebyshev", "horizontal", "vertical"}

    def test_point_coercion(self):
        assert Point.of((1, 2)) == Point(1.0, 2.0)
        p = Point(1, 1)
        assert Point.of(p) is p


class TestProjection:

    def test_projects_inside_segment(self):
        proj = project_onto_polyline([Point(0, 0), Point(10, 0)], Point(4, 3))
        assert proj.point == Point(4, 0)
        assert proj.segment == 0
        assert proj.t == pytest.approx(0.4)

    def test_clamps_to_ends(self):
        proj = project_onto_polyline([Point(0, 0), Point(10, 0)], Point(-5, 1))
        assert proj.point == Point(0, 0)
        assert proj.t == 0.0

    def test_picks_closest_segment(self):
        points = [Point(0, 0), Point(10, 0), Point(10, 10)]
        proj = project_onto_polyline(points, Point(12, 6))
        assert proj.segment == 1
        assert proj.point == Point(10, 6)
        assert math.isclose(proj.t, 0.6)

    def test_single_point(self):
        proj = project_onto_polyline([Point(2, 2)], Point(9, 9))
        assert proj.point == Point(2, 2)
        assert proj.segment == 0

    def test_empty_polyline(self):
        with pytest.raises(ValueError):
            project_onto_polyline([], Point(0, 0))
