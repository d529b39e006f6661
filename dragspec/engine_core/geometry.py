"""
Geometry - Screen points, distance metrics and polyline projection.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Sequence
import math


@dataclass(frozen=True)
class Point:
    """A point in screen space."""
    x: float
    y: float

    @classmethod
    def of(cls, value: Point | Sequence[float]) -> Point:
        """Coerce an (x, y) pair into a Point."""
        if isinstance(value, Point):
            return value
        x, y = value
        return cls(float(x), float(y))

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    def dot(self, other: Point) -> float:
        return self.x * other.x + self.y * other.y

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def lerp(self, other: Point, t: float) -> Point:
        return Point(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


Metric = Callable[[Point, Point], float]


def euclidean(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def manhattan(a: Point, b: Point) -> float:
    return abs(a.x - b.x) + abs(a.y - b.y)


def chebyshev(a: Point, b: Point) -> float:
    return max(abs(a.x - b.x), abs(a.y - b.y))


def horizontal(a: Point, b: Point) -> float:
    """Distance along x only (vertical offset is ignored)."""
    return abs(a.x - b.x)


def vertical(a: Point, b: Point) -> float:
    """Distance along y only (horizontal offset is ignored)."""
    return abs(a.y - b.y)


def scaled(metric: Metric, factor: float) -> Metric:
    """A metric whose distances are multiplied by factor."""
    def _scaled(a: Point, b: Point) -> float:
        return metric(a, b) * factor
    return _scaled


METRICS: dict[str, Metric] = {
    "euclidean": euclidean,
    "manhattan": manhattan,
    "chebyshev": chebyshev,
    "horizontal": horizontal,
    "vertical": vertical,
}


@dataclass(frozen=True)
class Projection:
    """
    Closest point on a polyline.

    segment is the index of the first vertex of the segment the point
    falls on, t its parameter along that segment (0..1). A single-vertex
    polyline projects to segment 0, t 0.
    """
    point: Point
    segment: int
    t: float


def project_onto_segment(a: Point, b: Point, p: Point) -> tuple[Point, float]:
    ab = b - a
    denom = ab.dot(ab)
    if denom == 0:
        return a, 0.0
    t = min(1.0, max(0.0, (p - a).dot(ab) / denom))
    return a.lerp(b, t), t


def project_onto_polyline(points: Sequence[Point], p: Point) -> Projection:
    """Project p onto the polyline through points (earliest segment wins ties)."""
    if not points:
        raise ValueError("cannot project onto an empty polyline")
    if len(points) == 1:
        return Projection(point=points[0], segment=0, t=0.0)

    best: Projection | None = None
    best_dist = math.inf
    for i in range(len(points) - 1):
        projected, t = project_onto_segment(points[i], points[i + 1], p)
        dist = euclidean(projected, p)
        if dist < best_dist:
            best = Projection(point=projected, segment=i, t=t)
            best_dist = dist
    return best
