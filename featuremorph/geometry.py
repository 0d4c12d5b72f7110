from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

PointLike = Union["Vec2", np.ndarray]


@dataclass(frozen=True)
class Vec2:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vec2":
        return Vec2(self.x / scalar, self.y / scalar)

    def dot(self, other: "Vec2") -> float:
        return self.x * other.x + self.y * other.y

    def perp(self) -> "Vec2":
        """Rotate by 90 degrees without normalizing."""
        return Vec2(-self.y, self.x)

    def length2(self) -> float:
        return self.x * self.x + self.y * self.y

    def length(self) -> float:
        return math.sqrt(self.length2())

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)


def _components(point: PointLike) -> Tuple:
    if isinstance(point, Vec2):
        return point.x, point.y
    arr = np.asarray(point, dtype=np.float64)
    if arr.shape[-1] != 2:
        raise ValueError(f"Expected (..., 2) coordinates, got shape {arr.shape}")
    return arr[..., 0], arr[..., 1]


def _scalar_or_array(value):
    if np.ndim(value) == 0:
        return float(value)
    return value


@dataclass
class LineSegment:
    """Directed feature segment from ``start`` to ``end``.

    Point queries take either a single :class:`Vec2` or an array of shape
    ``(..., 2)`` holding (x, y) pairs and return a float or an array of
    shape ``(...)`` accordingly.
    """

    start: Vec2
    end: Vec2

    def endpoint(self, index: int) -> Vec2:
        if index == 0:
            return self.start
        if index == 1:
            return self.end
        raise IndexError(f"Segment endpoint index out of range: {index}")

    def set_endpoint(self, index: int, point: Vec2) -> None:
        if index == 0:
            self.start = point
        elif index == 1:
            self.end = point
        else:
            raise IndexError(f"Segment endpoint index out of range: {index}")

    def set_endpoints(self, start: Vec2, end: Vec2) -> None:
        self.start = start
        self.end = end

    def direction(self) -> Vec2:
        return self.end - self.start

    def perp(self) -> Vec2:
        return self.direction().perp()

    def length2(self) -> float:
        return self.direction().length2()

    def length(self) -> float:
        return math.sqrt(self.length2())

    def line_parameter(self, point: PointLike):
        """Fraction along the infinite line where ``point`` projects (0 at start, 1 at end).

        A zero-length segment yields NaN rather than raising.
        """
        px, py = _components(point)
        d = self.direction()
        with np.errstate(divide="ignore", invalid="ignore"):
            u = (d.x * (px - self.start.x) + d.y * (py - self.start.y)) / np.float64(self.length2())
        return _scalar_or_array(u)

    def signed_line_distance(self, point: PointLike):
        px, py = _components(point)
        n = self.perp()
        with np.errstate(divide="ignore", invalid="ignore"):
            v = ((px - self.start.x) * n.x + (py - self.start.y) * n.y) / np.float64(self.length())
        return _scalar_or_array(v)

    def segment_distance(self, point: PointLike, u=None, v=None):
        """Unsigned distance of ``point`` from the segment.

        ``u`` and ``v`` are the precomputed line parameter and signed line
        distance; they are evaluated here when omitted. Points projecting
        past either end are measured against ``start``.
        """
        if u is None:
            u = self.line_parameter(point)
        if v is None:
            v = self.signed_line_distance(point)
        px, py = _components(point)
        start_distance = np.hypot(px - self.start.x, py - self.start.y)
        with np.errstate(invalid="ignore"):
            outside = np.logical_or(np.less(u, 0.0), np.greater(u, 1.0))
        return _scalar_or_array(np.where(outside, start_distance, np.abs(v)))

    def lerp(self, target: "LineSegment", t: float) -> "LineSegment":
        return LineSegment(
            (1 - t) * self.start + t * target.start,
            (1 - t) * self.end + t * target.end,
        )
