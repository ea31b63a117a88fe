from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .types import Point


@dataclass(frozen=True)
class PointGeometry:
    coordinates: Point


@dataclass(frozen=True)
class LineGeometry:
    """A polyline, or several when ``parts`` holds more than one."""

    parts: Tuple[Tuple[Point, ...], ...]

    @classmethod
    def from_points(cls, points: Sequence[Point]) -> "LineGeometry":
        return cls((tuple(points),))


Geometry = Union[PointGeometry, LineGeometry]


def add(a: Sequence[float], b: Sequence[float]) -> Point:
    return a[0] + b[0], a[1] + b[1]


def sub(a: Sequence[float], b: Sequence[float]) -> Point:
    return a[0] - b[0], a[1] - b[1]


def mul(a: Sequence[float], f: float) -> Point:
    return a[0] * f, a[1] * f


def rotate(a: Sequence[float], angle: float) -> Point:
    c = math.cos(angle)
    s = math.sin(angle)
    return a[0] * c - a[1] * s, a[0] * s + a[1] * c


def length(a: Sequence[float]) -> float:
    return math.hypot(a[0], a[1])


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def normalize(a: Sequence[float]) -> Point:
    n = length(a)
    if n == 0:
        return 0.0, 0.0
    return a[0] / n, a[1] / n


def point_to_segment_distance(p: Sequence[float], a: Sequence[float], b: Sequence[float]) -> float:
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return distance(p, a)
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / len_sq
    t = min(1.0, max(0.0, t))
    return distance(p, (a[0] + t * dx, a[1] + t * dy))


def point_to_polyline_distance(p: Sequence[float], points: Sequence[Point]) -> float:
    if not points:
        return math.inf
    if len(points) == 1:
        return distance(p, points[0])

    arr = np.asarray(points, dtype=float)
    start = arr[:-1]
    d = arr[1:] - start
    len_sq = np.einsum("ij,ij->i", d, d)
    rel = np.asarray(p, dtype=float) - start
    safe = np.where(len_sq > 0, len_sq, 1.0)
    t = np.clip(np.einsum("ij,ij->i", rel, d) / safe, 0.0, 1.0)
    t = np.where(len_sq > 0, t, 0.0)
    closest = start + d * t[:, None]
    dist = np.linalg.norm(closest - np.asarray(p, dtype=float), axis=1)
    return float(dist.min())


def point_to_geometry_distance(p: Sequence[float], geometry: Geometry) -> float:
    if isinstance(geometry, PointGeometry):
        return distance(p, geometry.coordinates)
    if isinstance(geometry, LineGeometry):
        return min(
            (point_to_polyline_distance(p, part) for part in geometry.parts),
            default=math.inf,
        )
    raise TypeError(f"Unsupported geometry: {geometry!r}")


def segment_circle_interval(
    a: Sequence[float], b: Sequence[float], center: Sequence[float], radius: float
) -> Optional[Tuple[float, float]]:
    """Parameter range ``[t0, t1]`` (clamped to 0..1) of segment ``ab`` inside a disc."""

    dx = b[0] - a[0]
    dy = b[1] - a[1]
    fx = a[0] - center[0]
    fy = a[1] - center[1]
    qa = dx * dx + dy * dy
    if qa == 0:
        return None
    qb = 2 * (fx * dx + fy * dy)
    qc = fx * fx + fy * fy - radius * radius
    disc = qb * qb - 4 * qa * qc
    if disc <= 0:
        return None
    root = math.sqrt(disc)
    t0 = max(0.0, (-qb - root) / (2 * qa))
    t1 = min(1.0, (-qb + root) / (2 * qa))
    if t0 >= t1:
        return None
    return t0, t1


def lerp(a: Sequence[float], b: Sequence[float], t: float) -> Point:
    return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t
