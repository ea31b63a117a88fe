"""Leg lines between consecutive controls, trimmed to the control symbols."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import UnknownControlKindError
from .geom import LineGeometry, distance, lerp, segment_circle_interval
from .scale import (
    CONTROL_CIRCLE_OUTSIDE_DIAMETER,
    FINISH_CIRCLE_RADII,
    OVERPRINT_LINE_WIDTH,
    START_TRIANGLE_RADIUS,
)
from .types import Control, ControlKind, CourseAppearance, Point

log = logging.getLogger(__name__)

_MIN_PART_LENGTH = 1e-6


@dataclass(frozen=True)
class Leg:
    from_control: Control
    to_control: Control
    parts: Tuple[Tuple[Point, ...], ...]

    @property
    def geometry(self) -> LineGeometry:
        return LineGeometry(self.parts)


def symbol_radius(control: Control, scale: float, circle_ratio: float = 1.0) -> float:
    """Outer radius of the symbol drawn for *control*, in ground units."""

    half_line = OVERPRINT_LINE_WIDTH / 2 * scale
    kind = control.kind
    if kind in (ControlKind.NORMAL, ControlKind.CROSSING_POINT):
        return CONTROL_CIRCLE_OUTSIDE_DIAMETER / 2 * scale * circle_ratio + half_line
    if kind in (ControlKind.START, ControlKind.MAP_ISSUE):
        return START_TRIANGLE_RADIUS * scale + half_line
    if kind == ControlKind.FINISH:
        return FINISH_CIRCLE_RADII[-1] * scale * circle_ratio + half_line
    raise UnknownControlKindError(kind)


def _subtract_intervals(
    intervals: Sequence[Tuple[float, float]]
) -> List[Tuple[float, float]]:
    """Complement of the union of *intervals* within ``[0, 1]``."""
    kept: List[Tuple[float, float]] = []
    cursor = 0.0
    for t0, t1 in sorted(intervals):
        if t0 > cursor:
            kept.append((cursor, t0))
        cursor = max(cursor, t1)
    if cursor < 1.0:
        kept.append((cursor, 1.0))
    return kept


def _leg_parts(
    start: Point,
    end: Point,
    others: Sequence[Control],
    gap: float,
    scale: float,
    circle_ratio: float,
) -> Tuple[Tuple[Point, ...], ...]:
    if gap <= 0:
        return ((start, end),)

    cuts: List[Tuple[float, float]] = []
    for other in others:
        radius = symbol_radius(other, scale, circle_ratio) + gap
        interval = segment_circle_interval(start, end, other.coordinates, radius)
        if interval is not None:
            log.debug("Leg gap around control %s at t=%.3f..%.3f", other.id, *interval)
            cuts.append(interval)

    parts = []
    for t0, t1 in _subtract_intervals(cuts):
        a = lerp(start, end, t0)
        b = lerp(start, end, t1)
        if distance(a, b) > _MIN_PART_LENGTH:
            parts.append((a, b))
    return tuple(parts)


def build_leg(
    a: Control,
    b: Control,
    others: Sequence[Control],
    scale: float,
    appearance: Optional[CourseAppearance] = None,
) -> Leg:
    appearance = appearance or CourseAppearance()
    ratio = appearance.control_circle_size_ratio
    length = distance(a.coordinates, b.coordinates)
    ra = symbol_radius(a, scale, ratio)
    rb = symbol_radius(b, scale, ratio)
    if length <= ra + rb:
        log.debug("Controls %s and %s overlap, leg not drawn", a.id, b.id)
        return Leg(a, b, ())

    start = lerp(a.coordinates, b.coordinates, ra / length)
    end = lerp(a.coordinates, b.coordinates, 1 - rb / length)
    gap = appearance.auto_leg_gap_size * scale
    return Leg(a, b, _leg_parts(start, end, others, gap, scale, ratio))


def build_legs(
    controls: Sequence[Control],
    scale: float,
    appearance: Optional[CourseAppearance] = None,
) -> List[Leg]:
    legs: List[Leg] = []
    for a, b in zip(controls, controls[1:]):
        others = [c for c in controls if c is not a and c is not b]
        legs.append(build_leg(a, b, others, scale, appearance))
    return legs
