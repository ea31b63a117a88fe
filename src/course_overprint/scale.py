"""Unit algebra between ground coordinates, ISOM symbol sizes and drawing units."""
from __future__ import annotations

import math
from typing import Sequence, Tuple

from .errors import UnknownScaleModeError
from .types import Point, ScaleSizes

# Units in mm, from ISOM-2017
CONTROL_CIRCLE_OUTSIDE_DIAMETER = 5.0
OVERPRINT_LINE_WIDTH = 0.35
CONTROL_NUMBER_CIRCLE_DISTANCE = 1.825
FINISH_CIRCLE_RADII = (2.0, 3.0)
START_TRIANGLE: Tuple[Point, ...] = (
    (0.0, 3.464),
    (3.0, -1.732),
    (-3.0, -1.732),
    (0.0, 3.464),
)
START_TRIANGLE_RADIUS = math.sqrt(6 * 6 + 3 * 3) / 2

NUMBER_CLEARANCE = 1.2
NUMBER_FONT_SIZE = 600.0
DEFAULT_NUMBER_ANGLE = math.pi / 6
NUMBER_ANGLE_STEP = math.pi / 16
NUMBER_ANGLE_SAMPLES = 32
NEARBY_FACTOR = 4.0

REFERENCE_SCALE = 15000.0
DRAWING_UNITS_PER_MM = 100.0


def object_scale(mode: str, map_scale: float, print_scale: float) -> float:
    if mode == ScaleSizes.NONE:
        return print_scale / map_scale
    if mode == ScaleSizes.RELATIVE_TO_MAP:
        return 1.0
    if mode == ScaleSizes.RELATIVE_TO_15000:
        return REFERENCE_SCALE / map_scale
    raise UnknownScaleModeError(mode)


def to_drawing(point: Sequence[float]) -> Tuple[float, float]:
    x, y = point[0], point[1]
    return x * DRAWING_UNITS_PER_MM, -y * DRAWING_UNITS_PER_MM


def stroke_width(scale: float = 1.0) -> float:
    return OVERPRINT_LINE_WIDTH * DRAWING_UNITS_PER_MM * scale


def number_radius(scale: float, circle_ratio: float = 1.0) -> float:
    """Distance from a control centre to its number anchor, clearance included."""

    base = (
        CONTROL_CIRCLE_OUTSIDE_DIAMETER / 2
        + OVERPRINT_LINE_WIDTH
        + CONTROL_NUMBER_CIRCLE_DISTANCE
    )
    return base * scale * circle_ratio + NUMBER_CLEARANCE


def number_angles() -> Tuple[float, ...]:
    return tuple(
        DEFAULT_NUMBER_ANGLE + k * NUMBER_ANGLE_STEP for k in range(NUMBER_ANGLE_SAMPLES)
    )
