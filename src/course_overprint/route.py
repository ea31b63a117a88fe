from __future__ import annotations

import logging
import math
from typing import Hashable, List, Mapping, Optional, Sequence

from .errors import MalformedCourseRouteError
from .geom import distance
from .scale import REFERENCE_SCALE
from .types import Control, ControlKind, Course

log = logging.getLogger(__name__)


def build_control_sequence(
    first: Hashable,
    links: Mapping[Hashable, Optional[Hashable]],
    controls_by_id: Mapping[Hashable, Control],
) -> List[Control]:
    """Follow the ``next`` chain from *first* and return the controls in route order.

    *links* maps a course-control id to the id that follows it (``None`` or
    missing ends the route). Course-control ids and control ids are the same
    key space here; callers translating from ppen-style course-control records
    resolve that mapping beforehand.
    """

    sequence: List[Control] = []
    visited = set()
    current: Optional[Hashable] = first
    while current is not None:
        if current in visited:
            raise MalformedCourseRouteError(
                f"Course route loops back to control {current!r} after {len(sequence)} controls"
            )
        visited.add(current)
        control = controls_by_id.get(current)
        if control is None:
            raise MalformedCourseRouteError(f"Course route references unknown control {current!r}")
        sequence.append(control)
        current = links.get(current)
    log.debug("Route with %d controls starting at %r", len(sequence), first)
    return sequence


def control_distance(a: Control, b: Control) -> float:
    return distance(a.coordinates, b.coordinates)


def course_length(course: Course) -> float:
    controls = course.controls
    return sum(control_distance(a, b) for a, b in zip(controls, controls[1:]))


def course_distance(course: Course, scale: float) -> float:
    """Course length in kilometres at *scale*."""
    return course_length(course) / 1000 * scale / 1000


def leg_distance_meters(previous: Control, control: Control, scale: float = REFERENCE_SCALE) -> float:
    return control_distance(previous, control) / 1000 * scale


def start_rotation(course: Course) -> float:
    """Rotation of the start triangle towards the control after the first start."""

    controls = list(course.controls)
    index = next((i for i, c in enumerate(controls) if c.kind == ControlKind.START), None)
    if index is None or index + 1 >= len(controls):
        return 0.0
    (x0, y0), (x1, y1) = controls[index].coordinates, controls[index + 1].coordinates
    if x0 == x1 and y0 == y1:
        return 0.0
    # the triangle apex points along +y before rotation
    return math.atan2(y1 - y0, x1 - x0) - math.pi / 2


def numbered_controls(controls: Sequence[Control]) -> List[Control]:
    return [c for c in controls if c.is_numbered]
