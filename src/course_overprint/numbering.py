"""Control number placement.

Each numbered control gets a label anchor on a circle around it. Candidates
are sampled every pi/16 starting at pi/6 and the one farthest from the
surrounding course objects wins. Placed anchors become objects themselves,
so earlier controls in route order influence later ones.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .geom import Geometry, PointGeometry, add, point_to_geometry_distance
from .route import numbered_controls
from .scale import NEARBY_FACTOR, number_angles, number_radius
from .types import Control, Point

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NumberLabel:
    control: Control
    text: str
    location: Point


def label_text(control: Control, index: int, label_kind: Optional[str]) -> str:
    if label_kind == "sequence":
        return str(index + 1)
    if label_kind == "code":
        return control.code or ""
    return ""


def nearby_objects(center: Point, objects: Sequence[Geometry], radius: float) -> List[Geometry]:
    limit = radius * NEARBY_FACTOR
    nearby = []
    for obj in objects:
        d = point_to_geometry_distance(center, obj)
        if 0 < d <= limit:
            nearby.append(obj)
    return nearby


def best_text_location(center: Point, radius: float, objects: Sequence[Geometry]) -> Point:
    nearby = nearby_objects(center, objects, radius)

    candidates = [
        add(center, (radius * math.cos(angle), radius * math.sin(angle))) for angle in number_angles()
    ]
    best_point = candidates[0]
    best_distance = -1.0
    for candidate in candidates:
        clearance = min(
            (point_to_geometry_distance(candidate, o) for o in nearby),
            default=math.inf,
        )
        if clearance > best_distance:
            best_point = candidate
            best_distance = clearance
    return best_point


def place_number(control: Control, objects: Sequence[Geometry], radius: float) -> Point:
    if control.number_location is not None:
        return add(control.coordinates, control.number_location)
    return best_text_location(control.coordinates, radius, objects)


def place_numbers(
    controls: Sequence[Control],
    course_objects: Iterable[Geometry],
    scale: float,
    label_kind: Optional[str] = "sequence",
    circle_ratio: float = 1.0,
) -> Tuple[List[NumberLabel], List[Geometry]]:
    """Place labels for all numbered controls in route order.

    Returns the labels and the final object sequence (controls, course objects
    and every placed anchor, in registration order).
    """

    objects: List[Geometry] = [PointGeometry(c.coordinates) for c in controls]
    objects.extend(course_objects)
    radius = number_radius(scale, circle_ratio)

    labels: List[NumberLabel] = []
    numbered = numbered_controls(controls)
    for index, control in enumerate(numbered):
        location = place_number(control, objects, radius)
        objects.append(PointGeometry(location))
        labels.append(NumberLabel(control, label_text(control, index, label_kind), location))
        log.debug("Number for control %s placed at (%.2f, %.2f)", control.id, *location)
    return labels, objects
