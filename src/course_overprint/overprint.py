"""Course overprint assembly."""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from . import scene
from .config import section
from .description_sheet import render_control_description_sheet
from .errors import UnknownControlKindError
from .geom import Geometry, add, mul, rotate
from .glyphs import GlyphSource
from .legs import Leg, build_legs
from .metrics import Timer, count
from .numbering import NumberLabel, place_numbers
from .route import start_rotation
from .scale import (
    CONTROL_CIRCLE_OUTSIDE_DIAMETER,
    DRAWING_UNITS_PER_MM,
    FINISH_CIRCLE_RADII,
    NUMBER_FONT_SIZE,
    START_TRIANGLE,
    object_scale,
    stroke_width,
    to_drawing,
)
from .special_objects import composite_special_objects, line_geometries
from .types import (
    Control,
    ControlKind,
    Course,
    CourseAppearance,
    Event,
    SceneNode,
    SpecialObjectKind,
)

log = logging.getLogger(__name__)


class _SymbolPainter:
    def __init__(self, course: Course, appearance: CourseAppearance, scale: float, color: str) -> None:
        self.scale = scale
        self.color = color
        self.circle_ratio = appearance.control_circle_size_ratio
        self.line_width = stroke_width(scale * appearance.line_width_ratio)
        self.rotation = start_rotation(course)

    def _triangle(self, control: Control, rotation: float) -> SceneNode:
        points = [
            to_drawing(add(rotate(mul(p, self.scale), rotation), control.coordinates))
            for p in START_TRIANGLE
        ]
        return scene.lines(points, True, self.color, None, self.line_width)

    def _circle(self, control: Control, radius_mm: float) -> SceneNode:
        r = radius_mm * DRAWING_UNITS_PER_MM * self.scale * self.circle_ratio
        return scene.circle(to_drawing(control.coordinates), r, self.color, self.line_width)

    def _cross(self, control: Control) -> SceneNode:
        arm = CONTROL_CIRCLE_OUTSIDE_DIAMETER / 2 * self.scale * self.circle_ratio
        cx, cy = control.coordinates
        strokes = [
            scene.lines(
                [to_drawing((cx - arm, cy + sign * arm)), to_drawing((cx + arm, cy - sign * arm))],
                False,
                self.color,
                None,
                self.line_width,
            )
            for sign in (1, -1)
        ]
        return scene.group(strokes)

    def paint(self, control: Control) -> SceneNode:
        kind = control.kind
        if kind == ControlKind.START:
            return self._triangle(control, self.rotation)
        if kind == ControlKind.NORMAL:
            return self._circle(control, CONTROL_CIRCLE_OUTSIDE_DIAMETER / 2)
        if kind == ControlKind.FINISH:
            return scene.group([self._circle(control, r) for r in FINISH_CIRCLE_RADII])
        if kind == ControlKind.CROSSING_POINT:
            return self._cross(control)
        if kind == ControlKind.MAP_ISSUE:
            return self._triangle(control, 0.0)
        raise UnknownControlKindError(kind)


def leg_nodes(legs: Sequence[Leg], color: str, width: float) -> List[SceneNode]:
    nodes = []
    for leg in legs:
        for part in leg.parts:
            nodes.append(scene.lines([to_drawing(p) for p in part], False, color, None, width))
    return nodes


def label_nodes(labels: Sequence[NumberLabel], color: str, font_size: float) -> List[SceneNode]:
    nodes = []
    for label in labels:
        x, y = to_drawing(label.location)
        nodes.append(scene.text(label.text, x, y, color, font_size))
    return nodes


async def render_course(
    course: Course,
    course_appearance: CourseAppearance,
    event_name: str,
    map_scale: float,
    glyphs: Optional[GlyphSource] = None,
    cfg: Optional[Mapping[str, Any]] = None,
) -> SceneNode:
    """Build the overprint group for *course*.

    Children are, in order: control symbols, leg lines, number labels and
    special objects (the description block, if any, last).
    """

    overprint_cfg = section(cfg, "overprint")
    color = str(overprint_cfg["color"])
    controls = list(course.controls)
    scale = object_scale(course_appearance.scale_sizes, map_scale, course.print_scale)
    log.debug("Rendering course %s with %d controls, object scale %.4f", course.name, len(controls), scale)

    painter = _SymbolPainter(course, course_appearance, scale, color)
    symbols = [painter.paint(c) for c in controls]

    with Timer("render.legs", logger=log):
        legs = build_legs(controls, scale, course_appearance)

    with Timer("render.numbers", logger=log):
        course_objects: List[Geometry] = [leg.geometry for leg in legs if leg.parts]
        course_objects.extend(line_geometries(course.special_objects))
        labels, _ = place_numbers(
            controls,
            course_objects,
            scale,
            course.label_kind,
            course_appearance.control_circle_size_ratio,
        )

    with Timer("render.specials", logger=log):
        description_document = None
        if any(o.kind == SpecialObjectKind.DESCRIPTIONS for o in course.special_objects):
            description_document = await render_control_description_sheet(event_name, course, glyphs, cfg)
        specials = composite_special_objects(
            course.special_objects,
            color=color,
            scale=scale,
            line_width_ratio=course_appearance.line_width_ratio,
            white_out_fill=str(overprint_cfg["white_out_fill"]),
            description_document=description_document,
        )

    font_size = NUMBER_FONT_SIZE * scale * course_appearance.number_size_ratio
    count("render.controls", len(symbols))
    count("render.legs", sum(len(leg.parts) for leg in legs))
    count("render.labels", len(labels))
    return scene.group(
        [
            *symbols,
            *leg_nodes(legs, color, painter.line_width),
            *label_nodes(labels, color, font_size),
            *specials,
        ]
    )


async def render_event(
    event: Event,
    course_id: Optional[str] = None,
    glyphs: Optional[GlyphSource] = None,
    cfg: Optional[Mapping[str, Any]] = None,
) -> SceneNode:
    if not event.courses:
        raise ValueError(f"Event {event.name!r} has no courses")
    course = event.course(course_id) if course_id is not None else event.courses[0]
    return await render_course(course, event.course_appearance, event.name, event.map_scale, glyphs, cfg)
