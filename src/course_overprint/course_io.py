"""Loading events and courses from YAML documents.

Courses list their controls either directly (``controls: [ids]``) or as a
linked chain of course controls::

    first: 10
    course_controls:
      10: {control: 1, next: 11}
      11: {control: 2}
"""
from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .errors import MalformedCourseRouteError
from .route import build_control_sequence
from .special_objects import bbox_from_locations
from .types import (
    Control,
    ControlKind,
    Course,
    CourseAppearance,
    Event,
    Point,
    PrintArea,
    SpecialObject,
    SpecialObjectKind,
)

log = logging.getLogger(__name__)


def _point(value: Any) -> Point:
    if not isinstance(value, Sequence) or len(value) != 2:
        raise ValueError(f"Expected [x, y], got {value!r}")
    return float(value[0]), float(value[1])


def _optional_point(value: Any) -> Optional[Point]:
    return None if value is None else _point(value)


def parse_control(data: Mapping[str, Any]) -> Control:
    code = data.get("code")
    return Control(
        id=int(data["id"]),
        kind=ControlKind.parse(data.get("kind", "normal")),
        code=None if code is None else str(code),
        coordinates=_point(data["location"]),
        description={str(k): str(v) for k, v in (data.get("description") or {}).items()},
        number_location=_optional_point(data.get("number_location")),
    )


def parse_course_appearance(data: Optional[Mapping[str, Any]]) -> CourseAppearance:
    if not data:
        return CourseAppearance()
    known = {f.name for f in fields(CourseAppearance)}
    unknown = set(data) - known
    if unknown:
        log.warning("Ignoring unknown course appearance keys: %s", ", ".join(sorted(unknown)))
    return CourseAppearance(**{k: v for k, v in data.items() if k in known})


def parse_print_area(data: Optional[Mapping[str, Any]]) -> PrintArea:
    if not data:
        return PrintArea()
    extent = data.get("extent")
    return PrintArea(
        auto=bool(data.get("auto", False)),
        restrict_to_page=bool(data.get("restrict_to_page", False)),
        extent=None if extent is None else tuple(float(v) for v in extent),  # type: ignore[arg-type]
        page_width=float(data.get("page_width", 0.0)),
        page_height=float(data.get("page_height", 0.0)),
        page_margins=float(data.get("page_margins", 0.0)),
    )


def parse_special_object(data: Mapping[str, Any]) -> SpecialObject:
    kind = SpecialObjectKind.parse(data["kind"])
    locations = tuple(_point(p) for p in data.get("locations") or ())
    bbox = data.get("bbox")
    if bbox is not None:
        bbox = tuple(float(v) for v in bbox)
    elif kind == SpecialObjectKind.DESCRIPTIONS:
        bbox = bbox_from_locations(locations)
    attributes = dict(data.get("appearance") or {})
    return SpecialObject(
        kind=kind,
        locations=locations,
        bbox=bbox,  # type: ignore[arg-type]
        id=None if data.get("id") is None else int(data["id"]),
        attributes=attributes,
    )


def _course_controls(data: Mapping[str, Any], controls_by_id: Mapping[int, Control]) -> List[Control]:
    if "first" in data:
        entries = data.get("course_controls") or {}
        links = {}
        by_course_control = {}
        for cc_id, entry in entries.items():
            control = controls_by_id.get(int(entry["control"]))
            if control is None:
                raise MalformedCourseRouteError(
                    f"Course control {cc_id} references unknown control {entry['control']}"
                )
            by_course_control[int(cc_id)] = control
            nxt = entry.get("next")
            links[int(cc_id)] = None if nxt is None else int(nxt)
        return build_control_sequence(int(data["first"]), links, by_course_control)

    result = []
    for control_id in data.get("controls") or ():
        control = controls_by_id.get(int(control_id))
        if control is None:
            raise MalformedCourseRouteError(f"Course {data.get('id')} references unknown control {control_id}")
        result.append(control)
    return result


def parse_event(data: Mapping[str, Any]) -> Event:
    map_scale = float(data["map_scale"])
    controls_by_id: Dict[int, Control] = {}
    for entry in data.get("controls") or ():
        control = parse_control(entry)
        controls_by_id[control.id] = control

    courses: List[Course] = []
    for entry in data.get("courses") or ():
        courses.append(
            Course(
                id=str(entry["id"]),
                name=str(entry.get("name", entry["id"])),
                controls=tuple(_course_controls(entry, controls_by_id)),
                print_scale=float(entry.get("print_scale") or map_scale),
                print_area=parse_print_area(entry.get("print_area")),
                special_objects=[],
                label_kind=str(entry.get("label_kind", "sequence")),
                order=int(entry.get("order", len(courses))),
            )
        )
    courses.sort(key=lambda c: c.order)

    event = Event(
        name=str(data.get("name", "")),
        map_scale=map_scale,
        course_appearance=parse_course_appearance(data.get("course_appearance")),
        courses=courses,
    )

    by_id = {c.id: c for c in courses}
    for entry in data.get("special_objects") or ():
        obj = parse_special_object(entry)
        targets = entry.get("courses", "all")
        course_ids = list(by_id) if targets == "all" else [str(t) for t in targets]
        for course_id in course_ids:
            course = by_id.get(course_id)
            if course is None:
                event.warnings.append(f"No course with id {course_id} found for special object {obj.id}.")
                continue
            course.special_objects = [*course.special_objects, obj]

    for warning in event.warnings:
        log.warning(warning)
    return event


def load_event(path: str | Path) -> Event:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Event file not found: {p}")
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise ValueError(f"Event file {p} must contain a mapping")
    return parse_event(data)
