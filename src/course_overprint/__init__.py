"""Course overprint and control-description rendering."""
from __future__ import annotations

from .description_sheet import render_control_description_sheet
from .errors import (
    CourseRenderError,
    MalformedCourseRouteError,
    UnknownControlKindError,
    UnknownScaleModeError,
)
from .overprint import render_course, render_event
from .scale import object_scale

__all__ = [
    "CourseRenderError",
    "MalformedCourseRouteError",
    "UnknownControlKindError",
    "UnknownScaleModeError",
    "object_scale",
    "render_control_description_sheet",
    "render_course",
    "render_event",
]
