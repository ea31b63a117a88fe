from __future__ import annotations


class CourseRenderError(ValueError):
    """Base class for data-integrity faults that abort a render."""


class UnknownControlKindError(CourseRenderError):
    def __init__(self, kind: object) -> None:
        super().__init__(f'Unknown control kind "{kind}".')
        self.kind = kind


class UnknownScaleModeError(CourseRenderError):
    def __init__(self, mode: object) -> None:
        super().__init__(f'Unknown scaleSizes mode "{mode}".')
        self.mode = mode


class MalformedCourseRouteError(CourseRenderError):
    """Raised when a course's ``next`` chain loops or points nowhere."""
