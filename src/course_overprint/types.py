from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

Point = Tuple[float, float]
BBox = Tuple[float, float, float, float]


class ControlKind(str, Enum):
    START = "start"
    NORMAL = "normal"
    FINISH = "finish"
    CROSSING_POINT = "crossing-point"
    MAP_ISSUE = "map-issue"

    @classmethod
    def parse(cls, value: "str | ControlKind") -> "ControlKind | str":
        """Return the matching member, or the raw tag when it is unknown."""
        try:
            return cls(value)
        except ValueError:
            return str(value)


class SpecialObjectKind(str, Enum):
    WHITE_OUT = "white-out"
    DESCRIPTIONS = "descriptions"
    LINE = "line"

    @classmethod
    def parse(cls, value: "str | SpecialObjectKind") -> "SpecialObjectKind | str":
        try:
            return cls(value)
        except ValueError:
            return str(value)


class ScaleSizes(str, Enum):
    NONE = "None"
    RELATIVE_TO_MAP = "RelativeToMap"
    RELATIVE_TO_15000 = "RelativeTo15000"


NON_NUMBERED_KINDS = (ControlKind.START, ControlKind.FINISH, ControlKind.MAP_ISSUE)


@dataclass(frozen=True)
class Control:
    id: int
    kind: Union[ControlKind, str]
    coordinates: Point
    code: Optional[str] = None
    description: Mapping[str, str] = field(default_factory=dict)
    number_location: Optional[Point] = None

    @property
    def is_numbered(self) -> bool:
        return self.kind not in NON_NUMBERED_KINDS


@dataclass(frozen=True)
class SpecialObject:
    kind: Union[SpecialObjectKind, str]
    locations: Tuple[Point, ...] = ()
    bbox: Optional[BBox] = None
    id: Optional[int] = None
    attributes: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class PrintArea:
    auto: bool = True
    restrict_to_page: bool = True
    extent: Optional[BBox] = None
    page_width: float = 0.0
    page_height: float = 0.0
    page_margins: float = 0.0


@dataclass
class CourseAppearance:
    scale_sizes: str = ScaleSizes.RELATIVE_TO_MAP.value
    scale_sizes_circle_gaps: bool = True
    auto_leg_gap_size: float = 0.0
    blend_purple: bool = True
    control_circle_size_ratio: float = 1.0
    line_width_ratio: float = 1.0
    number_size_ratio: float = 1.0


@dataclass
class Course:
    id: str
    name: str
    controls: Sequence[Control] = ()
    print_scale: float = 15000.0
    print_area: PrintArea = field(default_factory=PrintArea)
    special_objects: Sequence[SpecialObject] = ()
    label_kind: str = "sequence"
    order: int = 0


@dataclass
class Event:
    name: str
    map_scale: float
    course_appearance: CourseAppearance = field(default_factory=CourseAppearance)
    courses: List[Course] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def course(self, course_id: str) -> Course:
        for course in self.courses:
            if course.id == course_id:
                return course
        raise KeyError(f"No course with id {course_id}")


@dataclass
class SceneNode:
    type: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    children: List["SceneNode"] = field(default_factory=list)
    text: Optional[str] = None


@dataclass
class Glyph:
    group: SceneNode
    dimensions: Tuple[float, float]
