import math

import pytest

from course_overprint.errors import MalformedCourseRouteError
from course_overprint.route import (
    build_control_sequence,
    course_distance,
    leg_distance_meters,
    numbered_controls,
    start_rotation,
)
from course_overprint.types import Control, ControlKind, Course


def _controls() -> dict:
    return {
        1: Control(1, ControlKind.START, (0.0, 0.0)),
        2: Control(2, ControlKind.NORMAL, (100.0, 0.0), code="31"),
        3: Control(3, ControlKind.NORMAL, (100.0, 100.0), code="32"),
        4: Control(4, ControlKind.FINISH, (0.0, 100.0)),
    }


def test_build_control_sequence_follows_next_chain() -> None:
    controls = _controls()
    links = {1: 3, 3: 2, 2: 4}

    sequence = build_control_sequence(1, links, controls)

    assert [c.id for c in sequence] == [1, 3, 2, 4]


def test_build_control_sequence_single_control() -> None:
    sequence = build_control_sequence(2, {}, _controls())
    assert [c.id for c in sequence] == [2]


def test_cyclic_route_is_reported() -> None:
    links = {1: 2, 2: 3, 3: 2}
    with pytest.raises(MalformedCourseRouteError, match="loops back"):
        build_control_sequence(1, links, _controls())


def test_self_loop_is_reported() -> None:
    with pytest.raises(MalformedCourseRouteError):
        build_control_sequence(1, {1: 1}, _controls())


def test_dangling_reference_is_reported() -> None:
    with pytest.raises(MalformedCourseRouteError, match="unknown control"):
        build_control_sequence(1, {1: 99}, _controls())


def test_course_and_leg_distances() -> None:
    controls = _controls()
    course = Course("1", "A", controls=[controls[1], controls[2], controls[3], controls[4]])

    assert course_distance(course, 15000) == pytest.approx(4.5)
    assert course_distance(course, 10000) == pytest.approx(3.0)
    assert leg_distance_meters(controls[1], controls[2]) == pytest.approx(1500.0)
    assert leg_distance_meters(controls[1], controls[2], 10000) == pytest.approx(1000.0)


def test_start_rotation_points_apex_to_first_leg() -> None:
    controls = _controls()
    east = Course("1", "A", controls=[controls[1], controls[2]])
    north = Course("2", "B", controls=[controls[1], controls[4]])

    assert start_rotation(east) == pytest.approx(-math.pi / 2)
    assert start_rotation(north) == pytest.approx(0.0)
    assert start_rotation(Course("3", "C", controls=[controls[1]])) == 0.0


def test_numbered_controls_skip_start_finish_and_map_issue() -> None:
    controls = list(_controls().values()) + [Control(5, ControlKind.MAP_ISSUE, (0.0, 0.0))]
    assert [c.id for c in numbered_controls(controls)] == [2, 3]


def test_start_rotation_uses_leg_after_start_control() -> None:
    controls = _controls()
    course = Course(
        "1",
        "A",
        controls=[Control(9, ControlKind.MAP_ISSUE, (0.0, -50.0)), controls[1], controls[2]],
    )

    assert start_rotation(course) == pytest.approx(-math.pi / 2)


def test_start_rotation_without_following_control() -> None:
    controls = _controls()
    assert start_rotation(Course("1", "A", controls=[controls[2], controls[1]])) == 0.0
    assert start_rotation(Course("2", "B", controls=[controls[2], controls[3]])) == 0.0
