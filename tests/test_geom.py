import math

import pytest

from course_overprint.geom import (
    LineGeometry,
    PointGeometry,
    add,
    point_to_geometry_distance,
    point_to_segment_distance,
    rotate,
    segment_circle_interval,
)


def test_vector_ops() -> None:
    assert add((1.0, 2.0), (3.0, -1.0)) == (4.0, 1.0)
    x, y = rotate((1.0, 0.0), math.pi / 2)
    assert x == pytest.approx(0.0, abs=1e-12)
    assert y == pytest.approx(1.0)


@pytest.mark.parametrize(
    "point, expected",
    [
        ((5.0, 3.0), 3.0),
        ((-4.0, 3.0), 5.0),
        ((13.0, -4.0), 5.0),
    ],
)
def test_point_to_segment_distance(point, expected) -> None:
    assert point_to_segment_distance(point, (0.0, 0.0), (10.0, 0.0)) == pytest.approx(expected)


def test_point_to_geometry_distance_handles_points_and_polylines() -> None:
    assert point_to_geometry_distance((3.0, 4.0), PointGeometry((0.0, 0.0))) == pytest.approx(5.0)

    line = LineGeometry.from_points([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)])
    assert point_to_geometry_distance((12.0, 5.0), line) == pytest.approx(2.0)
    assert point_to_geometry_distance((5.0, -1.0), line) == pytest.approx(1.0)

    multi = LineGeometry((((0.0, 0.0), (1.0, 0.0)), ((5.0, 0.0), (6.0, 0.0))))
    assert point_to_geometry_distance((4.0, 0.0), multi) == pytest.approx(1.0)


def test_degenerate_segment_is_a_point() -> None:
    assert point_to_segment_distance((3.0, 4.0), (0.0, 0.0), (0.0, 0.0)) == pytest.approx(5.0)
    line = LineGeometry.from_points([(1.0, 1.0), (1.0, 1.0)])
    assert point_to_geometry_distance((1.0, 2.0), line) == pytest.approx(1.0)


def test_segment_circle_interval() -> None:
    interval = segment_circle_interval((0.0, 0.0), (10.0, 0.0), (5.0, 0.0), 1.0)
    assert interval == pytest.approx((0.4, 0.6))

    assert segment_circle_interval((0.0, 0.0), (10.0, 0.0), (5.0, 3.0), 1.0) is None

    clamped = segment_circle_interval((0.0, 0.0), (10.0, 0.0), (0.0, 0.0), 2.0)
    assert clamped == pytest.approx((0.0, 0.2))
