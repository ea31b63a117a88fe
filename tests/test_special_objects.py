import pytest

from course_overprint import scene
from course_overprint.special_objects import (
    bbox_from_locations,
    composite_order,
    composite_special_objects,
    get_control_description_extent,
    line_geometries,
    place_description_sheet,
)
from course_overprint.types import SpecialObject, SpecialObjectKind


def _sheet(width: float = 200.0, height: float = 125.0):
    body = scene.group([scene.rect(0, 0, width, height, "black", "white")])
    return scene.document([body], width, height)


def _descriptions(bbox=(10.0, 40.0, 12.0, 50.0)) -> SpecialObject:
    return SpecialObject(SpecialObjectKind.DESCRIPTIONS, bbox=bbox, id=9)


def test_composite_order_moves_descriptions_last() -> None:
    line = SpecialObject(SpecialObjectKind.LINE, ((0.0, 0.0), (1.0, 1.0)), id=1)
    white_out = SpecialObject(SpecialObjectKind.WHITE_OUT, ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0)), id=2)
    image = SpecialObject("image", id=3)

    ordered = composite_order([_descriptions(), line, image, white_out])

    assert [o.id for o in ordered] == [1, 2, 9]


def test_description_extent_keeps_sheet_aspect() -> None:
    extent = get_control_description_extent(_descriptions(), _sheet())
    assert extent == pytest.approx((10.0, 30.0, 26.0, 40.0))


def test_description_extent_requires_bbox() -> None:
    with pytest.raises(ValueError):
        get_control_description_extent(_descriptions(bbox=None), _sheet())


def test_description_sheet_is_translated_and_scaled() -> None:
    placed = place_description_sheet(_descriptions(), _sheet())

    assert placed is not None
    assert placed.type == "g"
    assert placed.attrs["transform"] == "translate(1000, -4000) scale(8)"
    assert placed.children[0].type == "rect"


def test_description_without_bbox_is_skipped() -> None:
    assert place_description_sheet(_descriptions(bbox=None), _sheet()) is None


def test_composite_special_objects_paints_in_order() -> None:
    line = SpecialObject(SpecialObjectKind.LINE, ((0.0, 0.0), (1.0, 1.0)), id=1)
    white_out = SpecialObject(SpecialObjectKind.WHITE_OUT, ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0)), id=2)

    nodes = composite_special_objects(
        [_descriptions(), white_out, line],
        color="#A626FF",
        description_document=_sheet(),
    )

    assert [n.type for n in nodes] == ["path", "path", "g"]
    assert nodes[0].attrs["fill"] == "white"
    assert nodes[0].attrs["d"].endswith("Z")
    assert nodes[1].attrs["stroke"] == "#A626FF"
    assert nodes[1].attrs["stroke-width"] == pytest.approx(35.0)
    assert nodes[1].attrs["d"] == "M 0 0 L 100 -100"


def test_composite_skips_descriptions_without_sheet_and_degenerate_shapes() -> None:
    short_line = SpecialObject(SpecialObjectKind.LINE, ((0.0, 0.0),), id=1)
    tiny_white_out = SpecialObject(SpecialObjectKind.WHITE_OUT, ((0.0, 0.0), (1.0, 0.0)), id=2)

    nodes = composite_special_objects([_descriptions(), short_line, tiny_white_out], color="black")

    assert nodes == []


def test_line_geometries_and_bbox_helpers() -> None:
    objects = [
        SpecialObject(SpecialObjectKind.LINE, ((0.0, 0.0), (3.0, 4.0))),
        SpecialObject(SpecialObjectKind.WHITE_OUT, ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0))),
    ]
    geometries = line_geometries(objects)
    assert len(geometries) == 1
    assert geometries[0].parts == (((0.0, 0.0), (3.0, 4.0)),)

    assert bbox_from_locations([(5.0, 1.0), (2.0, 7.0)]) == (2.0, 1.0, 5.0, 7.0)
    assert bbox_from_locations([(5.0, 1.0)]) is None
