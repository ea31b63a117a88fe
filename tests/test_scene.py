import pytest
from lxml import etree

from course_overprint import scene


def test_path_data_formats_numbers_compactly() -> None:
    assert scene.path_data([(0.0, -0.0), (1.5, 2.0), (1 / 3, 10)], close=True) == (
        "M 0 0 L 1.5 2 L 0.333 10 Z"
    )


def test_create_node_drops_missing_children() -> None:
    node = scene.group([scene.rect(0, 0, 1, 1, "black", "white"), None])
    assert [c.type for c in node.children] == ["rect"]


def test_measure_prefers_width_and_height() -> None:
    assert scene.measure(scene.document([], 200, 125)) == (200.0, 125.0)
    node = scene.create_node("svg", {"width": "40mm", "height": "20mm"})
    assert scene.measure(node) == (40.0, 20.0)
    node = scene.create_node("svg", {"viewBox": "0 0 30 15"})
    assert scene.measure(node) == (30.0, 15.0)
    with pytest.raises(ValueError):
        scene.measure(scene.create_node("svg"))


def test_clone_is_independent() -> None:
    original = scene.group([scene.text("31", 0, 0, "black", 14)])
    copy = scene.clone(original)
    copy.attrs["transform"] = "scale(2)"
    copy.children[0].text = "32"
    assert "transform" not in original.attrs
    assert original.children[0].text == "31"


def test_count_nodes_walks_the_tree() -> None:
    tree = scene.group([scene.group([scene.text("1", 0, 0, "black", 10)]), scene.text("2", 0, 0, "black", 10)])
    assert scene.count_nodes(tree, "text") == 2
    assert scene.count_nodes(tree, "g") == 2


def test_svg_bytes_round_trip_through_lxml() -> None:
    doc = scene.document(
        [scene.group([scene.circle((10.0, -20.0), 250.0, "#A626FF", 35.0)], transform="scale(2)")],
        100.0,
        50.0,
        fill="white",
    )

    data = scene.to_svg_bytes(doc)

    assert data.startswith(b"<?xml")
    root = etree.fromstring(data)
    assert root.get("viewBox") == "0 0 100 50"
    assert root.get("fill") == "white"
    circle = root.find(".//{http://www.w3.org/2000/svg}circle")
    assert circle.get("cx") == "10"
    assert circle.get("cy") == "-20"
    assert circle.get("fill") == "none"

    back = scene.from_element(root)
    assert back.type == "svg"
    assert back.children[0].attrs["transform"] == "scale(2)"
    assert back.children[0].children[0].attrs["r"] == "250"


def test_only_svg_roots_are_serialised() -> None:
    with pytest.raises(ValueError):
        scene.to_svg_bytes(scene.group([]))


def test_text_node_style() -> None:
    node = scene.text("12", 5.0, 6.0, "black", 14.0, "bold")
    assert node.text == "12"
    assert node.attrs["style"] == "font: bold 14px sans-serif;"
    assert node.attrs["text-anchor"] == "middle"
