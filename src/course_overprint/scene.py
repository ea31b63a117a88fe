"""Scene graph construction and SVG materialization."""
from __future__ import annotations

import copy
import re
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple

from lxml import etree

from .types import SceneNode

SVG_NS = "http://www.w3.org/2000/svg"

_FLOAT_RE = re.compile(r"[-+]?(?:\d*\.\d+|\d+)(?:[eE][-+]?\d+)?")


def create_node(
    type: str,
    attrs: Optional[Mapping[str, Any]] = None,
    children: Optional[Sequence[SceneNode]] = None,
    text: Optional[str] = None,
) -> SceneNode:
    return SceneNode(type, dict(attrs or {}), [c for c in (children or []) if c is not None], text)


def circle(center: Sequence[float], r: float, stroke: str, stroke_width: float) -> SceneNode:
    return create_node(
        "circle",
        {
            "cx": center[0],
            "cy": center[1],
            "r": r,
            "stroke": stroke,
            "stroke-width": stroke_width,
            "fill": "none",
        },
    )


def path_data(coordinates: Sequence[Sequence[float]], close: bool = False) -> str:
    cmds = [f"{'L' if i else 'M'} {fmt_number(c[0])} {fmt_number(c[1])}" for i, c in enumerate(coordinates)]
    if close:
        cmds.append("Z")
    return " ".join(cmds)


def lines(
    coordinates: Sequence[Sequence[float]],
    close: bool,
    stroke: Optional[str],
    fill: Optional[str],
    stroke_width: float,
) -> SceneNode:
    return create_node(
        "path",
        {
            "d": path_data(coordinates, close),
            "stroke": stroke or "none",
            "fill": fill or "none",
            "stroke-width": stroke_width,
        },
    )


def text(
    content: str,
    x: float,
    y: float,
    fill: str,
    font_size: float,
    font_style: str = "normal",
    anchor: str = "middle",
) -> SceneNode:
    return create_node(
        "text",
        {
            "x": x,
            "y": y,
            "fill": fill,
            "style": f"font: {font_style} {fmt_number(font_size)}px sans-serif;",
            "text-anchor": anchor,
        },
        text=content,
    )


def rect(x: float, y: float, width: float, height: float, stroke: str, fill: str) -> SceneNode:
    return create_node(
        "rect",
        {"x": x, "y": y, "width": width, "height": height, "stroke": stroke, "fill": fill},
    )


def group(children: Sequence[SceneNode], **attrs: Any) -> SceneNode:
    return create_node("g", attrs, children)


def clone(node: SceneNode) -> SceneNode:
    return copy.deepcopy(node)


def iter_nodes(node: SceneNode) -> Iterator[SceneNode]:
    yield node
    for child in node.children:
        yield from iter_nodes(child)


def count_nodes(node: SceneNode, type: str) -> int:
    return sum(1 for n in iter_nodes(node) if n.type == type)


def _parse_length(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_RE.match(str(value).strip())
    if not match:
        return None
    return float(match.group(0))


def measure(node: SceneNode) -> Tuple[float, float]:
    width = _parse_length(node.attrs.get("width"))
    height = _parse_length(node.attrs.get("height"))
    if width is None or height is None:
        view_box = node.attrs.get("viewBox") or node.attrs.get("viewbox")
        if view_box:
            parts = [float(p) for p in _FLOAT_RE.findall(str(view_box))]
            if len(parts) == 4:
                return parts[2], parts[3]
        raise ValueError(f"Cannot measure <{node.type}> without width/height or viewBox")
    return width, height


def fmt_number(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def to_element(node: SceneNode, parent: Optional[etree._Element] = None) -> etree._Element:
    tag = f"{{{SVG_NS}}}{node.type}"
    attrs = {k: fmt_number(v) for k, v in node.attrs.items() if v is not None}
    if parent is None:
        element = etree.Element(tag, nsmap={None: SVG_NS})
    else:
        element = etree.SubElement(parent, tag)
    for key, value in attrs.items():
        element.set(key, value)
    if node.text is not None:
        element.text = node.text
    for child in node.children:
        to_element(child, element)
    return element


def to_svg_bytes(node: SceneNode) -> bytes:
    if node.type != "svg":
        raise ValueError("Only <svg> nodes can be written as documents")
    return etree.tostring(to_element(node), xml_declaration=True, encoding="utf-8", pretty_print=True)


def document(
    children: Sequence[SceneNode],
    width: float,
    height: float,
    view_box: Optional[Tuple[float, float, float, float]] = None,
    **attrs: Any,
) -> SceneNode:
    view_box = view_box or (0, 0, width, height)
    return create_node(
        "svg",
        {
            "width": width,
            "height": height,
            "viewBox": " ".join(fmt_number(v) for v in view_box),
            **attrs,
        },
        children,
    )


def _local_name(tag: Any) -> Optional[str]:
    if not isinstance(tag, str):
        return None
    if "}" in tag:
        return tag.rsplit("}", 1)[-1]
    return tag


def from_element(element: etree._Element) -> Optional[SceneNode]:
    """Convert an lxml element tree into scene nodes, skipping comments and PIs."""

    name = _local_name(element.tag)
    if name is None:
        return None
    attrs = {}
    for key, value in element.attrib.items():
        local = _local_name(key)
        if local is not None:
            attrs[local] = value
    children: List[SceneNode] = []
    for child in element:
        converted = from_element(child)
        if converted is not None:
            children.append(converted)
    content = element.text.strip() if element.text and element.text.strip() else None
    return SceneNode(name, attrs, children, content)
