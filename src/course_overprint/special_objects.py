from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from . import scene
from .geom import LineGeometry
from .scale import stroke_width, to_drawing
from .types import BBox, SceneNode, SpecialObject, SpecialObjectKind

log = logging.getLogger(__name__)

DESCRIPTION_COLUMNS = 8


def composite_order(objects: Sequence[SpecialObject]) -> List[SpecialObject]:
    """Drawable special objects in paint order, descriptions last."""

    drawable: List[SpecialObject] = []
    for obj in objects:
        if isinstance(obj.kind, SpecialObjectKind):
            drawable.append(obj)
        else:
            log.debug("Special object %s of kind %r has no drawing", obj.id, obj.kind)
    others = [o for o in drawable if o.kind != SpecialObjectKind.DESCRIPTIONS]
    descriptions = [o for o in drawable if o.kind == SpecialObjectKind.DESCRIPTIONS]
    return others + descriptions


def line_geometries(objects: Sequence[SpecialObject]) -> List[LineGeometry]:
    return [
        LineGeometry.from_points(o.locations)
        for o in objects
        if o.kind == SpecialObjectKind.LINE and len(o.locations) >= 2
    ]


def bbox_from_locations(locations: Sequence[Tuple[float, float]]) -> Optional[BBox]:
    if len(locations) < 2:
        return None
    xs = [p[0] for p in locations]
    ys = [p[1] for p in locations]
    return min(xs), min(ys), max(xs), max(ys)


def white_out_node(obj: SpecialObject, fill: str = "white") -> Optional[SceneNode]:
    if len(obj.locations) < 3:
        log.warning("White-out %s needs at least three locations, skipped", obj.id)
        return None
    return scene.lines([to_drawing(p) for p in obj.locations], True, None, fill, 0)


def line_node(obj: SpecialObject, color: str, width: float) -> Optional[SceneNode]:
    if len(obj.locations) < 2:
        log.warning("Line %s needs at least two locations, skipped", obj.id)
        return None
    return scene.lines([to_drawing(p) for p in obj.locations], False, color, None, width)


def get_control_description_extent(
    description_object: SpecialObject, description_document: SceneNode
) -> BBox:
    width, height = scene.measure(description_document)
    aspect_ratio = height / width
    bbox = description_object.bbox
    if bbox is None:
        raise ValueError(f"Descriptions object {description_object.id} has no bbox")
    # the bbox spans one column of the sheet
    extent_width = (bbox[2] - bbox[0]) * DESCRIPTION_COLUMNS
    extent_height = extent_width * aspect_ratio
    return bbox[0], bbox[1] - extent_height, bbox[0] + extent_width, bbox[1]


def place_description_sheet(
    description_object: SpecialObject, description_document: SceneNode
) -> Optional[SceneNode]:
    if description_object.bbox is None:
        log.warning("Descriptions object %s has no bbox, not drawn", description_object.id)
        return None
    if not description_document.children:
        return None

    doc_width, _ = scene.measure(description_document)
    xmin, ymin, xmax, ymax = get_control_description_extent(description_object, description_document)
    min_x, _ = to_drawing((xmin, ymin))
    max_x, top_y = to_drawing((xmax, ymax))
    factor = (max_x - min_x) / doc_width

    placed = scene.clone(description_document.children[0])
    placed.attrs["transform"] = (
        f"translate({scene.fmt_number(float(min_x))}, {scene.fmt_number(float(top_y))}) "
        f"scale({scene.fmt_number(float(factor))})"
    )
    return placed


def composite_special_objects(
    objects: Sequence[SpecialObject],
    *,
    color: str,
    scale: float = 1.0,
    line_width_ratio: float = 1.0,
    white_out_fill: str = "white",
    description_document: Optional[SceneNode] = None,
) -> List[SceneNode]:
    nodes: List[SceneNode] = []
    for obj in composite_order(objects):
        kind = obj.kind
        if kind == SpecialObjectKind.WHITE_OUT:
            node = white_out_node(obj, white_out_fill)
        elif kind == SpecialObjectKind.LINE:
            node = line_node(obj, color, stroke_width(scale * line_width_ratio))
        elif description_document is None:
            log.debug("No description sheet rendered, descriptions object %s skipped", obj.id)
            node = None
        else:
            node = place_description_sheet(obj, description_document)
        if node is not None:
            nodes.append(node)
    return nodes
