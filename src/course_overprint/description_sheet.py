"""IOF control-description sheet layout.

The sheet is a grid of eight square columns. Row 0 carries the event name,
row 1 the course name and length, and each following row describes one
control: sequence number (or start pictogram), code, then the description
boxes C to H. A control described by a single ``all`` symbol shows that
symbol over columns 2-4 and the leg length in the last column.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from . import scene
from .config import section
from .glyphs import EmptyGlyphSource, GlyphSource
from .route import course_distance, leg_distance_meters
from .types import Control, ControlKind, Course, Glyph, SceneNode

log = logging.getLogger(__name__)

COLUMNS = 8
DESCRIPTION_BOXES = ("C", "D", "E", "F", "G", "H")
START_SYMBOL = "start"
ALL_BOX = "all"
# line weight 1 -> 0.7 drawing units
RULE_WIDTH = 0.7


@dataclass(frozen=True)
class _SymbolSlot:
    symbol_id: str
    row: int
    col: int
    # number of cells the fitted symbol may be wide, centred over ``cover`` cells
    width_cells: float = 1.0
    cover: int = 1


class _SheetLayout:
    def __init__(self, cfg: Mapping[str, Any], rows: int) -> None:
        self.cell = float(cfg["cell_size"])
        self.font_size = float(cfg["font_size"])
        self.margin = float(cfg["margin"])
        self.baseline_offset = float(cfg["baseline_offset"])
        self.color = str(cfg["line_color"])
        self.width = COLUMNS * self.cell
        self.height = self.cell * rows

    def baseline(self, row: int) -> float:
        return (row + 1) * self.cell - self.baseline_offset

    def col_center(self, col: float, cover: int = 1) -> float:
        return col * self.cell + cover * self.cell / 2

    def text(self, content: str, col: int, row: int, bold: bool = False, cover: int = 1) -> SceneNode:
        return scene.text(
            content,
            self.col_center(col, cover),
            self.baseline(row),
            self.color,
            self.font_size,
            "bold" if bold else "normal",
        )

    def col_line(self, col: int, row: int, weight: float) -> SceneNode:
        x = col * self.cell
        y = row * self.cell
        return scene.lines([(x, y), (x, y + self.cell)], False, self.color, None, RULE_WIDTH * weight)

    def row_line(self, row: int, weight: float) -> SceneNode:
        y = row * self.cell
        return scene.lines([(0, y), (self.width, y)], False, self.color, None, RULE_WIDTH * weight)

    def place_symbol(self, slot: _SymbolSlot, glyph: Optional[Glyph]) -> Optional[SceneNode]:
        if glyph is None:
            log.debug("No glyph for %r, cell (%d, %d) left blank", slot.symbol_id, slot.row, slot.col)
            return None
        glyph_w, glyph_h = glyph.dimensions
        if glyph_w <= 0 or glyph_h <= 0:
            log.warning("Glyph %r has empty dimensions", slot.symbol_id)
            return None

        avail_w = slot.width_cells * self.cell - 2 * self.margin
        avail_h = self.cell - 2 * self.margin
        factor = min(avail_w / glyph_w, avail_h / glyph_h)
        image_w = glyph_w * factor
        image_h = glyph_h * factor
        x = self.col_center(slot.col, slot.cover) - image_w / 2
        y = slot.row * self.cell + self.cell / 2 - image_h / 2

        inner = scene.clone(glyph.group)
        return scene.group(
            [inner],
            transform=(
                f"translate({scene.fmt_number(float(x))}, {scene.fmt_number(float(y))}) "
                f"scale({scene.fmt_number(float(factor))})"
            ),
        )


def _symbol_slots(controls: Sequence[Control]) -> List[_SymbolSlot]:
    slots: List[_SymbolSlot] = []
    for index, control in enumerate(controls):
        row = index + 2
        if control.kind == ControlKind.START:
            slots.append(_SymbolSlot(START_SYMBOL, row, 0))
        description = control.description or {}
        if description.get(ALL_BOX):
            slots.append(_SymbolSlot(description[ALL_BOX], row, 2, width_cells=2.0, cover=3))
            continue
        for box_index, box in enumerate(DESCRIPTION_BOXES):
            symbol_id = description.get(box)
            if symbol_id:
                slots.append(_SymbolSlot(symbol_id, row, box_index + 2))
    return slots


async def _fetch_all(glyphs: GlyphSource, slots: Sequence[_SymbolSlot]) -> Dict[_SymbolSlot, Optional[Glyph]]:
    results = await asyncio.gather(*(glyphs.fetch(slot.symbol_id) for slot in slots))
    return dict(zip(slots, results))


def _header(layout: _SheetLayout, event_name: str) -> List[SceneNode]:
    return [
        layout.text(event_name, 0, 0, bold=True, cover=COLUMNS),
        layout.row_line(1, 1),
    ]


def _course_info(layout: _SheetLayout, course: Course, distance_scale: float) -> List[SceneNode]:
    km = course_distance(course, distance_scale)
    return [
        layout.text(course.name, 0, 1, bold=True, cover=3),
        layout.text(f"{km:.1f} km", 3, 1, bold=True, cover=3),
        layout.col_line(3, 1, 2),
        layout.col_line(6, 1, 2),
        layout.row_line(2, 2),
    ]


def _control_row(
    layout: _SheetLayout,
    controls: Sequence[Control],
    index: int,
    sequence_number: Optional[int],
    placed: Mapping[tuple, SceneNode],
    distance_scale: float,
) -> List[Optional[SceneNode]]:
    control = controls[index]
    row = index + 2
    nodes: List[Optional[SceneNode]] = []

    if control.kind == ControlKind.START:
        nodes.append(placed.get((row, 0)))
    elif sequence_number is not None:
        nodes.append(layout.text(str(sequence_number), 0, row, bold=True))
    if control.code:
        nodes.append(layout.text(control.code, 1, row))
    nodes.append(layout.col_line(1, row, 1))

    description = control.description or {}
    if description.get(ALL_BOX):
        nodes.append(placed.get((row, 2)))
        nodes.append(layout.col_line(2, row, 1))
        nodes.append(layout.col_line(COLUMNS - 1, row, 1))
        if index > 0:
            meters = leg_distance_meters(controls[index - 1], control, distance_scale)
            nodes.append(layout.text(f"{meters:.0f} m", COLUMNS - 1, row, bold=True))
    else:
        for box_index in range(len(DESCRIPTION_BOXES)):
            col = box_index + 2
            nodes.append(placed.get((row, col)))
            nodes.append(layout.col_line(col, row, 2 if col % 3 == 0 else 1))

    nodes.append(layout.row_line(row + 1, 2 if (index + 1) % 3 == 0 else 1))
    return nodes


async def render_control_description_sheet(
    event_name: str,
    course: Course,
    glyphs: Optional[GlyphSource] = None,
    cfg: Optional[Mapping[str, Any]] = None,
) -> SceneNode:
    """Lay out the description sheet for *course* as an ``svg`` scene node."""

    sheet_cfg = section(cfg, "description_sheet")
    controls = list(course.controls)
    layout = _SheetLayout(sheet_cfg, len(controls) + 2)
    distance_scale = float(sheet_cfg["distance_scale"])

    slots = _symbol_slots(controls)
    fetched = await _fetch_all(glyphs or EmptyGlyphSource(), slots)
    placed = {}
    for slot in slots:
        node = layout.place_symbol(slot, fetched[slot])
        if node is not None:
            placed[(slot.row, slot.col)] = node

    children: List[Optional[SceneNode]] = [
        scene.rect(0, 0, layout.width, layout.height, layout.color, "white"),
        *_header(layout, event_name),
        *_course_info(layout, course, distance_scale),
    ]
    sequence = 0
    for index, control in enumerate(controls):
        number = None
        if control.is_numbered:
            sequence += 1
            number = sequence
        children.extend(_control_row(layout, controls, index, number, placed, distance_scale))

    log.debug("Description sheet for %s: %d controls, %d symbols", course.name, len(controls), len(placed))
    return scene.document(
        [scene.group([c for c in children if c is not None])],
        layout.width,
        layout.height,
        fill="white",
    )
