"""Description symbol lookup."""
from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Mapping, Optional, Protocol

from lxml import etree

from .scene import fmt_number, from_element, group, measure
from .types import Glyph

log = logging.getLogger(__name__)

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9._-]+$")
_NUMBER_RE = re.compile(r"[-+]?(?:\d*\.\d+|\d+)(?:[eE][-+]?\d+)?")


class GlyphSource(Protocol):
    async def fetch(self, symbol_id: str) -> Optional[Glyph]:
        ...


class MappingGlyphSource:
    def __init__(self, glyphs: Mapping[str, Glyph]) -> None:
        self._glyphs = dict(glyphs)

    async def fetch(self, symbol_id: str) -> Optional[Glyph]:
        return self._glyphs.get(symbol_id)


def glyph_from_svg(data: bytes) -> Glyph:
    """Build a glyph whose drawing spans ``(0, 0)``-``(width, height)``."""

    root = etree.fromstring(data)
    node = from_element(root)
    if node is None or node.type != "svg":
        raise ValueError("Glyph document has no <svg> root")
    dimensions = measure(node)
    attrs = {}
    view_box = [float(v) for v in _NUMBER_RE.findall(node.attrs.get("viewBox", ""))]
    if len(view_box) == 4 and view_box[2] > 0 and view_box[3] > 0:
        sx = dimensions[0] / view_box[2]
        sy = dimensions[1] / view_box[3]
        if (sx, sy, view_box[0], view_box[1]) != (1.0, 1.0, 0.0, 0.0):
            attrs["transform"] = (
                f"scale({fmt_number(sx)}, {fmt_number(sy)}) "
                f"translate({fmt_number(-view_box[0])}, {fmt_number(-view_box[1])})"
            )
    return Glyph(group(node.children, **attrs), dimensions)


class DirectoryGlyphSource:
    """Loads ``<root>/<symbol_id>.svg`` files."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path_for(self, symbol_id: str) -> Optional[Path]:
        if not _SAFE_ID_RE.match(symbol_id):
            return None
        return self.root / f"{symbol_id}.svg"

    def _load(self, symbol_id: str) -> Optional[Glyph]:
        path = self._path_for(symbol_id)
        if path is None or not path.is_file():
            log.debug("No glyph for symbol %r in %s", symbol_id, self.root)
            return None
        try:
            return glyph_from_svg(path.read_bytes())
        except (OSError, etree.XMLSyntaxError, ValueError) as exc:
            log.warning("Glyph %s could not be read: %s", path, exc)
            return None

    async def fetch(self, symbol_id: str) -> Optional[Glyph]:
        return await asyncio.to_thread(self._load, symbol_id)


class EmptyGlyphSource:
    async def fetch(self, symbol_id: str) -> Optional[Glyph]:
        return None
