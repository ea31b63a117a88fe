import asyncio
import logging
from pathlib import Path

from course_overprint.glyphs import DirectoryGlyphSource, EmptyGlyphSource, glyph_from_svg

SVG_TEMPLATE = '<svg xmlns="http://www.w3.org/2000/svg" {attrs}><rect x="0" y="0" width="4" height="4"/></svg>'


def _svg(attrs: str) -> bytes:
    return SVG_TEMPLATE.format(attrs=attrs).encode("utf-8")


def test_glyph_dimensions_from_width_and_height() -> None:
    glyph = glyph_from_svg(_svg('width="10" height="5"'))
    assert glyph.dimensions == (10.0, 5.0)
    assert glyph.group.type == "g"
    assert "transform" not in glyph.group.attrs
    assert [c.type for c in glyph.group.children] == ["rect"]


def test_glyph_view_box_is_normalised() -> None:
    glyph = glyph_from_svg(_svg('width="10" height="5" viewBox="0 0 20 10"'))
    assert glyph.dimensions == (10.0, 5.0)
    assert glyph.group.attrs["transform"] == "scale(0.5, 0.5) translate(0, 0)"

    shifted = glyph_from_svg(_svg('viewBox="2 3 8 8"'))
    assert shifted.dimensions == (8.0, 8.0)
    assert shifted.group.attrs["transform"] == "scale(1, 1) translate(-2, -3)"


def test_directory_source_loads_files(tmp_path) -> None:
    (tmp_path / "1.1.svg").write_bytes(_svg('width="10" height="10"'))
    source = DirectoryGlyphSource(tmp_path)

    glyph = asyncio.run(source.fetch("1.1"))

    assert glyph is not None
    assert glyph.dimensions == (10.0, 10.0)


def test_directory_source_missing_and_unsafe_ids(tmp_path) -> None:
    source = DirectoryGlyphSource(tmp_path)
    assert asyncio.run(source.fetch("2.4")) is None
    assert asyncio.run(source.fetch("../secret")) is None


def test_directory_source_broken_file_logs_warning(tmp_path, caplog) -> None:
    (tmp_path / "bad.svg").write_text("<svg", encoding="utf-8")
    source = DirectoryGlyphSource(tmp_path)

    with caplog.at_level(logging.WARNING, logger="course_overprint.glyphs"):
        assert asyncio.run(source.fetch("bad")) is None

    assert "could not be read" in caplog.text


def test_empty_source_has_no_glyphs() -> None:
    assert asyncio.run(EmptyGlyphSource().fetch("start")) is None


def test_directory_source_unreadable_file_degrades_to_blank(tmp_path, monkeypatch, caplog) -> None:
    (tmp_path / "5.2.svg").write_bytes(_svg('width="10" height="10"'))

    def _denied(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", _denied)
    source = DirectoryGlyphSource(tmp_path)

    with caplog.at_level(logging.WARNING, logger="course_overprint.glyphs"):
        assert asyncio.run(source.fetch("5.2")) is None

    assert "Permission denied" in caplog.text
