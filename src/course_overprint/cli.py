from __future__ import annotations

import asyncio
import logging
import traceback
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from . import scene
from .config import resolve_config, section
from .course_io import load_event
from .description_sheet import render_control_description_sheet
from .glyphs import DirectoryGlyphSource, EmptyGlyphSource, GlyphSource
from .metrics import MetricsTracker, Timer, use_tracker
from .overprint import render_course
from .scale import to_drawing
from .types import Course, Event, SceneNode

log = logging.getLogger(__name__)


class Logger:
    def __init__(self, verbose: bool) -> None:
        self.verbose = verbose
        theme = Theme({
            "info": "cyan",
            "step": "bold cyan",
            "warning": "bold yellow",
            "error": "bold red",
        })
        self.console = Console(theme=theme, highlight=False, record=False)
        self.err_console = Console(theme=theme, highlight=False, record=False, stderr=True)

    def _print(self, message: str, style: str | None = None, *, err: bool = False) -> None:
        target = self.err_console if err else self.console
        if style:
            target.print(f"[{style}]{message}[/{style}]")
        else:
            target.print(message)

    def info(self, message: str) -> None:
        self._print(message, style="info")

    def step(self, message: str) -> None:
        self.console.print(f"[step]▶ {message}")

    def warn(self, message: str) -> None:
        self._print(message, style="warning")

    def error(self, message: str) -> None:
        self._print(message, style="error", err=True)

    def debug(self, message: str) -> None:
        if self.verbose:
            self.console.print(f"[dim]{message}[/dim]")

    def status(self, message: str):
        return self.console.status(message)


class _LoggingBridge(logging.Handler):
    def __init__(self, cli_logger: Logger, level: int) -> None:
        super().__init__(level)
        self._cli_logger = cli_logger

    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        msg = self.format(record)
        if record.levelno >= logging.ERROR:
            self._cli_logger.error(msg)
        elif record.levelno >= logging.WARNING:
            self._cli_logger.warn(msg)
        elif record.levelno >= logging.INFO:
            self._cli_logger.info(msg)
        else:
            self._cli_logger.debug(msg)


def _install_bridge(logger: Logger, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    package_logger = logging.getLogger("course_overprint")
    package_logger.setLevel(log_level)
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        if isinstance(handler, _LoggingBridge):
            package_logger.removeHandler(handler)
    bridge = _LoggingBridge(logger, log_level)
    bridge.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(bridge)


def _handle_known_exception(logger: Logger, exc: Exception, *, prefix: str | None = None) -> None:
    message = str(exc) if str(exc) else exc.__class__.__name__
    if prefix:
        message = f"{prefix}: {message}"
    logger.error(message)


def _course_bounds(course: Course) -> Optional[Tuple[float, float, float, float]]:
    points = [c.coordinates for c in course.controls]
    for obj in course.special_objects:
        points.extend(obj.locations)
    if not points:
        return None
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def overprint_document(group: SceneNode, course: Course, padding: float) -> SceneNode:
    """Wrap an overprint group in an ``svg`` whose view box covers the course."""

    bounds = _course_bounds(course) or (0.0, 0.0, 0.0, 0.0)
    xmin, ymin, xmax, ymax = bounds
    left, top = to_drawing((xmin - padding, ymax + padding))
    right, bottom = to_drawing((xmax + padding, ymin - padding))
    width = right - left
    height = bottom - top
    return scene.document([group], width, height, (left, top, width, height))


def _summarize(
    logger: Logger,
    event: Event,
    course: Course,
    overprint: SceneNode,
    outputs: Mapping[str, Path],
    tracker: MetricsTracker,
) -> None:
    logger.console.rule("Render Summary")
    panel = Panel(
        f"{event.name} | course {course.name} | map 1:{event.map_scale:g} | print 1:{course.print_scale:g}",
        title="Course",
        expand=False,
    )
    logger.console.print(panel)
    table = Table(show_header=True, header_style="bold")
    table.add_column("Item")
    table.add_column("Value", justify="right")
    table.add_row("Controls", str(len(course.controls)))
    table.add_row("Special objects", str(len(course.special_objects)))
    table.add_row("Text nodes", str(scene.count_nodes(overprint, "text")))
    for label, value in tracker.summary_rows():
        table.add_row(label, value)
    logger.console.print(table)
    logger.console.print("Outputs:")
    for label, path in outputs.items():
        logger.console.print(f"  • {label}: {path}")
    if event.warnings:
        logger.console.print("Warnings:", style="warning")
        for item in event.warnings:
            logger.console.print(f"  - {item}", style="warning")


async def _render(
    event: Event,
    course: Course,
    glyphs: GlyphSource,
    cfg: Mapping[str, Any],
    with_sheet: bool,
) -> Tuple[SceneNode, Optional[SceneNode]]:
    overprint = await render_course(
        course, event.course_appearance, event.name, event.map_scale, glyphs, cfg
    )
    sheet = None
    if with_sheet:
        sheet = await render_control_description_sheet(event.name, course, glyphs, cfg)
    return overprint, sheet


app = typer.Typer(help="Orienteering course overprint & description sheet rendering")


@app.callback()
def main() -> None:
    """Render orienteering courses to SVG."""


@app.command("render")
def render(
    event_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Event YAML file"),
    course_id: Optional[str] = typer.Option(None, "--course", help="Course id (default: first course)"),
    out: Path = typer.Option(Path("overprint.svg"), "--out", help="Overprint SVG output"),
    sheet: Optional[Path] = typer.Option(None, "--sheet", help="Description sheet SVG output"),
    glyph_dir: Optional[Path] = typer.Option(
        None, "--glyphs", file_okay=False, help="Directory with <symbol>.svg description glyphs"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML configuration"),
    opts: List[str] = typer.Option(
        [],
        "--opts",
        help="Override configuration values, e.g. --opts overprint.padding_mm=5",
        show_default=False,
        metavar="PATH=VALUE",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug output"),
) -> None:
    logger = Logger(verbose=verbose)
    _install_bridge(logger, verbose)
    tracker = MetricsTracker()

    try:
        with use_tracker(tracker):
            with Timer("total.render"):
                logger.step("Loading configuration")
                cfg = resolve_config(config, opts)

                logger.step("Loading event")
                event = load_event(event_file)
                if not event.courses:
                    raise ValueError(f"Event {event.name!r} has no courses")
                course = event.course(course_id) if course_id is not None else event.courses[0]
                glyphs: GlyphSource = DirectoryGlyphSource(glyph_dir) if glyph_dir else EmptyGlyphSource()

                logger.step(f"Rendering course {course.name}")
                with logger.status("Rendering"):
                    overprint, sheet_doc = asyncio.run(_render(event, course, glyphs, cfg, sheet is not None))

                logger.step("Writing SVG")
                padding = float(section(cfg, "overprint")["padding_mm"])
                out.parent.mkdir(parents=True, exist_ok=True)
                out.write_bytes(scene.to_svg_bytes(overprint_document(overprint, course, padding)))
                outputs = {"Overprint": out}
                if sheet is not None and sheet_doc is not None:
                    sheet.parent.mkdir(parents=True, exist_ok=True)
                    sheet.write_bytes(scene.to_svg_bytes(sheet_doc))
                    outputs["Description sheet"] = sheet

        _summarize(logger, event, course, overprint, outputs, tracker)
    except (KeyError, FileNotFoundError, ValueError, RuntimeError, yaml.YAMLError) as exc:
        _handle_known_exception(logger, exc, prefix="Error")
        raise typer.Exit(code=2) from exc
    except Exception as exc:  # pragma: no cover - fallback path
        _handle_known_exception(logger, exc, prefix="Unexpected error")
        if verbose:
            traceback.print_exc()
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
