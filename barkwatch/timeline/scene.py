"""Backend-independent timeline drawing and gesture handling.

:func:`build_scene` turns a window plus the catalog's events into plain draw
commands in a pixel space whose origin is the top-left corner (y grows
downward). Any surface that can fill rectangles and circles, stroke lines
and place text can render them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional, Sequence, Tuple, Union

from ..audio.types import AudioEvent, LoudnessSummary
from .window import DegenerateWindowError, TimelineWindow

LOGGER = logging.getLogger("barkwatch.timeline")

Color = Tuple[float, float, float, float]

ZOOM_STEP = 1.15
PAN_STEP_FRACTION = 0.1
MAX_SCROLL_STEPS = 40.0


@dataclass(frozen=True, slots=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: Color


@dataclass(frozen=True, slots=True)
class LineSegment:
    x1: float
    y1: float
    x2: float
    y2: float
    color: Color
    width: float = 1.0


@dataclass(frozen=True, slots=True)
class Text:
    x: float
    y: float
    text: str
    color: Color


@dataclass(frozen=True, slots=True)
class FillCircle:
    x: float
    y: float
    radius: float
    color: Color


DrawCommand = Union[FillRect, LineSegment, Text, FillCircle]


def _gray(level: int) -> Color:
    return (level / 255.0, level / 255.0, level / 255.0, 1.0)


@dataclass(frozen=True)
class SceneStyle:
    background: Color = _gray(32)
    grid: Color = _gray(64)
    label: Color = _gray(200)
    marker: Color = (1.0, 128 / 255.0, 0.0, 1.0)
    selected: Color = (1.0, 0.85, 0.3, 1.0)
    whisker: Color = _gray(150)
    box: Color = (0.3, 0.55, 1.0, 0.85)
    median: Color = (1.0, 1.0, 1.0, 1.0)
    marker_radius: float = 5.0
    label_offset: float = 15.0
    envelope_height: float = 0.35
    box_half_width: float = 3.0
    min_pixels_per_label: float = 80.0


@dataclass(frozen=True, slots=True)
class FrameInput:
    """Per-frame pointer state reported by the render surface.

    ``scroll`` > 0 means wheel up (zoom in); ``drag_dx`` is the pointer
    movement in pixels since the previous frame.
    """

    pointer_x: Optional[float] = None
    pointer_y: Optional[float] = None
    scroll: float = 0.0
    drag_dx: float = 0.0
    modifiers: FrozenSet[str] = field(default_factory=frozenset)


def tick_label(tick: datetime) -> str:
    if tick.hour == 0 and tick.minute == 0:
        return tick.strftime("%b %d")
    return tick.strftime("%I:%M %p")


def marker_x(window: TimelineWindow, event: AudioEvent, width: float) -> Optional[float]:
    fraction = window.project(event.timestamp)
    if fraction is None:
        return None
    return fraction * width


def build_scene(
    window: TimelineWindow,
    events: Sequence[AudioEvent],
    width: float,
    height: float,
    *,
    selected: AudioEvent | None = None,
    style: SceneStyle = SceneStyle(),
) -> List[DrawCommand]:
    commands: List[DrawCommand] = [FillRect(0.0, 0.0, width, height, style.background)]
    if width <= 0 or height <= 0:
        return commands

    for tick in window.ticks(width, style.min_pixels_per_label):
        fraction = window.project(tick)
        if fraction is None:
            continue
        x = fraction * width
        commands.append(LineSegment(x, 0.0, x, height, style.grid))
        commands.append(Text(x, height - style.label_offset, tick_label(tick), style.label))

    center_y = height / 2.0
    for event in events:
        x = marker_x(window, event, width)
        if x is None:
            continue
        if event.loudness_summary is not None:
            commands.extend(_envelope(x, center_y, height, event.loudness_summary, style))
        color = style.selected if event == selected else style.marker
        commands.append(FillCircle(x, center_y, style.marker_radius, color))
    return commands


def _envelope(
    x: float, center_y: float, height: float, summary: LoudnessSummary, style: SceneStyle
) -> List[DrawCommand]:
    """Vertical box plot rising from just above the marker."""
    base = center_y - style.marker_radius - 2.0
    span = height * style.envelope_height

    def y_of(value: float) -> float:
        return base - value * span

    half = style.box_half_width
    top, bottom = y_of(summary.q3), y_of(summary.q1)
    return [
        LineSegment(x, y_of(summary.minimum), x, y_of(summary.maximum), style.whisker),
        FillRect(x - half, top, 2 * half, max(bottom - top, 1.0), style.box),
        LineSegment(x - half - 1, y_of(summary.median), x + half + 1, y_of(summary.median), style.median, 2.0),
    ]


def event_at(
    window: TimelineWindow,
    events: Sequence[AudioEvent],
    x: float,
    width: float,
    tolerance_px: float = 8.0,
) -> Optional[AudioEvent]:
    """Closest visible event marker within ``tolerance_px`` of ``x``."""
    best: Optional[AudioEvent] = None
    best_distance = tolerance_px
    for event in events:
        ex = marker_x(window, event, width)
        if ex is None:
            continue
        distance = abs(ex - x)
        if distance <= best_distance:
            best, best_distance = event, distance
    return best


def apply_frame_input(window: TimelineWindow, frame: FrameInput, width: float) -> bool:
    """Drag pans, wheel zooms around the pointer (pans with shift). Returns True if the view moved."""
    if width <= 0:
        return False
    changed = False
    if frame.drag_dx:
        changed |= _try(window.pan, -frame.drag_dx / width * window.seconds)
    if frame.scroll:
        steps = max(-MAX_SCROLL_STEPS, min(MAX_SCROLL_STEPS, frame.scroll))
        if "shift" in frame.modifiers:
            changed |= _try(window.pan, -steps * PAN_STEP_FRACTION * window.seconds)
        else:
            pivot = 0.5 if frame.pointer_x is None else frame.pointer_x / width
            changed |= _try(window.zoom, ZOOM_STEP ** (-steps), pivot)
    return changed


def _try(operation, *args) -> bool:
    try:
        operation(*args)
    except DegenerateWindowError as exc:
        LOGGER.debug("Ignored timeline gesture: %s", exc)
        return False
    return True


__all__ = [
    "DrawCommand",
    "FillCircle",
    "FillRect",
    "FrameInput",
    "LineSegment",
    "SceneStyle",
    "Text",
    "apply_frame_input",
    "build_scene",
    "event_at",
    "marker_x",
    "tick_label",
]
