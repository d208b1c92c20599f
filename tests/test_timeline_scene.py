from datetime import datetime, timezone
from pathlib import Path

import pytest

from barkwatch.audio.types import AudioEvent, LoudnessSummary
from barkwatch.timeline.scene import (
    ZOOM_STEP,
    FillCircle,
    FillRect,
    FrameInput,
    LineSegment,
    SceneStyle,
    Text,
    apply_frame_input,
    build_scene,
    event_at,
    tick_label,
)
from barkwatch.timeline.window import TimelineWindow

UTC = timezone.utc
STYLE = SceneStyle()


def at(hour, minute=0, day=4):
    return datetime(2024, 5, day, hour, minute, tzinfo=UTC)


def window():
    return TimelineWindow(at(10), at(11))


def bark(ts, summary=None):
    return AudioEvent(
        timestamp=ts,
        storage_path=Path(f"bark_{ts:%H_%M}.wav"),
        duration=1.5,
        loudness_summary=summary,
    )


def circles(commands):
    return [c for c in commands if isinstance(c, FillCircle)]


def test_background_comes_first():
    commands = build_scene(window(), [], 800, 200)
    assert commands[0] == FillRect(0.0, 0.0, 800, 200, STYLE.background)


def test_zero_size_draws_only_background():
    commands = build_scene(window(), [bark(at(10, 30))], 0, 200)
    assert len(commands) == 1


def test_grid_lines_and_labels_per_tick():
    commands = build_scene(window(), [], 800, 200)
    lines = [c for c in commands if isinstance(c, LineSegment)]
    labels = [c for c in commands if isinstance(c, Text)]
    assert [line.x1 for line in lines] == pytest.approx([0.0, 200.0, 400.0, 600.0, 800.0])
    assert [label.text for label in labels] == ["10:00 AM", "10:15 AM", "10:30 AM", "10:45 AM", "11:00 AM"]
    assert all(label.y == 200 - STYLE.label_offset for label in labels)


def test_tick_label_names_the_day_at_midnight():
    assert tick_label(at(0)) == "May 04"
    assert tick_label(at(13, 45)) == "01:45 PM"


def test_markers_only_for_visible_events():
    events = [bark(at(9, 59)), bark(at(10, 30)), bark(at(11, 1))]
    [marker] = circles(build_scene(window(), events, 800, 200))
    assert marker.x == pytest.approx(400.0)
    assert marker.y == 100.0
    assert marker.color == STYLE.marker


def test_selected_event_is_highlighted():
    events = [bark(at(10, 15)), bark(at(10, 45))]
    markers = circles(build_scene(window(), events, 800, 200, selected=events[1]))
    assert [m.color for m in markers] == [STYLE.marker, STYLE.selected]


def test_envelope_drawn_above_marker_when_summary_known():
    summary = LoudnessSummary(minimum=0.0, q1=0.2, median=0.4, q3=0.6, maximum=1.0)
    commands = build_scene(window(), [bark(at(10, 30), summary)], 800, 200)
    marker = circles(commands)[0]
    boxes = [c for c in commands if isinstance(c, FillRect)][1:]
    assert len(boxes) == 1
    box = boxes[0]
    assert box.y + box.height <= marker.y - marker.radius
    assert box.color == STYLE.box
    assert commands.index(box) < commands.index(marker)


def test_event_without_summary_has_no_envelope():
    commands = build_scene(window(), [bark(at(10, 30))], 800, 200)
    assert [c for c in commands if isinstance(c, FillRect)] == commands[:1]


def test_event_at_picks_nearest_marker_within_tolerance():
    events = [bark(at(10, 30)), bark(at(10, 31))]
    assert event_at(window(), events, 402.0, 800) is events[0]
    assert event_at(window(), events, 412.0, 800) is events[1]
    assert event_at(window(), events, 300.0, 800) is None


def test_drag_pans_by_pixel_fraction():
    view = window()
    assert apply_frame_input(view, FrameInput(drag_dx=200.0), 800)
    # Dragging right reveals earlier time.
    assert view.visible_start == at(9, 45)
    assert view.seconds == 3600


def test_scroll_zooms_around_pointer():
    view = window()
    assert apply_frame_input(view, FrameInput(pointer_x=0.0, scroll=1.0), 800)
    assert view.visible_start == at(10)
    assert view.seconds == pytest.approx(3600 / ZOOM_STEP, abs=1e-3)

    view = window()
    apply_frame_input(view, FrameInput(pointer_x=400.0, scroll=-1.0), 800)
    assert view.seconds == pytest.approx(3600 * ZOOM_STEP, abs=1e-3)
    assert view.timestamp_at(0.5) == at(10, 30)


def test_shift_scroll_pans():
    view = window()
    apply_frame_input(view, FrameInput(scroll=1.0, modifiers=frozenset({"shift"})), 800)
    assert view.visible_start == at(9, 54)
    assert view.seconds == 3600


def test_degenerate_gesture_is_ignored():
    view = window()
    assert not apply_frame_input(view, FrameInput(drag_dx=float("nan")), 800)
    assert not apply_frame_input(view, FrameInput(scroll=1.0), 0)
    assert (view.visible_start, view.visible_end) == (at(10), at(11))


def test_idle_frame_changes_nothing():
    view = window()
    assert not apply_frame_input(view, FrameInput(pointer_x=10.0, pointer_y=10.0), 800)
