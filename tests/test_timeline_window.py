from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from barkwatch.audio.types import AudioEvent
from barkwatch.timeline.window import MIN_WINDOW_SECONDS, DegenerateWindowError, TimelineWindow

UTC = timezone.utc


def at(hour, minute=0, second=0, day=4):
    return datetime(2024, 5, day, hour, minute, second, tzinfo=UTC)


def hour_window():
    return TimelineWindow(at(10), at(11))


def event(ts):
    return AudioEvent(timestamp=ts, storage_path=Path(f"bark_{ts:%H%M%S}.wav"), duration=1.0)


def test_constructor_rejects_inverted_and_naive_bounds():
    with pytest.raises(DegenerateWindowError):
        TimelineWindow(at(11), at(10))
    with pytest.raises(DegenerateWindowError):
        TimelineWindow(at(10), at(10))
    with pytest.raises(ValueError):
        TimelineWindow(datetime(2024, 5, 4, 10), datetime(2024, 5, 4, 11))


def test_tick_interval_examples():
    assert TimelineWindow(at(10), at(10, 5)).tick_interval(800, 80) == 15
    assert TimelineWindow.last_24_hours(at(12)).tick_interval(800, 80) == 150
    assert TimelineWindow.last_week(at(12)).tick_interval(800, 80) == 1020


@pytest.mark.parametrize("width", [1, 79, 80, 640, 1920, 3840])
@pytest.mark.parametrize("span", [timedelta(seconds=1), timedelta(minutes=37), timedelta(hours=5), timedelta(days=9)])
def test_tick_interval_keeps_labels_apart(width, span):
    window = TimelineWindow(at(0), at(0) + span)
    interval = window.tick_interval(width, 80)
    max_labels = max(1, width // 80)
    assert interval >= 15
    assert interval % 15 == 0
    assert len(window.ticks(width, 80)) <= max_labels
    assert window.seconds / 60.0 // interval + 1 <= max_labels
    # A finer multiple of 15 would crowd the labels.
    if interval > 15:
        assert window.seconds / 60.0 // (interval - 15) + 1 > max_labels


def test_tick_interval_with_zero_width_falls_back_to_one_label():
    window = TimelineWindow(at(0), at(2))
    assert window.tick_interval(0, 80) == 135
    assert window.ticks(0, 80) == [at(0)]


def test_aligned_window_does_not_exceed_label_count():
    window = TimelineWindow(at(10), at(12, 30))
    assert window.tick_interval(800, 80) == 30
    ticks = window.ticks(800, 80)
    assert len(ticks) == 6
    assert ticks[0] == at(10)
    assert ticks[-1] == at(12, 30)


def test_ticks_align_to_wall_clock():
    assert hour_window().ticks(800, 80) == [at(10), at(10, 15), at(10, 30), at(10, 45), at(11)]
    offset = TimelineWindow(at(10, 7), at(10, 50))
    assert offset.ticks(800, 80) == [at(10, 15), at(10, 30), at(10, 45)]


def test_presets_end_now():
    now = at(12)
    assert TimelineWindow.last_hour(now).visible_start == at(11)
    assert TimelineWindow.last_24_hours(now).visible_start == at(12, day=3)
    assert TimelineWindow.last_week(now).visible_start == datetime(2024, 4, 27, 12, tzinfo=UTC)
    assert TimelineWindow.last_week(now).visible_end == now


def test_default_starts_before_first_bark_today():
    now = at(12)
    events = [event(at(9, 30)), event(at(8)), event(at(23, day=3))]
    window = TimelineWindow.default(events, now)
    assert window.visible_start == at(7, 55)
    assert window.visible_end == now


def test_default_without_barks_today_shows_last_day():
    now = at(12)
    window = TimelineWindow.default([event(at(23, day=3))], now)
    assert window.visible_start == at(12, day=3)
    assert TimelineWindow.default([], now).seconds == 24 * 3600


def test_default_lead_in_is_configurable():
    window = TimelineWindow.default([event(at(8))], at(12), lead_in=timedelta(minutes=30))
    assert window.visible_start == at(7, 30)


def test_zoom_keeps_pivot_fixed():
    window = hour_window()
    window.zoom(2.0)
    assert (window.visible_start, window.visible_end) == (at(9, 30), at(11, 30))

    window = hour_window()
    window.zoom(0.5, pivot_fraction=0.0)
    assert (window.visible_start, window.visible_end) == (at(10), at(10, 30))


def test_zoom_out_then_in_restores_window():
    window = hour_window()
    window.zoom(2.0)
    window.zoom(0.5)
    assert (window.visible_start, window.visible_end) == (at(10), at(11))


def test_zoom_in_is_floored():
    window = hour_window()
    window.zoom(1e-9)
    assert window.seconds == MIN_WINDOW_SECONDS
    assert window.visible_start < window.visible_end


@pytest.mark.parametrize("factor", [0.0, -1.0, float("nan"), float("inf"), 1e12])
def test_bad_zoom_leaves_window_untouched(factor):
    window = hour_window()
    with pytest.raises(DegenerateWindowError):
        window.zoom(factor)
    assert (window.visible_start, window.visible_end) == (at(10), at(11))


def test_pan_shifts_both_bounds():
    window = hour_window()
    window.pan(-1800)
    assert (window.visible_start, window.visible_end) == (at(9, 30), at(10, 30))
    assert window.seconds == 3600


@pytest.mark.parametrize("delta", [float("nan"), float("inf"), 1e20])
def test_bad_pan_leaves_window_untouched(delta):
    window = hour_window()
    with pytest.raises(DegenerateWindowError):
        window.pan(delta)
    assert (window.visible_start, window.visible_end) == (at(10), at(11))


def test_project_maps_into_unit_interval():
    window = hour_window()
    assert window.project(at(10)) == 0.0
    assert window.project(at(10, 30)) == pytest.approx(0.5)
    assert window.project(at(11)) == 1.0
    assert window.project(at(9, 59, 59)) is None
    assert window.project(at(11, 0, 1)) is None
    assert window.timestamp_at(0.25) == at(10, 15)
    assert window.contains(at(10, 45))
