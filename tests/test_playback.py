from pathlib import Path

import pytest

from barkwatch.services.logger import LogBuffer
from barkwatch.services.playback import PlaybackController, PlaybackError


class FakeSink:
    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def play(self, path):
        if path.name in self.fail_on:
            raise PlaybackError(f"Cannot decode {path.name}")
        self.calls.append(("play", path.name))

    def stop(self):
        self.calls.append(("stop", None))


def test_starting_a_file_stops_the_current_one():
    sink = FakeSink()
    controller = PlaybackController(sink, LogBuffer())
    controller.play(Path("bark_a.wav"))
    controller.play(Path("bark_b.wav"))
    assert sink.calls == [("play", "bark_a.wav"), ("stop", None), ("play", "bark_b.wav")]
    assert controller.current == Path("bark_b.wav")


def test_stop_clears_current_and_is_idempotent():
    sink = FakeSink()
    controller = PlaybackController(sink, LogBuffer())
    controller.play(Path("bark_a.wav"))
    controller.stop()
    controller.stop()
    assert controller.current is None
    assert sink.calls.count(("stop", None)) == 1


def test_failed_playback_is_reported_and_leaves_nothing_playing():
    sink = FakeSink(fail_on={"broken.wav"})
    logger = LogBuffer()
    controller = PlaybackController(sink, logger)
    controller.play(Path("bark_a.wav"))
    with pytest.raises(PlaybackError):
        controller.play(Path("broken.wav"))
    assert controller.current is None
    assert any("Cannot decode broken.wav" in line for line in logger.get())
