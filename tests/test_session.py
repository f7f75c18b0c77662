from __future__ import annotations

from typing import List, Tuple

import pytest

from swiftread.playback import PlaybackController, PlaybackState
from swiftread.session import ReadingSession

LONG_TEXT = "one two three four five six seven"


class FakeRecorder:
    def __init__(self) -> None:
        self.calls: List[Tuple[int, float]] = []

    def record(self, word_count, rate):
        self.calls.append((word_count, rate))


class BrokenRecorder:
    def record(self, word_count, rate):
        raise OSError("disk full")


@pytest.fixture
def recorder():
    return FakeRecorder()


@pytest.fixture
def reading(scheduler, recorder):
    return ReadingSession(PlaybackController(rate=400, scheduler=scheduler), recorder)


def test_load_text_replaces_sequence(reading):
    snap = reading.load_text(LONG_TEXT, source="paste")
    assert snap.total_units == 7
    assert snap.state is PlaybackState.IDLE
    assert reading.source == "paste"


def test_records_once_per_text(reading, recorder):
    reading.load_text(LONG_TEXT)
    reading.toggle()
    reading.toggle()
    reading.toggle()
    assert recorder.calls == [(7, 400)]


def test_new_text_records_again(reading, recorder):
    reading.load_text(LONG_TEXT)
    reading.toggle()
    reading.load_text(LONG_TEXT + " eight")
    reading.toggle()
    assert recorder.calls == [(7, 400), (8, 400)]


def test_short_text_is_not_recorded(reading, recorder):
    reading.load_text("just five words right here")
    snap = reading.toggle()
    assert snap.state is PlaybackState.PLAYING
    assert recorder.calls == []


def test_pausing_does_not_record(reading, recorder):
    reading.load_text(LONG_TEXT)
    reading.controller.seek(3)
    reading.controller.start()
    reading.toggle()
    assert reading.controller.state is PlaybackState.PAUSED
    assert recorder.calls == []


def test_recorder_failure_does_not_stop_playback(scheduler):
    reading = ReadingSession(PlaybackController(scheduler=scheduler), BrokenRecorder())
    reading.load_text(LONG_TEXT)
    snap = reading.toggle()
    assert snap.state is PlaybackState.PLAYING


def test_works_without_recorder(scheduler):
    reading = ReadingSession(PlaybackController(scheduler=scheduler))
    reading.load_text(LONG_TEXT)
    assert reading.toggle().state is PlaybackState.PLAYING


def test_outputs_after_each_input(reading):
    reading.load_text(LONG_TEXT)
    assert reading.seek(2).current_unit == "three"
    assert reading.set_rate(250).rate == 250
    assert reading.set_pivot_mode("center").current_decomposition.index == 2
    assert reading.reset().position == 0


def test_clear(reading, scheduler):
    reading.load_text(LONG_TEXT)
    reading.toggle()
    snap = reading.clear()
    assert snap.total_units == 0
    assert snap.state is PlaybackState.IDLE
    assert scheduler.pending == []
