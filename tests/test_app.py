from __future__ import annotations

import signal
from unittest.mock import patch

import pytest

from lyric_keyframes.app import line_frame, play, slide_frame
from lyric_keyframes.config import load_config
from lyric_keyframes.sources.service import prepare_song
from lyric_keyframes.timing.highlight import schedule_line
from lyric_keyframes.timing.slides import group_slides


@pytest.fixture
def prepared(aligned_payload):
    cfg = load_config()
    return prepare_song("song1", aligned_payload, cfg.timing)


class FakeClock:
    def __init__(self, step: float):
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        t = self.now
        self.now += self.step
        return t


def test_line_frame_reveals_by_schedule(prepared):
    lines = prepared.lines("word")
    schedules = [schedule_line(line) for line in lines]

    rows, active, revealed = line_frame(lines, schedules, 0, 0.45)
    assert rows == ["Hello world", "Goodbye moon."]
    assert active == 0
    assert revealed == len("Hello")

    _rows, _active, revealed = line_frame(lines, schedules, 1, 2.9)
    assert revealed == len("Goodbye moon.")


def test_line_frame_before_first_line(prepared):
    lines = prepared.lines("word")
    schedules = [schedule_line(line) for line in lines]
    _rows, active, revealed = line_frame(lines, schedules, -1, 0.0)
    assert (active, revealed) == (-1, 0)


def test_slide_frame_picks_active_member(prepared):
    (slide,) = group_slides(prepared.lines("word"))
    schedules = [schedule_line(line) for line in slide.lines]

    rows, active, revealed = slide_frame(slide, schedules, 2.1)
    assert rows == ["Hello world", "Goodbye moon."]
    assert active == 1
    assert revealed == 0


@pytest.mark.parametrize("as_slides", [False, True])
def test_play_runs_to_the_end(prepared, capsys, as_slides):
    cfg = load_config()
    cfg = cfg.__class__(**{**cfg.__dict__, "use_alt_screen": False})
    old_sigint = signal.getsignal(signal.SIGINT)
    try:
        with patch("lyric_keyframes.app.time.sleep"):
            code = play(cfg, prepared, as_slides=as_slides, clock=FakeClock(0.25))
    finally:
        signal.signal(signal.SIGINT, old_sigint)

    assert code == 0
    out = capsys.readouterr().out
    assert "Hello" in out
    assert "Goodbye" in out


def test_play_without_lines(aligned_payload):
    data = {"aligned_words": aligned_payload["aligned_words"]}
    prepared = prepare_song("words-only", data, load_config().timing)
    assert prepared.lines("api") == ()
    assert play(load_config(), prepared, strategy="api") == 1


def test_play_redraws_only_on_change(prepared):
    cfg = load_config()
    cfg = cfg.__class__(**{**cfg.__dict__, "use_alt_screen": False})
    old_sigint = signal.getsignal(signal.SIGINT)
    try:
        with patch("lyric_keyframes.app.time.sleep"), \
             patch("lyric_keyframes.app.AnsiRenderer.render", autospec=True) as render:
            assert play(cfg, prepared, clock=FakeClock(0.05)) == 0
    finally:
        signal.signal(signal.SIGINT, old_sigint)

    states = [(c.args[3], c.args[4]) for c in render.call_args_list]
    assert (1, len("Goodbye moon.")) in states
    assert all(a != b for a, b in zip(states, states[1:]))
