from __future__ import annotations

import logging
import signal
import time
from bisect import bisect_right
from typing import Callable, Sequence

from lyric_keyframes.config import AppConfig
from lyric_keyframes.render.ansi import AnsiRenderer
from lyric_keyframes.sources.types import PreparedSong
from lyric_keyframes.sync.tracker import UnitTracker
from lyric_keyframes.timing.highlight import percent_at, schedule_line
from lyric_keyframes.timing.model import KeyframeSchedule, Line, Slide
from lyric_keyframes.timing.slides import group_slides

logger = logging.getLogger(__name__)

Frame = tuple[list[str], int, int]  # rows, active row, revealed chars


def _revealed_chars(line: Line, schedule: KeyframeSchedule, t: float) -> int:
    return round(percent_at(schedule, t) / 100.0 * len(line.text))


def line_frame(
    lines: Sequence[Line],
    schedules: Sequence[KeyframeSchedule],
    idx: int,
    t: float,
    context_lines: int = 2,
) -> Frame:
    # window around current line, but keep within list
    start = max(idx - context_lines, 0)
    end = min(max(idx, 0) + context_lines + 1, len(lines))
    rows = [line.text for line in lines[start:end]]
    if idx < 0:
        return rows, -1, 0
    return rows, idx - start, _revealed_chars(lines[idx], schedules[idx], t)


def slide_frame(slide: Slide, schedules: Sequence[KeyframeSchedule], t: float) -> Frame:
    rows = [line.text for line in slide.lines]
    active = bisect_right([line.start for line in slide.lines], t) - 1
    if active < 0:
        return rows, -1, 0
    return rows, active, _revealed_chars(slide.lines[active], schedules[active], t)


def play(
    cfg: AppConfig,
    prepared: PreparedSong,
    *,
    strategy: str = "word",
    as_slides: bool = False,
    offset_s: float = 0.0,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """
    Replay a prepared song in the terminal:
    clock -> song time -> active unit (bisect) -> reveal (hold keyframes) -> render on change.
    """
    chunk = cfg.timing.highlight_chunk
    lines = prepared.lines(strategy)
    if not lines:
        logger.error("No lines available for strategy '%s'", strategy)
        return 1

    slides: tuple[Slide, ...] = group_slides(lines, cfg.timing) if as_slides else ()
    units: Sequence[Line | Slide] = slides if as_slides else lines
    line_schedules = [schedule_line(line, chunk) for line in lines]
    slide_schedules = [[schedule_line(line, chunk) for line in s.lines] for s in slides]
    tracker = UnitTracker.from_units(units)
    song_end = max(u.end for u in units) + 1.0

    renderer = AnsiRenderer(use_alt_screen=cfg.use_alt_screen)
    renderer.enter()

    def _on_sigint(signum, frame):
        renderer.exit()
        raise KeyboardInterrupt

    signal.signal(signal.SIGINT, _on_sigint)

    tick_s = 1.0 / max(cfg.refresh_hz, 1.0)
    t0 = clock()
    last: tuple[int, int] | None = None
    try:
        while True:
            t = clock() - t0 - offset_s
            if t > song_end:
                return 0

            moved = tracker.changed_index(t) is not None
            idx = tracker.last_idx
            if as_slides:
                if idx < 0:
                    rows, active, revealed = [], -1, 0
                else:
                    rows, active, revealed = slide_frame(slides[idx], slide_schedules[idx], t)
            else:
                rows, active, revealed = line_frame(lines, line_schedules, idx, t)

            state = (active, revealed)
            if moved or state != last:
                title = f"{prepared.song_id}  {t:6.2f}s"
                renderer.render(title, rows, active, revealed)
                last = state

            time.sleep(tick_s)
    finally:
        renderer.exit()
