from __future__ import annotations

from bisect import bisect_right

from .model import Keyframe, KeyframeSchedule, Line, Slide


def _pct(char_end: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return max(0.0, min(100.0, char_end / total * 100.0))


def schedule_line(line: Line, chunk: int = 1) -> KeyframeSchedule:
    """
    Hold-interpolated reveal schedule for one line.

    Starts at (line.start, 0). A keyframe follows every `chunk`-th word and
    always the last one, so the schedule ends at 100%. Time and percent never
    go backwards even if word ends overlap.
    """
    if chunk < 1:
        raise ValueError(f"chunk must be >= 1, got {chunk}")

    total = len(line.text)
    keys = [Keyframe(time=line.start, percent=0.0)]
    last_i = len(line.char_ends) - 1
    for i, (ce, t) in enumerate(zip(line.char_ends, line.times)):
        if (i + 1) % chunk != 0 and i != last_i:
            continue
        prev = keys[-1]
        keys.append(Keyframe(time=max(prev.time, t), percent=max(prev.percent, _pct(ce, total))))
    return tuple(keys)


def schedule_slide(slide: Slide, chunk: int = 1) -> tuple[KeyframeSchedule, ...]:
    """One schedule per member line; each line keeps its own start/end."""
    return tuple(schedule_line(line, chunk) for line in slide.lines)


def percent_at(schedule: KeyframeSchedule, t: float) -> float:
    """Revealed percentage at time `t` under hold interpolation."""
    times = [k.time for k in schedule]
    i = bisect_right(times, t) - 1
    return schedule[i].percent if i >= 0 else 0.0
