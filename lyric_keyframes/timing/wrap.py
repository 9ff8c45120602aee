from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from lyric_keyframes.config import TimingConfig

from .model import Line

BREAK = "\n"


def balanced_break_index(text: str, target: int) -> int | None:
    """
    Index of the space closest to `target` (first one wins ties), or None if
    breaking there would leave an empty row.
    """
    mid = min(len(text), max(1, int(target)))
    best = -1
    best_dist: int | None = None
    for i, ch in enumerate(text):
        if ch != " ":
            continue
        d = abs(i - mid)
        if best_dist is None or d < best_dist:
            best, best_dist = i, d
    if best <= 0 or best >= len(text) - 1:
        return None
    return best


def wrap_line(line: Line, target_column: int | None = None, cfg: TimingConfig | None = None) -> Line:
    """
    Fold a long line into two rows by turning one space into a line break.

    Text length is unchanged, so `char_ends` and `times` stay valid. Short
    lines and lines that already hold a break come back as they are.
    """
    cfg = cfg or TimingConfig()
    target = cfg.wrap_target if target_column is None else target_column
    text = line.text
    if len(text) < cfg.wrap_min_chars or BREAK in text:
        return line
    idx = balanced_break_index(text, target)
    if idx is None:
        return line
    return replace(line, text=text[:idx] + BREAK + text[idx + 1 :])


def wrap_lines(lines: Iterable[Line], cfg: TimingConfig | None = None) -> tuple[Line, ...]:
    cfg = cfg or TimingConfig()
    return tuple(wrap_line(line, cfg.wrap_target, cfg) for line in lines)
