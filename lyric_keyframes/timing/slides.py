from __future__ import annotations

from typing import Sequence

from lyric_keyframes.config import TimingConfig

from .model import Line, Slide

MIN_SLIDE_DURATION = 0.1  # s


def _fill_blocks(lines: Sequence[Line], cfg: TimingConfig) -> list[list[Line]]:
    blocks: list[list[Line]] = []
    i = 0
    n = len(lines)
    while i < n:
        block = list(lines[i : i + cfg.min_lines_per_slide])
        i += len(block)
        chars = sum(len(line.text) for line in block)

        while len(block) < cfg.max_lines_per_slide and i < n:
            cand = lines[i]
            if cand.start - block[0].start > cfg.max_join_gap:
                break
            if chars + len(cand.text) > cfg.max_chars_per_slide:
                break
            block.append(cand)
            chars += len(cand.text)
            i += 1

        blocks.append(block)

    # Avoid a bare one-line slide at the end when the previous one can spare a line.
    if len(blocks) >= 2 and len(blocks[-1]) == 1 and len(blocks[-2]) > cfg.min_lines_per_slide:
        blocks[-1].insert(0, blocks[-2].pop())

    return blocks


def group_slides(lines: Sequence[Line], cfg: TimingConfig | None = None) -> tuple[Slide, ...]:
    """
    Partition timed lines into multi-line slides.

    Each slide is seeded with `min_lines_per_slide` lines and then extended
    up to `max_lines_per_slide` while the next line starts within
    `max_join_gap` of the slide's first line and the slide stays within
    `max_chars_per_slide`. Only the last slide may fall below the minimum.

    A slide ends `slide_tail_pad` after its last line, but never later than
    `slide_gap` before the next slide starts (and never sooner than
    `MIN_SLIDE_DURATION` after its own start).
    """
    cfg = cfg or TimingConfig()
    blocks = _fill_blocks(lines, cfg)

    starts = [min(line.start for line in block) for block in blocks]
    slides: list[Slide] = []
    for k, block in enumerate(blocks):
        start = starts[k]
        end = max(line.end for line in block) + cfg.slide_tail_pad
        if k + 1 < len(blocks):
            end = min(end, starts[k + 1] - cfg.slide_gap)
            end = max(end, start + MIN_SLIDE_DURATION)
        slides.append(Slide(index=k + 1, start=start, end=end, lines=tuple(block)))
    return tuple(slides)
