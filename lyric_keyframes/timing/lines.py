from __future__ import annotations

from typing import Sequence

from lyric_keyframes.config import TimingConfig

from .model import Line, NormalizedWord
from .text import ends_sentence, join_tokens, needs_space

SENTENCE_GAP_FACTOR = 0.6


def make_line(chunk: Sequence[NormalizedWord]) -> Line:
    text, char_ends, times = join_tokens(chunk)
    return Line(
        start=chunk[0].start,
        end=chunk[-1].end,
        text=text,
        char_ends=char_ends,
        times=times,
    )


def should_cut(chunk: Sequence[NormalizedWord], chunk_len: int, word: NormalizedWord, cfg: TimingConfig) -> bool:
    """
    Whether `word` has to start a new line instead of extending `chunk`.
    `chunk_len` is the length of the chunk's joined text.
    """
    last = chunk[-1]
    gap = max(0.0, word.start - last.end)
    if gap > cfg.gap_break:
        return True
    if word.end - chunk[0].start > cfg.max_line_duration:
        return True
    joined_len = chunk_len + (1 if needs_space(last.text, word.text) else 0) + len(word.text)
    if joined_len > cfg.max_chars:
        return True
    if len(chunk) >= cfg.max_words:
        return True
    # prefer sentence boundaries on shorter pauses
    return ends_sentence(last.text) and gap > cfg.gap_break * SENTENCE_GAP_FACTOR


def group_lines(words: Sequence[NormalizedWord], cfg: TimingConfig | None = None) -> tuple[Line, ...]:
    """
    Greedy left-to-right partition of words into display lines.

    Decisions are final: a cut is never revisited. A single word longer than
    `max_chars` still forms its own line.
    """
    cfg = cfg or TimingConfig()
    lines: list[Line] = []
    chunk: list[NormalizedWord] = []
    chunk_len = 0

    for w in words:
        if chunk and should_cut(chunk, chunk_len, w, cfg):
            lines.append(make_line(chunk))
            chunk = []
            chunk_len = 0
        if chunk and needs_space(chunk[-1].text, w.text):
            chunk_len += 1
        chunk_len += len(w.text)
        chunk.append(w)

    if chunk:
        lines.append(make_line(chunk))
    return tuple(lines)
