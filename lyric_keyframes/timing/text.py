from __future__ import annotations

import re
from typing import Sequence

from .model import NormalizedWord

_BRACKET_RE = re.compile(r"\[[^\]]*\]")  # [Verse], [Chorus 2], ...
_WS_RE = re.compile(r"\s+")
_PUNCT_TOKEN_RE = re.compile(r"^[.,!?:;…)\]}]+$")
_SENTENCE_END_RE = re.compile(r"[.!?…]$")


def clean_text(raw: str | None) -> str:
    """
    Drop bracketed annotations, collapse whitespace, trim.
    An empty result means the record carries no displayable text.
    """
    s = _BRACKET_RE.sub("", str(raw or ""))
    return _WS_RE.sub(" ", s).strip()


def is_punct_token(tok: str) -> bool:
    return bool(_PUNCT_TOKEN_RE.match(tok))


def ends_sentence(tok: str) -> bool:
    return bool(_SENTENCE_END_RE.search(tok))


def needs_space(prev_tok: str | None, tok: str) -> bool:
    return prev_tok is not None and not is_punct_token(tok)


def join_tokens(words: Sequence[NormalizedWord]) -> tuple[str, tuple[int, ...], tuple[float, ...]]:
    """
    Join word tokens into display text.

    Returns (text, char_ends, times) where char_ends[i] is the text length
    right after word i and times[i] is word i's end.
    """
    text = ""
    char_ends: list[int] = []
    times: list[float] = []
    prev: str | None = None
    for w in words:
        if needs_space(prev, w.text):
            text += " "
        text += w.text
        char_ends.append(len(text))
        times.append(w.end)
        prev = w.text
    return text, tuple(char_ends), tuple(times)
