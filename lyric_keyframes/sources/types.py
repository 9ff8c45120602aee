from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lyric_keyframes.timing.model import Line, NormalizedWord
from lyric_keyframes.timing.words import WordStreamStats

STRATEGIES = ("word", "api", "wordwrap")


class SongNotFound(LookupError):
    pass


@dataclass(frozen=True, slots=True)
class PreparedSong:
    """Everything derived from one song's aligned payload."""

    song_id: str
    data: dict[str, Any]
    words: tuple[NormalizedWord, ...]
    stats: WordStreamStats
    lines_word: tuple[Line, ...]
    lines_wrapped: tuple[Line, ...]
    lines_api: tuple[Line, ...]

    def lines(self, strategy: str = "word") -> tuple[Line, ...]:
        if strategy == "word":
            return self.lines_word
        if strategy == "wordwrap":
            return self.lines_wrapped
        if strategy == "api":
            return self.lines_api
        raise ValueError(f"strategy must be one of: {', '.join(STRATEGIES)}")

