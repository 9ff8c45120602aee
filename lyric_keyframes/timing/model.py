from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TimeSpan:
    start: float
    end: float


@dataclass(frozen=True, slots=True)
class NormalizedWord:
    start: float
    end: float
    text: str


@dataclass(frozen=True, slots=True)
class Line:
    """
    `times[i]` is the moment the prefix `text[:char_ends[i]]` becomes revealed.
    """

    start: float
    end: float
    text: str
    char_ends: tuple[int, ...]
    times: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class Slide:
    index: int  # 1-based
    start: float
    end: float
    lines: tuple[Line, ...]

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)


@dataclass(frozen=True, slots=True)
class Keyframe:
    time: float
    percent: float


KeyframeSchedule = tuple[Keyframe, ...]
