from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Sequence

from lyric_keyframes.timing.model import Line, Slide


@dataclass(slots=True)
class UnitTracker:
    """
    Active line/slide lookup: O(log n) via bisect + report only on change.
    A unit stays active after its end until the next one starts.
    """

    starts: list[float]
    last_idx: int = -1

    @classmethod
    def from_units(cls, units: Sequence[Line | Slide]) -> "UnitTracker":
        return cls(starts=[u.start for u in units])

    def current_index(self, now_s: float) -> int:
        i = bisect_right(self.starts, now_s) - 1
        return i if i >= 0 else -1

    def changed_index(self, now_s: float) -> int | None:
        i = self.current_index(now_s)
        if i != self.last_idx:
            self.last_idx = i
            return i
        return None
