from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class FetchResult:
    data: dict[str, Any] | None
    definitive_not_found: bool
    source: str


class AlignedSource:
    name: str

    def fetch(self, song_id: str) -> FetchResult:
        raise NotImplementedError
