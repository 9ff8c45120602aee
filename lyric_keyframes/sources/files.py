from __future__ import annotations

import json
import logging
from pathlib import Path

from .base import AlignedSource, FetchResult

logger = logging.getLogger(__name__)


class JsonFileSource(AlignedSource):
    """Reads previously saved payloads from `<directory>/<song_id>.json`."""

    name = "file"

    def __init__(self, directory: Path):
        self.directory = directory

    def fetch(self, song_id: str) -> FetchResult:
        path = self.directory / f"{song_id}.json"
        if not path.exists():
            return FetchResult(None, True, self.name)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Cannot read %s: %s", path, e)
            return FetchResult(None, False, self.name)
        if not isinstance(data, dict):
            logger.warning("%s does not hold a JSON object", path)
            return FetchResult(None, False, self.name)
        return FetchResult(data, False, self.name)
