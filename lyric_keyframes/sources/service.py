from __future__ import annotations

import logging
from typing import Any

from lyric_keyframes.config import AppConfig, TimingConfig
from lyric_keyframes.timing.lines import group_lines
from lyric_keyframes.timing.model import Slide
from lyric_keyframes.timing.slides import group_slides
from lyric_keyframes.timing.words import build_api_lines, build_words_with_stats, extract_records
from lyric_keyframes.timing.wrap import wrap_lines

from .base import AlignedSource
from .files import JsonFileSource
from .suno import SunoAlignedSource
from .types import PreparedSong, SongNotFound

logger = logging.getLogger(__name__)


def prepare_song(song_id: str, data: dict[str, Any], timing: TimingConfig) -> PreparedSong:
    """
    Run the whole pipeline over one payload.
    Raises NoUsableRecords when the payload has no usable words.
    """
    words, stats = build_words_with_stats(
        extract_records(data), data, seconds_ceiling=timing.seconds_ceiling
    )
    lines_word = group_lines(words, timing)
    logger.debug(
        "%s: %s/%s records -> %s words -> %s lines",
        song_id, stats.words_total, stats.records_total, len(words), len(lines_word),
    )
    return PreparedSong(
        song_id=song_id,
        data=data,
        words=words,
        stats=stats,
        lines_word=lines_word,
        lines_wrapped=wrap_lines(lines_word, timing),
        lines_api=build_api_lines(data, seconds_ceiling=timing.seconds_ceiling),
    )


class TimingService:
    """
    Fetches aligned payloads and caches prepared songs for the lifetime of
    the process. A song is recomputed only on an explicit refresh.
    """

    def __init__(self, cfg: AppConfig, sources: list[AlignedSource] | None = None):
        self.cfg = cfg
        self.sources = sources if sources is not None else self._build_sources(cfg)
        self._cache: dict[str, PreparedSong] = {}

    @staticmethod
    def _build_sources(cfg: AppConfig) -> list[AlignedSource]:
        out: list[AlignedSource] = []
        for s in cfg.sources:
            name = s.strip().lower()
            if name == "suno":
                out.append(
                    SunoAlignedSource(
                        api_base=cfg.api_base,
                        session_token=cfg.session_token,
                        timeout_s=cfg.request_timeout_s,
                    )
                )
            elif name == "file":
                out.append(JsonFileSource(cfg.config_dir / "songs"))
            else:
                logger.info("Unknown source '%s' in config, skipping", s)
        return out

    def fetch(self, song_id: str) -> dict[str, Any]:
        for src in self.sources:
            res = src.fetch(song_id)
            if res.data:
                logger.info("Got aligned lyrics for %s from %s", song_id, res.source)
                return res.data
            if res.definitive_not_found:
                logger.debug("%s: %s has no aligned lyrics", src.name, song_id)
        raise SongNotFound(f"no aligned lyrics for song {song_id}")

    def prepare(self, song_id: str, *, refresh: bool = False) -> PreparedSong:
        if not refresh and song_id in self._cache:
            return self._cache[song_id]
        return self.prepare_from_data(song_id, self.fetch(song_id))

    def prepare_from_data(self, song_id: str, data: dict[str, Any]) -> PreparedSong:
        prepared = prepare_song(song_id, data, self.cfg.timing)
        self._cache[song_id] = prepared
        return prepared

    def slides(self, song_id: str, strategy: str = "word") -> tuple[Slide, ...]:
        return group_slides(self.prepare(song_id).lines(strategy), self.cfg.timing)
