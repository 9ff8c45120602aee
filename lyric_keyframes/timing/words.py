from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .errors import EmptyAfterCleaning, NoUsableRecords, Unresolvable
from .model import Line, NormalizedWord, TimeSpan
from .text import clean_text
from .units import DEFAULT_SECONDS_CEILING, resolve_times, sample_rate_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WordStreamStats:
    records_total: int
    words_total: int
    dropped_unresolvable: int
    dropped_empty: int
    dropped_non_positive: int
    rescaled: bool


def record_text(record: Mapping[str, Any]) -> str:
    word = record.get("word")
    if isinstance(word, str):
        return word
    return str(record.get("text") or "")


def extract_records(data: Mapping[str, Any] | None) -> list[Mapping[str, Any]]:
    """
    Word-level records of an aligned-lyrics payload.

    Prefers `aligned_words`; line-level `aligned_lyrics` are used as
    word-shaped records when no word array is present.
    """
    if not data:
        return []
    words = data.get("aligned_words")
    if isinstance(words, list):
        return [r for r in words if isinstance(r, Mapping)]
    lines = data.get("aligned_lyrics")
    if isinstance(lines, list):
        return [r for r in lines if isinstance(r, Mapping)]
    return []


def normalize_record(
    record: Mapping[str, Any],
    sample_rate: float | None,
    *,
    seconds_ceiling: float = DEFAULT_SECONDS_CEILING,
) -> tuple[TimeSpan, str]:
    """Raises Unresolvable or EmptyAfterCleaning."""
    span = resolve_times(record, sample_rate, seconds_ceiling=seconds_ceiling)
    text = clean_text(record_text(record))
    if not text:
        raise EmptyAfterCleaning("record text is empty after cleaning")
    return span, text


def _normalized_spans(
    records: Iterable[Mapping[str, Any]],
    meta: Mapping[str, Any] | None,
    seconds_ceiling: float,
) -> tuple[list[tuple[TimeSpan, str]], dict[str, int]]:
    sample_rate = sample_rate_of(meta)
    out: list[tuple[TimeSpan, str]] = []
    counts = {"total": 0, "unresolvable": 0, "empty": 0, "non_positive": 0}

    for rec in records:
        counts["total"] += 1
        try:
            span, text = normalize_record(rec, sample_rate, seconds_ceiling=seconds_ceiling)
        except Unresolvable as e:
            counts["unresolvable"] += 1
            logger.debug("Dropping record #%s: %s", counts["total"], e)
            continue
        except EmptyAfterCleaning:
            counts["empty"] += 1
            continue
        if span.end <= span.start:
            counts["non_positive"] += 1
            logger.debug("Dropping record #%s: non-positive duration %s", counts["total"], span)
            continue
        out.append((span, text))

    return out, counts


def build_words_with_stats(
    records: Iterable[Mapping[str, Any]],
    meta: Mapping[str, Any] | None = None,
    *,
    seconds_ceiling: float = DEFAULT_SECONDS_CEILING,
) -> tuple[tuple[NormalizedWord, ...], WordStreamStats]:
    spans, counts = _normalized_spans(records, meta, seconds_ceiling)

    # Every pair may pass the per-record check while the song as a whole is in ms.
    rescaled = bool(spans) and max(span.end for span, _ in spans) > seconds_ceiling
    scale = 1000.0 if rescaled else 1.0
    if rescaled:
        logger.info("Max end exceeds %.0fs, rescaling all words from ms", seconds_ceiling)

    words = [NormalizedWord(start=span.start / scale, end=span.end / scale, text=text) for span, text in spans]
    words.sort(key=lambda w: w.start)

    stats = WordStreamStats(
        records_total=counts["total"],
        words_total=len(words),
        dropped_unresolvable=counts["unresolvable"],
        dropped_empty=counts["empty"],
        dropped_non_positive=counts["non_positive"],
        rescaled=rescaled,
    )
    if not words:
        raise NoUsableRecords(f"none of {counts['total']} records produced a usable word")
    return tuple(words), stats


def build_words(
    records: Iterable[Mapping[str, Any]],
    meta: Mapping[str, Any] | None = None,
    *,
    seconds_ceiling: float = DEFAULT_SECONDS_CEILING,
) -> tuple[NormalizedWord, ...]:
    """
    Normalize an ordered sequence of raw records into words sorted by start.

    Records with unresolvable times or blank text are dropped. Raises
    NoUsableRecords when nothing is left.
    """
    words, _stats = build_words_with_stats(records, meta, seconds_ceiling=seconds_ceiling)
    return words


def build_api_lines(
    data: Mapping[str, Any] | None,
    *,
    seconds_ceiling: float = DEFAULT_SECONDS_CEILING,
) -> tuple[Line, ...]:
    """
    Lines taken as-is from the payload's own `aligned_lyrics` records.
    Each line reveals in one step at its end. Empty when the payload has none.
    """
    if not data or not isinstance(data.get("aligned_lyrics"), list):
        return ()
    records = [r for r in data["aligned_lyrics"] if isinstance(r, Mapping)]
    spans, _counts = _normalized_spans(records, data, seconds_ceiling)
    if not spans:
        return ()

    scale = 1000.0 if max(span.end for span, _ in spans) > seconds_ceiling else 1.0
    lines = [
        Line(
            start=span.start / scale,
            end=span.end / scale,
            text=text,
            char_ends=(len(text),),
            times=(span.end / scale,),
        )
        for span, text in spans
    ]
    lines.sort(key=lambda line: line.start)
    return tuple(lines)


def timing_stats(words: Iterable[NormalizedWord], *, seconds_ceiling: float = DEFAULT_SECONDS_CEILING) -> dict[str, Any]:
    ws = list(words)
    if not ws:
        return {"total_words": 0}
    max_end = max(w.end for w in ws)
    return {
        "total_words": len(ws),
        "max_start": max(w.start for w in ws),
        "max_end": max_end,
        "avg_duration": sum(w.end - w.start for w in ws) / len(ws),
        "suspected_unit": "milliseconds" if max_end > seconds_ceiling else "seconds",
    }
