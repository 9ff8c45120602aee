from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import Unresolvable
from .model import TimeSpan

DEFAULT_SECONDS_CEILING = 600.0

SAMPLE_RATE_KEYS = ("sample_rate", "sampleRate", "audio_sample_rate")

SECONDS = "seconds"
SAMPLES = "samples"
MILLISECONDS = "milliseconds"
GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class FieldRule:
    category: str
    start_keys: tuple[str, ...]
    end_keys: tuple[str, ...]


# Ranked by confidence: explicit units, then inferred, then magnitude-guessed.
RULES: tuple[FieldRule, ...] = (
    FieldRule(SECONDS, ("start_s", "startS", "s", "begin_s"), ("end_s", "endS", "e", "finish_s")),
    FieldRule(SAMPLES, ("start_sample", "sample_start", "startFrame"), ("end_sample", "sample_end", "endFrame")),
    FieldRule(MILLISECONDS, ("start_ms", "startMs", "ms_start"), ("end_ms", "endMs", "ms_end")),
    FieldRule(GENERIC, ("start", "begin", "t0"), ("end", "finish", "t1")),
)

# Order used when start and end are resolved independently.
FALLBACK_ORDER = (SECONDS, GENERIC, SAMPLES, MILLISECONDS)


def to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def pick_number(record: Mapping[str, Any], keys: tuple[str, ...]) -> float | None:
    """First key whose value converts to a finite number."""
    for k in keys:
        n = to_number(record.get(k))
        if n is not None:
            return n
    return None


def sample_rate_of(meta: Mapping[str, Any] | None) -> float | None:
    if not meta:
        return None
    sr = pick_number(meta, SAMPLE_RATE_KEYS)
    return sr if sr is not None and sr > 0 else None


def _to_seconds(category: str, value: float | None, sample_rate: float | None) -> float | None:
    if value is None:
        return None
    if category == SAMPLES:
        return value / sample_rate if sample_rate else None
    if category == MILLISECONDS:
        return value / 1000.0
    return value


def resolve_times(
    record: Mapping[str, Any],
    sample_rate: float | None = None,
    *,
    seconds_ceiling: float = DEFAULT_SECONDS_CEILING,
) -> TimeSpan:
    """
    Best-guess (start, end) in seconds for one raw record.

    Rules in `RULES` are tried in order and the first fully-populated pair
    wins. Generic pairs whose larger value exceeds `seconds_ceiling` are read
    as milliseconds. If no rule yields a pair, start and end are resolved
    independently in `FALLBACK_ORDER`.

    Raises Unresolvable when either side stays missing.
    """
    raw: dict[str, tuple[float | None, float | None]] = {}
    for rule in RULES:
        s = pick_number(record, rule.start_keys)
        e = pick_number(record, rule.end_keys)
        raw[rule.category] = (s, e)
        if s is None or e is None:
            continue

        if rule.category == SAMPLES:
            if not sample_rate:
                continue
            return TimeSpan(start=s / sample_rate, end=e / sample_rate)
        if rule.category == GENERIC and max(s, e) > seconds_ceiling:
            return TimeSpan(start=s / 1000.0, end=e / 1000.0)
        return TimeSpan(
            start=_to_seconds(rule.category, s, sample_rate),
            end=_to_seconds(rule.category, e, sample_rate),
        )

    start = end = None
    for category in FALLBACK_ORDER:
        s, e = raw[category]
        if start is None:
            start = _to_seconds(category, s, sample_rate)
        if end is None:
            end = _to_seconds(category, e, sample_rate)

    if start is None or end is None:
        raise Unresolvable(f"no usable time fields in record with keys {sorted(record)}")
    return TimeSpan(start=start, end=end)
