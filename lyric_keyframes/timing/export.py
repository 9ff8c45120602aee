from __future__ import annotations

import json
from typing import Sequence

from .highlight import schedule_line, schedule_slide
from .model import KeyframeSchedule, Line, Slide


def _r(t: float) -> float:
    return round(t, 3)


def _keys_json(schedule: KeyframeSchedule, offset_s: float) -> list[dict[str, float]]:
    return [{"t": _r(k.time + offset_s), "pct": round(k.percent, 3)} for k in schedule]


def _line_json(line: Line, schedule: KeyframeSchedule, offset_s: float) -> dict:
    return {
        "start": _r(line.start + offset_s),
        "end": _r(line.end + offset_s),
        "text": line.text,
        "char_ends": list(line.char_ends),
        "times": [_r(t + offset_s) for t in line.times],
        "keyframes": _keys_json(schedule, offset_s),
    }


def export_lines_json(lines: Sequence[Line], *, chunk: int = 1, offset_s: float = 0.0) -> str:
    """
    Data contract for script generators: lines with their reveal keyframes.
    `offset_s` shifts every time (may be negative).
    """
    return json.dumps(
        {
            "kind": "lines",
            "highlight_chunk": chunk,
            "offset_s": offset_s,
            "lines": [_line_json(line, schedule_line(line, chunk), offset_s) for line in lines],
        },
        ensure_ascii=False,
        indent=2,
    )


def export_slides_json(slides: Sequence[Slide], *, chunk: int = 1, offset_s: float = 0.0) -> str:
    out = []
    for s in slides:
        schedules = schedule_slide(s, chunk)
        out.append(
            {
                "index": s.index,
                "start": _r(s.start + offset_s),
                "end": _r(s.end + offset_s),
                "lines": [_line_json(line, sch, offset_s) for line, sch in zip(s.lines, schedules)],
            }
        )
    return json.dumps(
        {"kind": "slides", "highlight_chunk": chunk, "offset_s": offset_s, "slides": out},
        ensure_ascii=False,
        indent=2,
    )


def _to_ms(t: float, offset_s: float) -> int:
    return max(0, int(round((t + offset_s) * 1000)))


def _fmt_srt_time(ms: int) -> str:
    # HH:MM:SS,mmm
    h, rem = divmod(ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms2 = divmod(rem, 1_000)
    return f"{h:02d}:{m:02d}:{s:02d},{ms2:03d}"


def export_srt(units: Sequence[Line | Slide], *, offset_s: float = 0.0) -> str:
    """One cue per line or slide, using the unit's own start and end."""
    out: list[str] = []
    for i, u in enumerate(units, start=1):
        start = _to_ms(u.start, offset_s)
        end = max(_to_ms(u.end, offset_s), start + 1)
        out.append(str(i))
        out.append(f"{_fmt_srt_time(start)} --> {_fmt_srt_time(end)}")
        out.append(u.text)
        out.append("")
    return "\n".join(out)


def _fmt_lrc_time(ms: int) -> str:
    m, rem = divmod(ms, 60_000)
    s, ms2 = divmod(rem, 1_000)
    return f"{m:02d}:{s:02d}.{ms2 // 10:02d}"


def export_lrc(lines: Sequence[Line], *, offset_s: float = 0.0, word_tags: bool = False) -> str:
    """
    LRC with one entry per line. With `word_tags`, each word's reveal time is
    inlined as an enhanced-LRC `<mm:ss.xx>` tag after it.
    """
    out: list[str] = []
    for line in lines:
        text = line.text.replace("\n", " ")
        if word_tags:
            parts: list[str] = []
            prev = 0
            for ce, t in zip(line.char_ends, line.times):
                parts.append(text[prev:ce])
                parts.append(f"<{_fmt_lrc_time(_to_ms(t, offset_s))}>")
                prev = ce
            text = "".join(parts)
        out.append(f"[{_fmt_lrc_time(_to_ms(line.start, offset_s))}]{text}")
    return "\n".join(out) + ("\n" if out else "")
