from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

from lyric_keyframes.timing.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "LYRIC_KEYFRAMES_"


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "lyric-keyframes"
    return Path.home() / ".config" / "lyric-keyframes"


def _config_file() -> Path:
    return _config_dir() / "config.json"


def _as_int(v: Any) -> int:
    # "2.9" already fails in int(); floats must not be truncated either
    if isinstance(v, float) and not v.is_integer():
        raise ValueError(f"not an integer: {v!r}")
    return int(v)


@dataclass(frozen=True)
class TimingConfig:
    # Word -> line grouping
    gap_break: float = 0.45  # s: cut if the silence between words exceeds this
    max_line_duration: float = 4.5  # s
    max_chars: int = 42
    max_words: int = 14

    # Balanced wrap
    wrap_min_chars: int = 26  # only wrap lines at least this long
    wrap_target: int = 36  # column the break should land near

    # Highlight
    highlight_chunk: int = 1  # words per reveal step

    # Slides
    min_lines_per_slide: int = 2
    max_lines_per_slide: int = 4
    max_join_gap: float = 8.0  # s from the slide's first line start
    max_chars_per_slide: int = 120
    slide_tail_pad: float = 0.35  # s
    slide_gap: float = 0.05  # s kept free before the next slide

    # ms-vs-seconds disambiguation
    seconds_ceiling: float = 600.0

    def __post_init__(self) -> None:
        positive = ("gap_break", "max_line_duration", "max_chars", "max_words", "wrap_target", "max_chars_per_slide", "seconds_ceiling")
        for name in positive:
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be > 0, got {getattr(self, name)!r}")
        non_negative = ("wrap_min_chars", "max_join_gap", "slide_tail_pad", "slide_gap")
        for name in non_negative:
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0, got {getattr(self, name)!r}")
        if self.highlight_chunk < 1:
            raise ConfigError(f"highlight_chunk must be >= 1, got {self.highlight_chunk!r}")
        if not (1 <= self.min_lines_per_slide <= self.max_lines_per_slide):
            raise ConfigError(
                "need 1 <= min_lines_per_slide <= max_lines_per_slide, "
                f"got {self.min_lines_per_slide}..{self.max_lines_per_slide}"
            )

    def with_overrides(self, overrides: Mapping[str, Any]) -> "TimingConfig":
        """
        Copy with `overrides` applied; values are coerced to the field's type.
        Unknown keys raise ConfigError.
        """
        kinds = {f.name: f.type for f in fields(self)}
        changes: dict[str, Any] = {}
        for k, v in overrides.items():
            if v is None:
                continue
            if k not in kinds:
                raise ConfigError(f"unknown timing option: {k}")
            try:
                changes[k] = _as_int(v) if kinds[k] == "int" else float(v)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"{k}: expected a number, got {v!r}") from e
        return replace(self, **changes)


@dataclass(frozen=True)
class AppConfig:
    config_dir: Path

    # Sources
    sources: tuple[str, ...]
    api_base: str
    session_token: str | None
    request_timeout_s: float

    # Preview
    refresh_hz: float
    use_alt_screen: bool

    timing: TimingConfig = field(default_factory=TimingConfig)


def load_config() -> AppConfig:
    sources_env = os.getenv(ENV_PREFIX + "SOURCES", "suno")
    sources = tuple(s.strip() for s in sources_env.split(",") if s.strip())

    config_dir = _config_dir()
    file_data = _load_file(config_dir)

    return AppConfig(
        config_dir=config_dir,
        sources=sources,
        api_base=os.getenv(ENV_PREFIX + "API_BASE", "https://studio-api.prod.suno.com").rstrip("/"),
        session_token=os.getenv(ENV_PREFIX + "SESSION_TOKEN") or None,
        request_timeout_s=float(os.getenv(ENV_PREFIX + "REQUEST_TIMEOUT", "10.0")),
        refresh_hz=float(os.getenv(ENV_PREFIX + "REFRESH_HZ", "30.0")),
        use_alt_screen=os.getenv(ENV_PREFIX + "ALT_SCREEN", "1") not in ("0", "false", "False"),
        timing=load_timing(file_data.get("timing")),
    )


def load_timing(file_section: Mapping[str, Any] | None = None) -> TimingConfig:
    # Priority: config.json "timing" → LYRIC_KEYFRAMES_<FIELD> → default
    overrides: dict[str, Any] = {}
    for f in fields(TimingConfig):
        env_val = os.getenv(ENV_PREFIX + f.name.upper())
        if env_val:
            overrides[f.name] = env_val
    if isinstance(file_section, Mapping):
        overrides.update(file_section)
    return TimingConfig().with_overrides(overrides)


def _load_file(config_dir: Path) -> dict[str, Any]:
    cfg_path = config_dir / "config.json"
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    return data if isinstance(data, dict) else {}


def save_timing(overrides: Mapping[str, Any]) -> Path:
    """
    Merge `overrides` into the "timing" section of config.json. The merged
    section is validated as a whole before anything is written.
    """
    cfg_path = _config_file()
    data = _load_file(cfg_path.parent)
    timing = data.get("timing")
    timing = dict(timing) if isinstance(timing, dict) else {}
    checked = TimingConfig().with_overrides({**timing, **overrides})
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    timing.update({k: getattr(checked, k) for k, v in overrides.items() if v is not None})
    data["timing"] = timing
    cfg_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return cfg_path
