from __future__ import annotations

import json

import pytest

from lyric_keyframes.config import TimingConfig, load_config, save_timing
from lyric_keyframes.timing.errors import ConfigError


class TestTimingConfig:
    def test_defaults(self):
        cfg = TimingConfig()
        assert cfg.gap_break == 0.45
        assert cfg.max_words == 14
        assert cfg.seconds_ceiling == 600.0
        assert (cfg.min_lines_per_slide, cfg.max_lines_per_slide) == (2, 4)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_words": 0},
            {"max_chars": -1},
            {"gap_break": 0},
            {"highlight_chunk": 0},
            {"slide_gap": -0.1},
            {"min_lines_per_slide": 5, "max_lines_per_slide": 4},
            {"min_lines_per_slide": 0},
            {"seconds_ceiling": 0},
        ],
    )
    def test_invalid_values_fail_fast(self, kwargs):
        with pytest.raises(ConfigError):
            TimingConfig(**kwargs)

    def test_overrides_are_coerced(self):
        cfg = TimingConfig().with_overrides({"gap_break": "0.5", "max_words": "3", "wrap_target": None})
        assert cfg.gap_break == 0.5
        assert cfg.max_words == 3
        assert isinstance(cfg.max_words, int)
        assert cfg.wrap_target == 36

    def test_unknown_override(self):
        with pytest.raises(ConfigError):
            TimingConfig().with_overrides({"nope": 1})

    def test_non_numeric_override(self):
        with pytest.raises(ConfigError):
            TimingConfig().with_overrides({"gap_break": "fast"})

    @pytest.mark.parametrize("value", [2.9, "2.9"])
    def test_fractional_int_override_rejected(self, value):
        with pytest.raises(ConfigError):
            TimingConfig().with_overrides({"max_words": value})

    def test_integral_float_override_accepted(self):
        cfg = TimingConfig().with_overrides({"max_words": 3.0})
        assert cfg.max_words == 3
        assert isinstance(cfg.max_words, int)


class TestLoadConfig:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LYRIC_KEYFRAMES_GAP_BREAK", "0.7")
        monkeypatch.setenv("LYRIC_KEYFRAMES_SOURCES", "file, suno")
        cfg = load_config()
        assert cfg.timing.gap_break == 0.7
        assert cfg.sources == ("file", "suno")

    def test_config_file_over_env(self, tmp_path, monkeypatch):
        (tmp_path / "lyric-keyframes").mkdir(parents=True)
        (tmp_path / "lyric-keyframes" / "config.json").write_text(
            '{"timing": {"gap_break": 0.3}}', encoding="utf-8"
        )
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.setenv("LYRIC_KEYFRAMES_GAP_BREAK", "0.7")
        monkeypatch.setenv("LYRIC_KEYFRAMES_MAX_WORDS", "5")

        cfg = load_config()
        assert cfg.timing.gap_break == 0.3
        assert cfg.timing.max_words == 5

    def test_unreadable_config_file_ignored(self, tmp_path, monkeypatch):
        (tmp_path / "lyric-keyframes").mkdir(parents=True)
        (tmp_path / "lyric-keyframes" / "config.json").write_text("{broken", encoding="utf-8")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert load_config().timing == TimingConfig()

    def test_save_timing_and_load(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        path = save_timing({"max_chars": "30"})
        save_timing({"wrap_target": 20})
        assert json.loads(path.read_text(encoding="utf-8"))["timing"] == {"max_chars": 30, "wrap_target": 20}

        cfg = load_config()
        assert cfg.timing.max_chars == 30
        assert cfg.timing.wrap_target == 20

    def test_save_timing_rejects_invalid(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        with pytest.raises(ConfigError):
            save_timing({"max_words": 0})
        assert not (tmp_path / "lyric-keyframes" / "config.json").exists()

    def test_save_timing_validates_against_saved_section(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        save_timing({"max_lines_per_slide": 3})

        with pytest.raises(ConfigError):
            save_timing({"min_lines_per_slide": 4})

        path = tmp_path / "lyric-keyframes" / "config.json"
        assert json.loads(path.read_text(encoding="utf-8"))["timing"] == {"max_lines_per_slide": 3}
        assert load_config().timing.max_lines_per_slide == 3
