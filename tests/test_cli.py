from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from lyric_keyframes.cli import app

runner = CliRunner()


@pytest.fixture
def payload_file(tmp_path, aligned_payload):
    path = tmp_path / "song1.json"
    path.write_text(json.dumps(aligned_payload), encoding="utf-8")
    return path


def test_lines_command(payload_file):
    result = runner.invoke(app, ["lines", str(payload_file)])
    assert result.exit_code == 0
    assert "Hello world" in result.stdout
    assert "Goodbye moon." in result.stdout


def test_lines_gap_override(payload_file):
    result = runner.invoke(app, ["lines", str(payload_file), "--gap-break", "5"])
    assert result.exit_code == 0
    assert "Hello world Goodbye moon." in result.stdout


def test_bad_strategy(payload_file):
    result = runner.invoke(app, ["lines", str(payload_file), "--strategy", "nope"])
    assert result.exit_code != 0


def test_export_json_slides(payload_file):
    result = runner.invoke(app, ["export", str(payload_file), "--slides", "--chunk", "2"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["kind"] == "slides"
    assert data["highlight_chunk"] == 2


def test_export_srt_to_file(payload_file, tmp_path):
    out = tmp_path / "out.srt"
    result = runner.invoke(app, ["export", str(payload_file), "--format", "srt", "--out", str(out)])
    assert result.exit_code == 0
    assert "00:00:00,000 --> 00:00:00,900" in out.read_text(encoding="utf-8")


def test_stats_command(payload_file):
    result = runner.invoke(app, ["stats", str(payload_file)])
    assert result.exit_code == 0
    assert "records_total=5" in result.stdout
    assert "dropped_empty=1" in result.stdout
    assert "suspected_unit=seconds" in result.stdout


def test_no_usable_records_exit_code(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text(json.dumps({"aligned_words": [{"word": "[Outro]", "start_s": 0, "end_s": 1}]}), encoding="utf-8")
    result = runner.invoke(app, ["words", str(path)])
    assert result.exit_code == 1


def test_unknown_song_id_exit_code(monkeypatch):
    monkeypatch.setenv("LYRIC_KEYFRAMES_SOURCES", "file")
    result = runner.invoke(app, ["words", "no-such-song"])
    assert result.exit_code == 1


def test_configure_saves_timing(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    result = runner.invoke(app, ["configure", "gap_break=0.6", "max_words=8"])
    assert result.exit_code == 0
    data = json.loads((tmp_path / "lyric-keyframes" / "config.json").read_text(encoding="utf-8"))
    assert data["timing"] == {"gap_break": 0.6, "max_words": 8}


def test_configure_rejects_bad_value(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    result = runner.invoke(app, ["configure", "max_words=0"])
    assert result.exit_code == 1
