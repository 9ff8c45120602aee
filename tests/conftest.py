from __future__ import annotations

import os

import pytest


@pytest.fixture
def aligned_payload() -> dict:
    return {
        "aligned_words": [
            {"word": "[Verse 1]", "start_s": 0.0, "end_s": 0.1},
            {"word": "Hello", "start_s": 0.0, "end_s": 0.4},
            {"word": "world", "start_s": 0.5, "end_s": 0.9},
            {"word": "Goodbye", "start_s": 2.0, "end_s": 2.3},
            {"word": "moon.", "start_s": 2.35, "end_s": 2.8},
        ],
        "aligned_lyrics": [
            {"text": "[Verse 1]\nHello world", "start_s": 0.0, "end_s": 0.9},
            {"text": "Goodbye moon.", "start_s": 2.0, "end_s": 2.8},
        ],
    }


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in list(os.environ):
        if name.startswith("LYRIC_KEYFRAMES_"):
            monkeypatch.delenv(name)
