"""Tests for configuration loading."""

import json
import tempfile
from pathlib import Path

import pytest

from flashcard_quiz.config import DEFAULT_CONFIG, load_config, make_rng
from flashcard_quiz.errors import DeckIOError, ParseError


class TestLoadConfig:
    """Test config defaults and overrides."""

    def test_missing_file_returns_defaults(self):
        assert load_config("does/not/exist.json") == DEFAULT_CONFIG
        assert load_config(None) == DEFAULT_CONFIG

    def test_overrides(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "cfg.json"
            path.write_text(json.dumps({"review_count": 3, "random_seed": 9}), encoding="utf-8")
            cfg = load_config(path)
        assert cfg["review_count"] == 3
        assert cfg["database_path"] == DEFAULT_CONFIG["database_path"]

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "cfg.json"
            path.write_text("{", encoding="utf-8")
            with pytest.raises(ParseError):
                load_config(path)

    def test_unreadable_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(DeckIOError):
                load_config(tmpdir)

    def test_seeded_rng(self):
        a = make_rng({"random_seed": 4})
        b = make_rng({"random_seed": 4})
        assert a.random() == b.random()
