"""JSON configuration with built-in defaults."""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Optional

from .errors import DeckIOError, ParseError

DEFAULT_CONFIG = {
    "database_path": "flashcards.db",
    "export_dir": "exports",
    "review_threshold": 0.6,
    "review_count": 10,
    "log_level": "WARNING",
    "random_seed": None,
}


def load_config(path: Optional[str | Path]) -> dict:
    """Load config from ``path``; a missing file yields the defaults.

    Keys present in the file override the defaults, unknown keys are kept.
    """
    cfg = dict(DEFAULT_CONFIG)
    if path is None:
        return cfg
    path = Path(path)
    if not path.exists():
        return cfg
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in config file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"Config file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise DeckIOError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"Config file {path} must contain a JSON object")
    cfg.update(data)
    return cfg


def make_rng(cfg: dict) -> random.Random:
    seed = cfg.get("random_seed")
    return random.Random(seed) if seed is not None else random.Random()
