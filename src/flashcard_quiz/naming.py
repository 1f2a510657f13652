"""Collision-free deck names.

Resolution is read-then-write: the name is free at the time it is checked,
nothing reserves it until the caller creates the deck.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .models import Deck

logger = logging.getLogger(__name__)


def resolve_deck_name(base_name: str, find_deck_by_name: Callable[[str], Optional[Deck]]) -> str:
    """Return ``base_name`` (trimmed) or the first free ``"<base> (n)"`` variant.

    Args:
        base_name: Desired deck name
        find_deck_by_name: Case-insensitive lookup returning a deck or None

    Returns:
        A name no existing deck matches case-insensitively
    """
    name = (base_name or "").strip()
    if find_deck_by_name(name) is None:
        return name

    counter = 1
    while True:
        candidate = f"{name} ({counter})"
        if find_deck_by_name(candidate) is None:
            logger.debug("Deck name %r taken, using %r", name, candidate)
            return candidate
        counter += 1
