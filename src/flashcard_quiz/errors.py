"""Exception hierarchy shared by the store, transfer and quiz layers.

Every error is reported to the caller and caught at the console/CLI
boundary; none of them is retried automatically.
"""

from __future__ import annotations

from typing import Iterable, List


class FlashcardError(Exception):
    """Base class for all flashcard errors."""


class ValidationError(FlashcardError, ValueError):
    """Blank, oversized or missing required input.

    Attributes:
        violations: Human-readable list of everything that failed validation
    """

    def __init__(self, violations: Iterable[str] | str) -> None:
        if isinstance(violations, str):
            violations = [violations]
        self.violations: List[str] = list(violations)
        super().__init__("; ".join(self.violations))


class NotFoundError(FlashcardError, FileNotFoundError):
    """A file, deck or card that was asked for does not exist."""


class DeckIOError(FlashcardError, OSError):
    """File system failure while reading or writing a deck file."""


class ParseError(FlashcardError, ValueError):
    """Malformed JSON or an unexpected JSON shape."""
