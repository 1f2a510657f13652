"""Flashcard Quiz: decks of question/answer cards, quizzes and deck files.

The core is answer matching (``matching``) and deck import/export
(``csv_codec``, ``naming``, ``transfer``); ``store``, ``console`` and
``cli`` are the plumbing around it.
"""

__all__ = [
    "errors",
    "models",
    "csv_codec",
    "matching",
    "naming",
    "store",
    "transfer",
    "quiz",
    "config",
    "console",
    "cli",
]
