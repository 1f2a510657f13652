"""Answer matching for quiz responses.

Rules, first match wins:
- case-insensitive equality of the trimmed answers
- equality with any alternative in the stored answer (split on ';' or ',')
- substring either way, when the stored answer is longer than 10 characters
  and the response longer than 5
"""

from __future__ import annotations

import re
from typing import List, Optional

from .models import QuizResult

_ALTERNATIVES_RE = re.compile(r"[;,]")

PARTIAL_MIN_CORRECT_LENGTH = 10
PARTIAL_MIN_USER_LENGTH = 5


def split_alternatives(correct_answer: str) -> List[str]:
    """Return the non-blank, trimmed alternatives listed in a stored answer."""
    parts = (p.strip() for p in _ALTERNATIVES_RE.split(correct_answer or ""))
    return [p for p in parts if p]


def is_match(correct_answer: Optional[str], user_answer: Optional[str]) -> bool:
    """Return True if ``user_answer`` is accepted for ``correct_answer``.

    Blank alternatives never take part in the alternative rule, so a stored
    answer like ``";Paris"`` does not accept an empty response even though
    splitting it yields an empty piece.
    """
    correct = (correct_answer or "").strip()
    user = (user_answer or "").strip()
    correct_key = correct.lower()
    user_key = user.lower()

    if correct_key == user_key:
        return True

    if any(alt.lower() == user_key for alt in split_alternatives(correct)):
        return True

    if len(correct) > PARTIAL_MIN_CORRECT_LENGTH and len(user) > PARTIAL_MIN_USER_LENGTH:
        return user_key in correct_key or correct_key in user_key

    return False


def check_answer(correct_answer: Optional[str], user_answer: Optional[str]) -> QuizResult:
    """Judge a response and return both trimmed strings with the verdict."""
    correct = (correct_answer or "").strip()
    user = (user_answer or "").strip()
    return QuizResult(correct=is_match(correct, user), correct_answer=correct, user_answer=user)
