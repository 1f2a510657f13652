"""Line-oriented CSV codec for deck files.

Fields containing a comma, double quote or line break are wrapped in double
quotes with internal quotes doubled. Decoding is a single character scan
and never raises: unbalanced quoting degrades to best-effort splitting.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def encode_field(value: Optional[str]) -> str:
    """Quote a field if it holds a comma, quote or line break (None -> "")."""
    if value is None:
        return ""
    if any(ch in value for ch in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'
    return value


def encode_record(fields: Iterable[Optional[str]]) -> str:
    return ",".join(encode_field(f) for f in fields)


def decode_line(line: str) -> List[str]:
    """Split one CSV line into raw fields.

    Commas split only outside quotes. Inside quotes a doubled quote emits a
    literal quote; any other quote toggles the in-quotes state. Quote
    characters that toggle state are dropped. Fields are returned untrimmed.
    """
    if not line or not line.strip():
        return []

    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current))
    return fields


def decode_field(raw: Optional[str]) -> str:
    """Trim a raw field and unwrap it if it is a balanced quoted value."""
    if raw is None:
        return ""
    trimmed = raw.strip()
    if len(trimmed) > 1 and trimmed.startswith('"') and trimmed.endswith('"'):
        return trimmed[1:-1].replace('""', '"')
    return trimmed


def has_open_quote(text: str) -> bool:
    """True if ``text`` ends inside a quoted field.

    Doubled quotes leave the state unchanged, so an odd quote count means a
    quoted field continues onto the next physical line.
    """
    return text.count('"') % 2 == 1
