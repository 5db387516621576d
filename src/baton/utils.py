"""Small JSON and text helpers shared across modules."""

from __future__ import annotations

import json
from typing import Any


def parse_json_lenient(raw: str) -> Any:
    """Parse ``raw`` as JSON, returning the original string when it is not valid JSON."""
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def shorten_text(text: str, width: int = 30, placeholder: str = "...") -> str:
    """Shorten text to width characters, cutting in the middle of words if needed.

    Unlike textwrap.shorten, this function can cut in the middle of a word,
    ensuring long strings without spaces are still truncated properly.
    """
    if len(text) <= width:
        return text

    available = width - len(placeholder)
    if available <= 0:
        return placeholder

    return text[:available] + placeholder
