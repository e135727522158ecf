"""Whitespace and control-character cleanup applied to transcripts before generation."""

from __future__ import annotations

import re
from typing import Any

_LINE_ENDINGS = re.compile(r"\r\n?")
_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")
_HORIZONTAL_RUNS = re.compile(r"[ \t]{2,}")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def _clean_once(text: str) -> str:
    cleaned = text.strip()
    cleaned = _LINE_ENDINGS.sub("\n", cleaned)
    cleaned = _EXCESS_BLANK_LINES.sub("\n\n", cleaned)
    cleaned = _HORIZONTAL_RUNS.sub(" ", cleaned)
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    return cleaned.strip()


def normalize_transcript(text: Any) -> str:
    """Return a cleaned copy of ``text``; anything that is not a string yields ``""``.

    Steps, in order: trim, unify line endings to ``\\n``, collapse 3+ newlines
    to 2, collapse runs of spaces/tabs to a single space, drop ASCII control
    characters (tab and newline are kept), trim again.

    Removing a control character can bring two spaces or newline runs back
    together (``"a \\x00 b"``), so the steps are repeated until the text stops
    changing. Every pass either shortens the text or removes a ``\\r``, which
    keeps the loop finite and makes the function idempotent.
    """
    if not isinstance(text, str):
        return ""

    cleaned = _clean_once(text)
    while True:
        again = _clean_once(cleaned)
        if again == cleaned:
            return cleaned
        cleaned = again
