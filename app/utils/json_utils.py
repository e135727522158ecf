# Fichier : app/utils/json_utils.py

from __future__ import annotations
import json
from typing import Any, Optional

_OPENERS = {"{": "}", "[": "]"}


def strip_code_fences(text: str) -> str:
    """Drop a surrounding ```lang ... ``` fence, as chat models like to add."""
    text = text.strip()
    if not text.startswith("```"):
        return text
    newline = text.find("\n")
    body = text[newline + 1 :] if newline != -1 else text[3:]
    closing = body.rfind("```")
    if closing != -1:
        body = body[:closing]
    return body.strip()


def extract_first_json_block(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` or ``[...]`` block, ignoring brackets inside strings."""
    start = next((i for i, ch in enumerate(text) if ch in _OPENERS), None)
    if start is None:
        return None

    opener = text[start]
    closer = _OPENERS[opener]
    depth = 0
    in_string = escaped = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def safe_json_loads(raw: str) -> Any:
    """Parse a model answer that should be JSON but may carry fences or chatter.

    Raises the original ValueError when no JSON can be recovered.
    """
    if raw is None:
        raise ValueError("safe_json_loads: input is None")

    text = strip_code_fences(str(raw))
    try:
        return json.loads(text)
    except ValueError as first_error:
        block = extract_first_json_block(text)
        if block is None:
            raise first_error
        return json.loads(block)


def load_json_column(raw: Any, default: Any = None) -> Any:
    """Decode a JSON column that older rows may hold as an encoded string.

    ``None`` yields ``default``; strings are parsed (ValueError on bad JSON);
    anything else is already decoded and returned as is.
    """
    if raw is None:
        return default
    if isinstance(raw, str):
        return json.loads(raw)
    return raw
