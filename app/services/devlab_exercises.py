"""Decoding of the ``topics.devlab_exercises`` column.

Over time the column has held nothing, a JSON-encoded string, a plain list of
exercises and a ``{html, questions, metadata}`` document. Everything is
decoded once into :class:`DevlabExercises` so validation and serialisation
only deal with one shape.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field, replace
from typing import Any


class ExercisesKind(enum.Enum):
    missing = "missing"
    text = "text"
    items = "items"
    document = "document"
    # a number or a boolean: stored, but never a valid exercise payload
    unsupported = "unsupported"


@dataclass(frozen=True)
class DevlabExercises:
    kind: ExercisesKind
    value: Any = None
    # column text when the value was stored JSON-encoded
    source: str | None = field(default=None, compare=False)

    @property
    def is_valid(self) -> bool:
        if self.kind in (ExercisesKind.missing, ExercisesKind.unsupported):
            return False
        if self.kind is ExercisesKind.text:
            return bool(self.value.strip())
        if self.kind is ExercisesKind.items:
            return len(self.value) > 0

        document: dict = self.value
        questions = document.get("questions")
        if isinstance(questions, list) and questions:
            return True
        html = document.get("html")
        if isinstance(html, str) and html.strip():
            return True
        # weak fallback: anything besides bare metadata
        return any(key != "metadata" for key in document)

    def to_transfer_string(self) -> str:
        """Serialised form expected by the publishing service (``""`` when missing)."""
        if self.kind is ExercisesKind.missing:
            return ""
        if self.source is not None:
            return self.source
        if self.kind is ExercisesKind.text:
            return self.value
        if self.kind is ExercisesKind.unsupported and isinstance(self.value, str):
            return self.value
        return json.dumps(self.value, ensure_ascii=False)


MISSING = DevlabExercises(ExercisesKind.missing)


def decode_devlab_exercises(raw: Any) -> DevlabExercises:
    """Normalise any stored shape into a :class:`DevlabExercises`.

    Strings are parsed as JSON and decoded again; a string that is not JSON
    is kept as free text. Numbers and booleans are not an exercise shape.
    """
    if raw is None:
        return MISSING

    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            return DevlabExercises(ExercisesKind.text, raw)
        decoded = decode_devlab_exercises(parsed)
        if decoded.kind is ExercisesKind.unsupported:
            return DevlabExercises(ExercisesKind.unsupported, raw)
        if decoded.kind is ExercisesKind.missing:
            return decoded
        return replace(decoded, source=raw)

    if isinstance(raw, list):
        return DevlabExercises(ExercisesKind.items, raw)

    if isinstance(raw, dict):
        return DevlabExercises(ExercisesKind.document, raw)

    return DevlabExercises(ExercisesKind.unsupported, raw)
