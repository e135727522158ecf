"""The six fixed content formats every topic is produced in."""

from __future__ import annotations

import enum
from typing import Optional


class ContentFormat(enum.Enum):
    """Format name, numeric content type id, labels and aggregate key.

    The numeric ids are stable and shared with the relational store and the
    downstream publishing service.
    """

    TEXT = ("text", 1, "text_audio", "Text & Audio", "text_audio")
    CODE = ("code", 2, "code", "Code Examples", "code_examples")
    PRESENTATION = ("presentation", 3, "presentation", "Presentation Slides", "slides")
    AUDIO = ("audio", 4, "audio", "Audio", "audio")
    MIND_MAP = ("mind_map", 5, "mind_map", "Mind Map", "mind_map")
    AVATAR_VIDEO = ("avatar_video", 6, "avatar_video", "Avatar Video", "avatar_video")

    def __init__(self, format_name: str, type_id: int, type_name: str, label: str, aggregate_key: str):
        self.format_name = format_name
        self.type_id = type_id
        # name used by the relational store and the Course Builder payload
        self.type_name = type_name
        self.label = label
        self.aggregate_key = aggregate_key

    @classmethod
    def from_name(cls, name: str) -> Optional["ContentFormat"]:
        if not isinstance(name, str):
            return None
        key = name.strip().lower()
        for fmt in cls:
            if key in (fmt.format_name, fmt.type_name):
                return fmt
        return None

    @classmethod
    def from_type_id(cls, type_id: int) -> Optional["ContentFormat"]:
        for fmt in cls:
            if fmt.type_id == type_id:
                return fmt
        return None


ALL_FORMATS: tuple[ContentFormat, ...] = tuple(sorted(ContentFormat, key=lambda f: f.type_id))

# Content types whose payload can reference a blob in object storage.
BLOB_BACKED_FORMATS = frozenset(
    {ContentFormat.PRESENTATION, ContentFormat.AUDIO, ContentFormat.AVATAR_VIDEO}
)
