# app/services/content_data_cleaner.py
"""Per-format whitelist applied to generated ``content_data`` before it is stored.

Topic-level fields (lesson topic, description, language, skills) already live
on the topic row, so they are stripped from every payload. Only what a player
or viewer needs is kept.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from app.core.content_formats import ContentFormat

logger = logging.getLogger(__name__)

_AUDIO_FIELDS = ("audioUrl", "audioVoice", "audioFormat")
_PRESENTATION_METADATA_FIELDS = (
    "generated_at",
    "source",
    "audience",
    "language",
    "gamma_generation_id",
    "gamma_raw_response",
    "deckId",
    "embedUrl",
)


class ContentDataError(ValueError):
    """The payload cannot be stored as-is (e.g. it points outside our storage)."""


def _copy_truthy(source: Dict[str, Any], target: Dict[str, Any], keys) -> None:
    for key in keys:
        if source.get(key):
            target[key] = source[key]


def _copy_audio(source: Dict[str, Any], target: Dict[str, Any]) -> None:
    _copy_truthy(source, target, _AUDIO_FIELDS)
    if source.get("audioDuration") is not None:
        target["audioDuration"] = source["audioDuration"]


def clean_text_audio(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    if data.get("text") is not None:
        cleaned["text"] = data["text"]
    _copy_audio(data, cleaned)
    return cleaned


def clean_code(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    if data.get("code") is not None:
        cleaned["code"] = data["code"]
    _copy_truthy(data, cleaned, ("language", "explanation"))
    metadata = data.get("metadata")
    if isinstance(metadata, dict) and metadata.get("programming_language"):
        cleaned["metadata"] = {"programming_language": metadata["programming_language"]}
    return cleaned


def clean_presentation(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    _copy_truthy(data, cleaned, ("format",))

    url = data.get("presentationUrl")
    if url:
        if "gamma.app" in str(url):
            raise ContentDataError(
                "Invalid presentation URL in content data: external Gamma URL detected. "
                "Presentations must be stored in Supabase Storage."
            )
        cleaned["presentationUrl"] = url

    _copy_truthy(data, cleaned, ("fileUrl", "storagePath"))

    metadata = data.get("metadata")
    if isinstance(metadata, dict):
        essential = {key: metadata[key] for key in _PRESENTATION_METADATA_FIELDS if metadata.get(key)}
        if essential:
            cleaned["metadata"] = essential
    return cleaned


def clean_audio(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    _copy_audio(data, cleaned)
    _copy_truthy(data, cleaned, ("storagePath",))
    return cleaned


def clean_mind_map(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    _copy_truthy(data, cleaned, ("nodes", "edges", "root"))
    return cleaned


def clean_avatar_video(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    _copy_truthy(data, cleaned, ("script", "videoUrl", "videoId", "storagePath"))
    if "duration_seconds" in data:
        cleaned["duration_seconds"] = data["duration_seconds"]

    status = data.get("status")
    failed = status == "failed" or bool(data.get("error"))
    if status in ("skipped", "failed") or failed:
        cleaned["status"] = status or "failed"
        if data.get("reason"):
            cleaned["reason"] = data["reason"]
    # failure details stay on the row for audit
    if failed:
        _copy_truthy(data, cleaned, ("error", "errorCode"))

    metadata = data.get("metadata")
    if isinstance(metadata, dict) and metadata.get("heygen_video_url"):
        cleaned["metadata"] = {"heygen_video_url": metadata["heygen_video_url"]}
    return cleaned


_CLEANERS: Dict[ContentFormat, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    ContentFormat.TEXT: clean_text_audio,
    ContentFormat.CODE: clean_code,
    ContentFormat.PRESENTATION: clean_presentation,
    ContentFormat.AUDIO: clean_audio,
    ContentFormat.MIND_MAP: clean_mind_map,
    ContentFormat.AVATAR_VIDEO: clean_avatar_video,
}


def clean_content_data(data: Any, content_type_id: int) -> Any:
    """Return the whitelisted copy of ``data`` for its format.

    Non-dict payloads and unknown content types are returned unchanged.
    """
    if not isinstance(data, dict):
        return data

    fmt = ContentFormat.from_type_id(content_type_id)
    if fmt is None:
        logger.warning("Unknown content type id %s, storing content_data as-is", content_type_id)
        return data
    return _CLEANERS[fmt](data)
