# app/services/content_generator.py
"""Generation collaborator: turns one format request into a content payload.

The coordinator only depends on the :class:`ContentGenerator` protocol. The
default implementation asks OpenAI for the text-based formats; formats that
need a rendering provider (slides, speech, avatar video) report why they
could not be produced.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Protocol

from app.core import openai_service
from app.core.content_formats import ContentFormat
from app.core.errors import GenerationError

logger = logging.getLogger(__name__)


class ContentGenerator(Protocol):
    async def generate(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Return ``{"content_data": {...}, ...}`` for ``request["content_type_id"]``."""
        ...


_PROMPTS = {
    ContentFormat.TEXT: (
        "Write the narrated lesson text for the lesson below, in {language}.\n"
        "Lesson: {lessonTopic}\nSkills: {skills}\n\nSource transcript:\n{lessonDescription}\n\n"
        'Return JSON: {{"text": "..."}}'
    ),
    ContentFormat.CODE: (
        "Write a short, runnable code example illustrating the lesson below. "
        "Explain it in {language}.\n"
        "Lesson: {lessonTopic}\nSkills: {skills}\n\nSource transcript:\n{lessonDescription}\n\n"
        'Return JSON: {{"code": "...", "language": "<programming language>", "explanation": "..."}}'
    ),
    ContentFormat.MIND_MAP: (
        "Build a mind map of the lesson below, labels in {language}.\n"
        "Lesson: {lessonTopic}\n\nSource transcript:\n{lessonDescription}\n\n"
        'Return JSON: {{"root": "<node id>", "nodes": [{{"id": "...", "label": "..."}}], '
        '"edges": [{{"source": "...", "target": "..."}}]}}'
    ),
}

_AVATAR_SCRIPT_PROMPT = (
    "Write a 60-second presenter script for the lesson below, in {language}.\n"
    "Lesson: {lessonTopic}\n\nSource transcript:\n{lessonDescription}\n\n"
    'Return JSON: {{"script": "..."}}'
)


class OpenAIContentGenerator:
    """Default generator backed by :mod:`app.core.openai_service`."""

    def __init__(self, model: str | None = None):
        self.model = model

    async def generate(self, request: Dict[str, Any]) -> Dict[str, Any]:
        fmt = ContentFormat.from_type_id(request.get("content_type_id"))
        if fmt is None:
            raise GenerationError(f"Unknown content type id {request.get('content_type_id')!r}")

        if fmt is ContentFormat.AVATAR_VIDEO:
            return await self._avatar_video(request)
        if fmt not in _PROMPTS:
            raise GenerationError(
                f"No rendering provider configured for {fmt.label}",
                error_code="PROVIDER_NOT_CONFIGURED",
                context={"format": fmt.format_name},
            )

        payload = await self._ask(_PROMPTS[fmt], request)
        if payload is None:
            raise GenerationError(f"The AI service returned no usable answer for {fmt.label}")
        return {"content_data": payload, "content_type_id": fmt.type_id}

    async def _avatar_video(self, request: Dict[str, Any]) -> Dict[str, Any]:
        script_payload = await self._ask(_AVATAR_SCRIPT_PROMPT, request) or {}
        reason = "Avatar video provider is not configured"
        logger.warning("Avatar video for topic %s not rendered: %s", request.get("topic_id"), reason)
        # embedded failure: persisted for audit, surfaced as a retryable format
        return {
            "content_type_id": ContentFormat.AVATAR_VIDEO.type_id,
            "content_data": {
                "script": script_payload.get("script"),
                "videoUrl": None,
                "status": "failed",
                "reason": reason,
                "error": reason,
                "errorCode": "PROVIDER_NOT_CONFIGURED",
            },
        }

    async def _ask(self, template: str, request: Dict[str, Any]) -> Dict[str, Any] | None:
        prompt = template.format(
            language=request.get("language") or "en",
            lessonTopic=request.get("lessonTopic") or "",
            lessonDescription=request.get("lessonDescription") or "",
            skills=", ".join(request.get("skillsList") or []) or "-",
        )
        return await openai_service.generate_json_with_gpt(prompt, model=self.model)
