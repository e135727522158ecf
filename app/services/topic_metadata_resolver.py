# app/services/topic_metadata_resolver.py
"""Resolve the lesson title, description, language and skills for a generation run.

Stored topic metadata wins. When the title or the description is missing,
substitutes are derived from the transcript: an AI collaborator extracts a
title, concepts and skills, and a classifier detects the language. Both
collaborators are optional; any failure degrades to a deterministic fallback
and logs a warning.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core import openai_service
from app.core.config import settings
from app.crud import topic_crud
from app.models.course.topic_model import Topic
from app.utils.json_utils import safe_json_loads

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGE_CODES = frozenset(
    {"en", "he", "ar", "es", "fr", "de", "it", "pt", "ru", "zh", "ja", "ko"}
)
DEFAULT_TITLE = "Untitled Lesson"
DEFAULT_LANGUAGE = "en"
DESCRIPTION_EXCERPT_CHARS = 500
FALLBACK_TITLE_CHARS = 60

_HEBREW = re.compile(r"[\u0590-\u05FF]")
_ARABIC = re.compile(r"[\u0600-\u06FF]")
_SENTENCE_END = re.compile(r"[.!?]")

LanguageDetector = Callable[[str], Awaitable[Optional[str]]]
MetadataExtractor = Callable[[str], Awaitable[Optional[dict]]]
TopicLoader = Callable[[int], Optional[Topic]]


@dataclass
class TopicMetadata:
    title: str
    description: str
    language: str
    skills: List[str] = field(default_factory=list)
    concepts: List[str] = field(default_factory=list)


@dataclass
class ExtractedMetadata:
    title: str
    concepts: List[str] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)


def detect_language_heuristic(text: str) -> str:
    """Hebrew and Arabic script detection; everything else is treated as English."""
    if _HEBREW.search(text or ""):
        return "he"
    if _ARABIC.search(text or ""):
        return "ar"
    return DEFAULT_LANGUAGE


def extract_metadata_fallback(transcript: str, topic_name: str | None = None) -> ExtractedMetadata:
    """First sentence as title, first long words as placeholder concepts."""
    first_sentence = _SENTENCE_END.split(transcript or "", maxsplit=1)[0].strip() or DEFAULT_TITLE
    title = topic_name or first_sentence[:FALLBACK_TITLE_CHARS]
    long_words = [word for word in (transcript or "").split() if len(word) > 4][:10]
    return ExtractedMetadata(title=title, concepts=long_words[:5], skills=[])


async def detect_language_with_openai(text: str) -> str | None:
    prompt = (
        "Detect the language of the following text and return only the ISO 639-1 "
        "language code (e.g. 'en', 'he', 'ar', 'es', 'fr').\n\n"
        f"Text:\n{text[:500]}\n\n"
        "Return only the 2-letter language code, nothing else."
    )
    return await openai_service.generate_text_with_gpt(
        prompt,
        system_prompt="You are a language detection expert. Return only the ISO 639-1 language code.",
    )


async def extract_metadata_with_openai(transcript: str) -> dict | None:
    excerpt = transcript[: settings.METADATA_TRANSCRIPT_EXCERPT_CHARS]
    prompt = (
        "Analyze the following video transcript and extract key educational metadata.\n\n"
        f"Transcript:\n{excerpt}\n\n"
        "Extract:\n"
        "1. Lesson title (clear, concise, 5-10 words)\n"
        "2. Key concepts (important terms/ideas)\n"
        "3. Skills list (micro-skills and nano-skills that learners will gain)\n\n"
        'Return ONLY valid JSON: {"title": "...", "concepts": ["..."], "skills": ["..."]}'
    )
    raw = await openai_service.generate_text_with_gpt(
        prompt,
        system_prompt=(
            "You are an expert educational content analyst. Extract accurate metadata "
            "from educational transcripts. Return only valid JSON."
        ),
    )
    if raw is None:
        return None
    return safe_json_loads(raw)


def _as_str_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, Iterable):
        return [str(item) for item in value if item is not None and str(item).strip()]
    return []


class TopicMetadataResolver:
    """Stored metadata first, transcript-derived substitutes second."""

    def __init__(
        self,
        db: Session | None = None,
        *,
        load_topic: TopicLoader | None = None,
        language_detector: LanguageDetector | None = None,
        metadata_extractor: MetadataExtractor | None = None,
    ):
        if load_topic is None and db is not None:
            load_topic = lambda topic_id: topic_crud.get_topic(db, topic_id)  # noqa: E731
        self._load_topic = load_topic

        if language_detector is None and openai_service.is_configured():
            language_detector = detect_language_with_openai
        if metadata_extractor is None and openai_service.is_configured():
            metadata_extractor = extract_metadata_with_openai
        self._language_detector = language_detector
        self._metadata_extractor = metadata_extractor

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def resolve(
        self,
        topic_id: int,
        transcript: str,
        *,
        topic_name: str | None = None,
        language: str | None = None,
        skills: Iterable[str] | None = None,
    ) -> TopicMetadata:
        stored = self._stored_metadata(topic_id)
        title = stored.title if stored else None
        description = stored.description if stored else None
        stored_language = stored.language if stored else None
        stored_skills = stored.skills if stored else []

        if title and description:
            return TopicMetadata(
                title=title,
                description=description,
                language=stored_language or language or DEFAULT_LANGUAGE,
                skills=stored_skills or _as_str_list(skills),
            )

        extracted = await self.extract_metadata(transcript, topic_name=topic_name)
        resolved_language = stored_language or language or await self.detect_language(transcript)
        return TopicMetadata(
            title=title or extracted.title or topic_name or DEFAULT_TITLE,
            description=description or transcript[:DESCRIPTION_EXCERPT_CHARS] + "...",
            language=resolved_language,
            skills=stored_skills or extracted.skills or _as_str_list(skills),
            concepts=extracted.concepts,
        )

    async def detect_language(self, text: str) -> str:
        if self._language_detector is None:
            return detect_language_heuristic(text)

        try:
            answer = await self._language_detector(text)
        except Exception as exc:
            logger.warning("Language detection failed, using heuristic: %s", exc)
            return detect_language_heuristic(text)

        code = (answer or "").strip().lower()
        if code in SUPPORTED_LANGUAGE_CODES:
            return code

        logger.warning("Language detector answered %r, using heuristic", answer)
        return detect_language_heuristic(text)

    async def extract_metadata(self, transcript: str, *, topic_name: str | None = None) -> ExtractedMetadata:
        if self._metadata_extractor is None:
            return extract_metadata_fallback(transcript, topic_name)

        try:
            payload = await self._metadata_extractor(transcript)
        except Exception as exc:
            logger.warning("Metadata extraction failed, using fallback: %s", exc)
            return extract_metadata_fallback(transcript, topic_name)

        if not isinstance(payload, dict):
            logger.warning("Metadata extraction returned no JSON object, using fallback")
            return extract_metadata_fallback(transcript, topic_name)

        return ExtractedMetadata(
            title=str(payload.get("title") or topic_name or DEFAULT_TITLE),
            concepts=_as_str_list(payload.get("concepts")),
            skills=_as_str_list(payload.get("skills")),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _stored_metadata(self, topic_id: int) -> Optional[TopicMetadata]:
        if self._load_topic is None:
            return None
        try:
            topic = self._load_topic(topic_id)
        except Exception as exc:
            logger.warning("Could not load metadata for topic %s: %s", topic_id, exc)
            return None
        if topic is None:
            return None
        return TopicMetadata(
            title=topic.name,
            description=topic.description,
            language=topic.language,
            skills=_as_str_list(topic.skills),
        )
