# app/services/format_generation_coordinator.py
"""Generate the six content formats of a topic concurrently from one transcript.

Each format runs as its own task with its own deadline. Tasks are joined with
``asyncio.gather(..., return_exceptions=True)`` so a failing or slow format
never cancels its siblings; the only fatal error is a missing topic id.
"""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.content_formats import ALL_FORMATS, ContentFormat
from app.core.errors import GenerationTimeoutError, PreconditionError
from app.models.content.content_model import GenerationMethod
from app.services.content_generator import ContentGenerator
from app.services.content_persistence import ContentPersistenceGateway, GeneratedContent
from app.services.topic_metadata_resolver import TopicMetadata, TopicMetadataResolver
from app.services.transcript_normalizer import normalize_transcript

logger = logging.getLogger(__name__)

ProgressSink = Callable[[str, str, str], Union[None, Awaitable[None]]]


class TaskState(enum.Enum):
    starting = "starting"
    completed = "completed"
    failed = "failed"


@dataclass
class GenerationTask:
    """Bookkeeping for one format during one ``generate_all`` call."""

    format: ContentFormat
    state: TaskState = TaskState.starting
    started_at: float = field(default_factory=time.monotonic)
    elapsed_seconds: Optional[float] = None
    reason: Optional[str] = None

    def finish(self, state: TaskState, reason: str | None = None) -> None:
        self.state = state
        self.reason = reason
        self.elapsed_seconds = round(time.monotonic() - self.started_at, 3)


def avatar_failure_reason(generated: Dict[str, Any]) -> str | None:
    """Why a "successful" avatar video generation is still unusable, or None."""

    data = generated.get("content_data")
    data = data if isinstance(data, dict) else {}

    video_url = data.get("videoUrl") or generated.get("videoUrl")
    error = data.get("error") or generated.get("error")
    status = data.get("status") or generated.get("status")
    if video_url and not error and status != "failed":
        return None

    reason = data.get("reason") or generated.get("reason")
    if reason:
        return str(reason)
    if isinstance(error, dict):
        error = error.get("message") or error.get("code")
    if error:
        return str(error)
    return "Avatar video generation returned no video URL"


_AVATAR_OUTCOME_KEYS = ("videoUrl", "status", "reason", "error", "errorCode")


def merge_avatar_outcome(generated: Dict[str, Any]) -> Any:
    """Fold outcome fields reported beside ``content_data`` into the stored payload."""

    data = generated.get("content_data")
    if not isinstance(data, dict):
        return data
    merged = dict(data)
    for key in _AVATAR_OUTCOME_KEYS:
        if key in generated and merged.get(key) is None:
            merged[key] = generated[key]
    return merged


class FormatGenerationCoordinator:
    def __init__(
        self,
        db: Session,
        *,
        generator: ContentGenerator,
        persistence: ContentPersistenceGateway,
        metadata_resolver: TopicMetadataResolver | None = None,
        timeout_seconds: float | None = None,
    ):
        self.db = db
        self.generator = generator
        self.persistence = persistence
        self.metadata_resolver = metadata_resolver or TopicMetadataResolver(db)
        self.timeout_seconds = timeout_seconds or settings.GENERATION_TIMEOUT_SECONDS

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def generate_all(
        self,
        transcript: str,
        topic_id: int | None,
        *,
        on_progress: ProgressSink | None = None,
        topic_name: str | None = None,
        language: str | None = None,
        skills: Iterable[str] | None = None,
    ) -> Dict[str, Any]:
        if not topic_id:
            raise PreconditionError(
                "topic_id is required for content generation",
                error_code="TOPIC_ID_REQUIRED",
            )

        normalized = normalize_transcript(transcript)
        logger.info(
            "Starting generation for topic %s (transcript %s -> %s chars)",
            topic_id,
            len(transcript) if isinstance(transcript, str) else 0,
            len(normalized),
        )

        metadata = await self.metadata_resolver.resolve(
            topic_id,
            normalized,
            topic_name=topic_name,
            language=language,
            skills=skills,
        )
        request_base = self._build_request_base(topic_id, normalized, metadata)

        tasks = [GenerationTask(format=fmt) for fmt in ALL_FORMATS]
        outcomes = await asyncio.gather(
            *(self._run_task(task, request_base, on_progress) for task in tasks),
            return_exceptions=True,
        )

        content_formats: Dict[str, Dict[str, Any]] = {}
        for task, outcome in zip(tasks, outcomes):
            if isinstance(outcome, BaseException):
                # _run_task reports its own failures; this only catches bugs in it
                logger.error("Task for %s crashed: %r", task.format.format_name, outcome)
                task.finish(TaskState.failed, str(outcome))
                outcome = self._failure_result(task, str(outcome))
            content_formats[task.format.aggregate_key] = outcome

        aggregate: Dict[str, Any] = {
            "topic_id": topic_id,
            "transcript": {
                "text": normalized,
                "language": metadata.language,
                "length": len(normalized),
            },
            "metadata": {
                "lessonTopic": metadata.title,
                "language": metadata.language,
                "skillsList": metadata.skills,
                "concepts": metadata.concepts,
            },
            "content_formats": content_formats,
        }

        avatar = content_formats[ContentFormat.AVATAR_VIDEO.aggregate_key]
        if avatar.get("retryable"):
            aggregate["continue_generation"] = True
            aggregate["avatar_video"] = {"status": "failed", "reason": avatar.get("reason")}

        self._log_summary(topic_id, tasks)
        return aggregate

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _build_request_base(topic_id: int, transcript: str, metadata: TopicMetadata) -> Dict[str, Any]:
        # the transcript replaces the trainer prompt for every format
        return {
            "topic_id": topic_id,
            "lessonTopic": metadata.title,
            "lessonDescription": transcript,
            "language": metadata.language,
            "skillsList": list(metadata.skills),
            "transcriptText": transcript,
        }

    async def _run_task(
        self,
        task: GenerationTask,
        request_base: Dict[str, Any],
        on_progress: ProgressSink | None,
    ) -> Dict[str, Any]:
        fmt = task.format
        await self._emit(on_progress, fmt.format_name, TaskState.starting.value, f"[AI] Starting: {fmt.label}")
        task.started_at = time.monotonic()

        request = {**request_base, "content_type_id": fmt.type_id}
        try:
            generated = await asyncio.wait_for(self.generator.generate(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            error = GenerationTimeoutError(fmt.format_name, self.timeout_seconds)
            return await self._fail(task, error.message, on_progress)
        except Exception as exc:
            logger.exception("Generation of %s failed", fmt.label)
            return await self._fail(task, str(exc) or exc.__class__.__name__, on_progress)

        if not isinstance(generated, dict) or generated.get("content_data") is None:
            return await self._fail(task, "Generator returned no content_data", on_progress)

        content_data = generated["content_data"]
        if fmt is ContentFormat.AVATAR_VIDEO:
            content_data = merge_avatar_outcome(generated)

        try:
            saved = await self.persistence.persist(
                GeneratedContent(
                    topic_id=request_base["topic_id"],
                    content_type_id=fmt.type_id,
                    content_data=content_data,
                    generation_method_id=GenerationMethod.video_to_lesson.value,
                    audio_url=generated.get("audio_url"),
                )
            )
        except Exception as exc:
            logger.error("Persisting %s for topic %s failed: %s", fmt.label, request_base["topic_id"], exc)
            return await self._fail(task, str(exc), on_progress)

        if fmt is ContentFormat.AVATAR_VIDEO:
            reason = avatar_failure_reason(generated)
            if reason:
                logger.warning("Avatar video for topic %s stored but unusable: %s", request_base["topic_id"], reason)
                result = await self._fail(task, reason, on_progress)
                result.update({"content_id": saved.id, "reason": reason, "retryable": True})
                return result

        task.finish(TaskState.completed)
        await self._emit(on_progress, fmt.format_name, TaskState.completed.value, f"[AI] Completed: {fmt.label}")
        logger.info("Completed %s (content_id=%s)", fmt.label, saved.id)
        return {
            "format": fmt.format_name,
            "content_type_id": fmt.type_id,
            "generated": True,
            "content_id": saved.id,
            "content_data": saved.content_data,
            "elapsed_seconds": task.elapsed_seconds,
        }

    async def _fail(self, task: GenerationTask, reason: str, on_progress: ProgressSink | None) -> Dict[str, Any]:
        task.finish(TaskState.failed, reason)
        fmt = task.format
        await self._emit(
            on_progress,
            fmt.format_name,
            TaskState.failed.value,
            f"[AI] Failed: {fmt.label} - {reason}",
        )
        return self._failure_result(task, reason)

    @staticmethod
    def _failure_result(task: GenerationTask, reason: str) -> Dict[str, Any]:
        return {
            "format": task.format.format_name,
            "content_type_id": task.format.type_id,
            "generated": False,
            "error": reason,
            "elapsed_seconds": task.elapsed_seconds,
        }

    @staticmethod
    async def _emit(sink: ProgressSink | None, format_name: str, status: str, message: str) -> None:
        if sink is None:
            return
        try:
            outcome = sink(format_name, status, message)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as exc:
            logger.warning("Progress sink failed for %s/%s: %s", format_name, status, exc)

    @staticmethod
    def _log_summary(topic_id: int, tasks: List[GenerationTask]) -> None:
        completed = [t.format.format_name for t in tasks if t.state is TaskState.completed]
        failed = {t.format.format_name: t.reason for t in tasks if t.state is TaskState.failed}
        logger.info(
            "Generation for topic %s finished: %s completed, %s failed %s",
            topic_id,
            len(completed),
            len(failed),
            failed or "",
        )
