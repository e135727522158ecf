# app/services/course_publisher.py
"""Hand a validated course over to Course Builder.

This service never publishes anything itself: visibility is decided by the
downstream service. After a successful transfer the course is archived here
and a list of independent post-transfer hooks runs; a failing hook is logged
and never affects the result of :meth:`CoursePublisher.execute`.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from app.core.content_formats import ContentFormat
from app.core.errors import NotFoundError, PublicationValidationFailed, TransferError
from app.crud import content_crud, course_crud, template_crud, topic_crud
from app.models.course.course_model import CourseStatus
from app.services.archive_cleanup import ArchiveCleanupService
from app.services.devlab_exercises import decode_devlab_exercises
from app.services.publication_validator import PublicationValidator, get_validation_summary
from app.utils.json_utils import load_json_column

logger = logging.getLogger(__name__)

TRANSFER_FAILED_MESSAGE = (
    "Transfer failed — Course Builder could not receive the data. Please try again later."
)
TRANSFER_SUCCEEDED_MESSAGE = (
    "The course has been successfully transferred to Course Builder for publishing."
)

PostTransferHook = Callable[[int], Union[Any, Awaitable[Any]]]


class CoursePublisher:
    def __init__(
        self,
        db: Session,
        *,
        transfer,
        storage=None,
        validator: PublicationValidator | None = None,
        cleanup: ArchiveCleanupService | None = None,
        extra_hooks: Optional[List[Tuple[str, PostTransferHook]]] = None,
    ):
        self.db = db
        self.transfer = transfer
        self.validator = validator or PublicationValidator(db)
        self.cleanup = cleanup or ArchiveCleanupService(db, storage)
        self.post_transfer_hooks: List[Tuple[str, PostTransferHook]] = [
            ("increment_usage_counts", self._increment_usage_counts),
            ("archive_course", self._archive_course),
            ("cleanup_content_history", self._cleanup_content_history),
        ]
        if extra_hooks:
            self.post_transfer_hooks.extend(extra_hooks)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def execute(self, course_id: int) -> Dict[str, Any]:
        logger.info("Publishing course %s", course_id)
        validation = self.validator.validate(course_id)
        if not validation.valid:
            logger.error("Course %s is not ready: %s", course_id, validation.as_dict()["errors"])
            raise PublicationValidationFailed(get_validation_summary(validation), validation.errors)

        course_object = self.build_course_object(course_id)

        try:
            await asyncio.to_thread(self.transfer.send, course_object)
        except Exception as exc:
            logger.error("Transfer of course %s to Course Builder failed: %s", course_id, exc)
            raise TransferError(TRANSFER_FAILED_MESSAGE) from exc

        await self._run_post_transfer_hooks(course_id)
        return {"success": True, "message": TRANSFER_SUCCEEDED_MESSAGE}

    def build_course_object(self, course_id: int) -> Dict[str, Any]:
        """Project a course and its topics into the shape Course Builder expects."""

        course = course_crud.get_course(self.db, course_id)
        if course is None:
            raise NotFoundError(f"Course {course_id} not found", error_code="COURSE_NOT_FOUND")

        topics_data = []
        for topic in topic_crud.get_course_topics(self.db, course_id):
            template = template_crud.get_template(self.db, topic.template_id) if topic.template_id else None
            contents = [
                {
                    "content_id": str(content.id),
                    "content_type": _transfer_content_type(content.content_type_id),
                    "content_data": _load_content_data(content.content_data),
                }
                for content in content_crud.get_contents_for_topic(self.db, topic.id)
            ]
            topics_data.append(
                {
                    "topic_id": str(topic.id),
                    "topic_name": topic.name or "",
                    "topic_description": topic.description or "",
                    "topic_language": topic.language or "en",
                    "template_id": str(topic.template_id),
                    "format_order": (template.format_order if template else None) or [],
                    "contents": contents,
                    "devlab_exercises": decode_devlab_exercises(topic.devlab_exercises).to_transfer_string(),
                }
            )

        return {
            "course_id": str(course.id),
            "course_name": course.name or "",
            "course_description": course.description or "",
            "course_language": course.language or "en",
            "trainer_id": course.trainer_id or "",
            "trainer_name": course.trainer_name or course.trainer_id or "",
            "topics": topics_data,
        }

    # ------------------------------------------------------------------
    # Post-transfer hooks
    # ------------------------------------------------------------------
    async def _run_post_transfer_hooks(self, course_id: int) -> None:
        for name, hook in self.post_transfer_hooks:
            try:
                outcome = hook(course_id)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as exc:
                self.db.rollback()
                logger.warning("Post-transfer step '%s' failed for course %s (ignored): %s", name, course_id, exc)

    def _increment_usage_counts(self, course_id: int) -> None:
        topic_ids = [topic.id for topic in topic_crud.get_course_topics(self.db, course_id)]
        updated = topic_crud.increment_usage_count(self.db, topic_ids)
        logger.info("Usage count incremented for %s topics of course %s", updated, course_id)

    def _archive_course(self, course_id: int) -> None:
        course_crud.set_course_status(self.db, course_id, CourseStatus.archived)

    async def _cleanup_content_history(self, course_id: int) -> None:
        report = await self.cleanup.cleanup_course_history(course_id)
        logger.info("Content history cleanup for course %s: %s", course_id, report.as_dict())


def _transfer_content_type(content_type_id: int) -> str:
    fmt = ContentFormat.from_type_id(content_type_id)
    if fmt is None:
        return "unknown"
    # Course Builder reads narration audio from the text_audio entry
    if fmt is ContentFormat.AUDIO:
        return ContentFormat.TEXT.type_name
    return fmt.type_name


def _load_content_data(raw: Any) -> Any:
    try:
        return load_json_column(raw, default={})
    except ValueError:
        return raw
