# app/services/topic_publisher.py
"""Mark a standalone lesson as ready for reuse.

Nothing is sent to Course Builder here: it requests archived lessons when it
assembles a personalized course, and counts their usage at that point.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.core.errors import PersistenceError, PublicationValidationFailed
from app.crud import topic_crud
from app.models.course.topic_model import TopicStatus
from app.services.archive_cleanup import ArchiveCleanupService
from app.services.publication_validator import PublicationValidator, ValidationResult

logger = logging.getLogger(__name__)

ARCHIVE_FAILED_MESSAGE = "Failed to mark lesson as archived. Please try again later."
LESSON_ARCHIVED_MESSAGE = (
    "The lesson has been successfully marked as archived and will be available "
    "for use in personalized courses."
)


def get_lesson_summary(result: ValidationResult) -> str | None:
    if result.valid:
        return None
    return "Cannot mark lesson as ready:\n" + "\n".join(error.issue for error in result.errors)


class StandaloneTopicPublisher:
    def __init__(
        self,
        db: Session,
        *,
        storage=None,
        validator: PublicationValidator | None = None,
        cleanup: ArchiveCleanupService | None = None,
    ):
        self.db = db
        self.validator = validator or PublicationValidator(db)
        self.cleanup = cleanup or ArchiveCleanupService(db, storage)

    async def execute(self, topic_id: int) -> Dict[str, Any]:
        validation = self.validator.validate_standalone_topic(topic_id)
        if not validation.valid:
            logger.error("Lesson %s is not ready: %s", topic_id, validation.as_dict()["errors"])
            raise PublicationValidationFailed(
                get_lesson_summary(validation), validation.errors, error_code="LESSON_NOT_READY"
            )

        try:
            topic_crud.set_topic_status(self.db, topic_id, TopicStatus.archived)
        except Exception as exc:
            self.db.rollback()
            logger.error("Could not archive lesson %s: %s", topic_id, exc)
            raise PersistenceError(ARCHIVE_FAILED_MESSAGE, error_code="ARCHIVE_FAILED") from exc

        try:
            report = await self.cleanup.cleanup_topic_history(topic_id)
            logger.info("Content history cleanup for lesson %s: %s", topic_id, report.as_dict())
        except Exception as exc:
            self.db.rollback()
            logger.warning("Content history cleanup failed for lesson %s (ignored): %s", topic_id, exc)

        return {"success": True, "message": LESSON_ARCHIVED_MESSAGE}
