# app/services/archive_cleanup.py
"""Purge superseded content once a course (or topic) has been archived.

For each topic, the non-deleted history rows are scanned for blobs they
reference in Supabase Storage; every blob is deleted best-effort, then the
rows are soft-deleted (``deleted_at`` stamped, never removed).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.content_formats import BLOB_BACKED_FORMATS, ContentFormat
from app.crud import content_history_crud, topic_crud
from app.models.content.content_history_model import ContentHistory
from app.services.storage.supabase_storage import extract_storage_path
from app.utils.json_utils import load_json_column

logger = logging.getLogger(__name__)

# Fields that may hold a Supabase public URL, per content type.
_URL_FIELDS = {
    ContentFormat.AVATAR_VIDEO.type_id: ("videoUrl", "storageUrl"),
    ContentFormat.PRESENTATION.type_id: ("presentationUrl", "fileUrl", "googleSlidesUrl"),
    ContentFormat.AUDIO.type_id: ("audioUrl",),
}


@dataclass
class CleanupReport:
    topics_processed: int = 0
    deleted_from_storage: int = 0
    deleted_from_database: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def merge(self, other: "CleanupReport") -> None:
        self.deleted_from_storage += other.deleted_from_storage
        self.deleted_from_database += other.deleted_from_database
        self.errors.extend(other.errors)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "topicsProcessed": self.topics_processed,
            "deletedFromStorage": self.deleted_from_storage,
            "deletedFromDatabase": self.deleted_from_database,
            "errors": list(self.errors),
        }


def extract_storage_paths(content_data: Dict[str, Any], content_type_id: int) -> List[str]:
    """Storage paths referenced by a payload, de-duplicated, in discovery order."""

    if ContentFormat.from_type_id(content_type_id) not in BLOB_BACKED_FORMATS:
        return []

    paths: List[str] = []
    if content_type_id == ContentFormat.AVATAR_VIDEO.type_id and content_data.get("storagePath"):
        paths.append(str(content_data["storagePath"]))

    for key in _URL_FIELDS.get(content_type_id, ()):
        path = extract_storage_path(content_data.get(key))
        if path:
            paths.append(path)

    if content_type_id == ContentFormat.AVATAR_VIDEO.type_id:
        metadata = content_data.get("metadata")
        if isinstance(metadata, dict) and metadata.get("storagePath"):
            paths.append(str(metadata["storagePath"]))

    return list(dict.fromkeys(paths))


class ArchiveCleanupService:
    def __init__(self, db: Session, storage):
        self.db = db
        self.storage = storage

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def cleanup_course_history(self, course_id: int) -> CleanupReport:
        topics = topic_crud.get_course_topics(self.db, course_id)
        report = CleanupReport(topics_processed=len(topics))
        logger.info("Cleaning content history of course %s (%s topics)", course_id, len(topics))

        for topic in topics:
            try:
                report.merge(await self.cleanup_topic_history(topic.id))
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.error("History cleanup failed for topic %s: %s", topic.id, exc)
                report.errors.append({"topicId": topic.id, "error": str(exc)})

        logger.info(
            "Course %s history cleanup done: storage=%s database=%s errors=%s",
            course_id,
            report.deleted_from_storage,
            report.deleted_from_database,
            len(report.errors),
        )
        return report

    async def cleanup_topic_history(self, topic_id: int) -> CleanupReport:
        report = CleanupReport(topics_processed=1)
        rows = content_history_crud.get_active_history_for_topic(self.db, topic_id)
        if not rows:
            return report

        await self._delete_blobs(rows, report)
        report.deleted_from_database = content_history_crud.soft_delete(
            self.db, rows, deleted_at=datetime.now(timezone.utc)
        )
        logger.info(
            "Topic %s: %s history rows soft-deleted, %s blobs removed",
            topic_id,
            report.deleted_from_database,
            report.deleted_from_storage,
        )
        return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _delete_blobs(self, rows: List[ContentHistory], report: CleanupReport) -> None:
        storage_ready = self.storage is not None and self.storage.is_configured()
        if not storage_ready:
            logger.info("Storage not configured, skipping blob deletion for %s history rows", len(rows))

        for row in rows:
            try:
                data = load_json_column(row.content_data)
            except ValueError as exc:
                logger.warning("History row %s has unparseable content_data: %s", row.id, exc)
                report.errors.append({"historyId": row.id, "error": f"Failed to parse content_data: {exc}"})
                continue
            if not isinstance(data, dict) or not storage_ready:
                continue

            for path in extract_storage_paths(data, row.content_type_id):
                try:
                    await asyncio.to_thread(self.storage.delete_file_from_storage, path)
                except Exception as exc:
                    logger.warning("Could not delete '%s' (history %s): %s", path, row.id, exc)
                    report.errors.append({"historyId": row.id, "storagePath": path, "error": str(exc)})
                    continue
                report.deleted_from_storage += 1
