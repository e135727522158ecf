# app/services/content_persistence.py
"""Store one generated format, undoing its blob upload if the row cannot be written."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.content_formats import ContentFormat
from app.core.errors import PersistenceError
from app.crud import content_crud
from app.models.content.content_model import Content, GenerationMethod
from app.services.content_data_cleaner import clean_content_data
from app.services.storage.supabase_storage import extract_storage_path

logger = logging.getLogger(__name__)


@dataclass
class GeneratedContent:
    topic_id: int
    content_type_id: int
    content_data: Any
    generation_method_id: str = GenerationMethod.ai_assisted.value
    audio_url: Optional[str] = None


def find_uploaded_video_path(content_data: Any) -> str | None:
    """Storage path of an avatar video already uploaded for this payload, if any."""

    if not isinstance(content_data, dict):
        return None

    explicit = content_data.get("storagePath")
    if isinstance(explicit, str) and explicit.strip():
        return explicit.strip()

    metadata = content_data.get("metadata")
    if isinstance(metadata, dict):
        nested = metadata.get("storagePath")
        if isinstance(nested, str) and nested.strip():
            return nested.strip()

    for key in ("videoUrl", "storageUrl"):
        path = extract_storage_path(content_data.get(key))
        if path:
            return path
    return None


class ContentPersistenceGateway:
    """Writes generated content through the content repository.

    ``repository`` exposes ``save_generated_content(db, **fields)`` (the
    :mod:`app.crud.content_crud` module by default). ``storage`` exposes
    ``delete_video_from_storage(path)``.
    """

    def __init__(self, db: Session, storage=None, repository=content_crud):
        self.db = db
        self.storage = storage
        self.repository = repository

    async def persist(self, generated: GeneratedContent) -> Content:
        uploaded_path = None
        if generated.content_type_id == ContentFormat.AVATAR_VIDEO.type_id:
            uploaded_path = find_uploaded_video_path(generated.content_data)

        cleaned = clean_content_data(generated.content_data, generated.content_type_id)

        # No await between the write and its commit: sibling formats share the session.
        try:
            return self.repository.save_generated_content(
                self.db,
                topic_id=generated.topic_id,
                content_type_id=generated.content_type_id,
                content_data=cleaned,
                generation_method_id=generated.generation_method_id,
                audio_url=generated.audio_url,
            )
        except Exception as exc:
            self.db.rollback()
            logger.error(
                "Could not store content (topic=%s, type=%s): %s",
                generated.topic_id,
                generated.content_type_id,
                exc,
            )
            if uploaded_path:
                await self._compensate(uploaded_path)
            raise PersistenceError(
                f"Failed to save content for topic {generated.topic_id}: {exc}",
                context={
                    "topic_id": generated.topic_id,
                    "content_type_id": generated.content_type_id,
                    "rolled_back_path": uploaded_path,
                },
            ) from exc

    async def _compensate(self, path: str) -> None:
        if self.storage is None:
            logger.warning("No storage client available, orphaned video left at '%s'", path)
            return
        logger.info("Rolling back uploaded video '%s' after failed database write", path)
        try:
            await asyncio.to_thread(self.storage.delete_video_from_storage, path)
        except Exception as exc:
            logger.error("Rollback of '%s' failed: %s", path, exc)
