# Fichier: app/crud/content_crud.py
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.content_formats import ALL_FORMATS
from app.crud import content_history_crud
from app.models.content.content_model import Content, GenerationMethod, QualityCheckStatus

logger = logging.getLogger(__name__)


def get_content(db: Session, topic_id: int, content_type_id: int) -> Optional[Content]:
    return (
        db.query(Content)
        .filter(Content.topic_id == topic_id, Content.content_type_id == content_type_id)
        .first()
    )


def get_contents_for_topic(db: Session, topic_id: int) -> List[Content]:
    return (
        db.query(Content)
        .filter(Content.topic_id == topic_id)
        .order_by(Content.content_type_id.asc())
        .all()
    )


def save_generated_content(
    db: Session,
    *,
    topic_id: int,
    content_type_id: int,
    content_data: Any,
    generation_method_id: str = GenerationMethod.ai_assisted.value,
    audio_url: str | None = None,
) -> Content:
    """Create the current row for ``(topic_id, content_type_id)`` or replace it.

    A replaced row is first copied to the history table. Both writes are
    committed together.
    """
    existing = get_content(db, topic_id, content_type_id)
    if existing is not None:
        content_history_crud.add_snapshot(db, existing)
        existing.content_data = content_data
        existing.audio_url = audio_url
        existing.generation_method_id = generation_method_id
        existing.quality_check_status = QualityCheckStatus.pending
        db_content = existing
        logger.info("Replacing content %s (topic=%s, type=%s)", existing.id, topic_id, content_type_id)
    else:
        db_content = Content(
            topic_id=topic_id,
            content_type_id=content_type_id,
            content_data=content_data,
            audio_url=audio_url,
            generation_method_id=generation_method_id,
            quality_check_status=QualityCheckStatus.pending,
        )
        db.add(db_content)

    db.commit()
    db.refresh(db_content)
    return db_content


def get_format_slots(db: Session, topic_id: int) -> List[Dict[str, Any]]:
    """Always six entries, in format id order; absent formats are ``missing`` placeholders."""
    by_type = {content.content_type_id: content for content in get_contents_for_topic(db, topic_id)}
    slots: List[Dict[str, Any]] = []
    for fmt in ALL_FORMATS:
        content = by_type.get(fmt.type_id)
        if content is None:
            slots.append(
                {
                    "format": fmt.format_name,
                    "content_type_id": fmt.type_id,
                    "label": fmt.label,
                    "status": "missing",
                    "content": None,
                }
            )
            continue
        slots.append(
            {
                "format": fmt.format_name,
                "content_type_id": fmt.type_id,
                "label": fmt.label,
                "status": content.quality_check_status.value,
                "content": {
                    "content_id": content.id,
                    "content_data": content.content_data,
                    "audio_url": content.audio_url,
                    "generation_method_id": content.generation_method_id,
                },
            }
        )
    return slots
