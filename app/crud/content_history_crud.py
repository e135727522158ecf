from datetime import datetime
from typing import List, Sequence

from sqlalchemy.orm import Session

from app.models.content.content_history_model import ContentHistory
from app.models.content.content_model import Content


def add_snapshot(db: Session, content: Content) -> ContentHistory:
    """Stage a copy of ``content`` in the history table (the caller commits)."""
    snapshot = ContentHistory(
        content_id=content.id,
        topic_id=content.topic_id,
        content_type_id=content.content_type_id,
        content_data=content.content_data,
        generation_method_id=content.generation_method_id,
    )
    db.add(snapshot)
    return snapshot


def get_active_history_for_topic(db: Session, topic_id: int) -> List[ContentHistory]:
    return (
        db.query(ContentHistory)
        .filter(ContentHistory.topic_id == topic_id, ContentHistory.deleted_at.is_(None))
        .order_by(ContentHistory.id.asc())
        .all()
    )


def soft_delete(db: Session, rows: Sequence[ContentHistory], *, deleted_at: datetime) -> int:
    """Stamp ``deleted_at`` on every row and commit. Rows are never removed."""
    if not rows:
        return 0
    for row in rows:
        row.deleted_at = deleted_at
    db.commit()
    return len(rows)
