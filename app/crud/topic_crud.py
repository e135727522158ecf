# Fichier: app/crud/topic_crud.py
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.course.topic_model import Topic, TopicStatus

logger = logging.getLogger(__name__)


def create_topic(
    db: Session,
    *,
    name: str,
    trainer_id: str | None,
    course_id: int | None = None,
    template_id: int | None = None,
    description: str | None = None,
    language: str | None = None,
    skills: Iterable[str] | None = None,
    devlab_exercises=None,
) -> Topic:
    db_topic = Topic(
        name=name,
        course_id=course_id,
        template_id=template_id,
        description=description,
        language=language,
        skills=list(skills or []),
        devlab_exercises=devlab_exercises,
        trainer_id=trainer_id,
        status=TopicStatus.active,
    )
    db.add(db_topic)
    db.commit()
    db.refresh(db_topic)
    return db_topic


def create_system_topic(
    db: Session,
    *,
    name: str,
    course_id: int | None = None,
    language: str | None = None,
    skills: Iterable[str] | None = None,
    trainer_id: str | None = None,
) -> Topic:
    """Create a topic on behalf of the automated pipeline.

    Without an authenticated trainer the topic is owned by the synthetic
    ``SYSTEM_TRAINER_ID`` identity.
    """
    owner = trainer_id or settings.SYSTEM_TRAINER_ID
    logger.info("Creating system topic '%s' (course=%s, trainer=%s)", name, course_id, owner)
    return create_topic(
        db,
        name=name,
        trainer_id=owner,
        course_id=course_id,
        language=language,
        skills=skills,
    )


def get_topic(db: Session, topic_id: int) -> Optional[Topic]:
    return db.get(Topic, topic_id)


def get_course_topics(db: Session, course_id: int) -> List[Topic]:
    """Return the non-deleted topics of a course, oldest first."""
    return (
        db.query(Topic)
        .filter(Topic.course_id == course_id, Topic.status != TopicStatus.deleted)
        .order_by(Topic.id.asc())
        .all()
    )


def increment_usage_count(db: Session, topic_ids: Iterable[int]) -> int:
    ids = [topic_id for topic_id in topic_ids if topic_id is not None]
    if not ids:
        return 0
    updated = (
        db.query(Topic)
        .filter(Topic.id.in_(ids))
        .update({Topic.usage_count: Topic.usage_count + 1}, synchronize_session="fetch")
    )
    db.commit()
    return updated


def set_topic_status(db: Session, topic_id: int, status: TopicStatus) -> Optional[Topic]:
    db_topic = db.get(Topic, topic_id)
    if db_topic is None:
        return None
    db_topic.status = status
    db.commit()
    db.refresh(db_topic)
    logger.info("Topic %s status set to %s", topic_id, status.value)
    return db_topic
