# Fichier: app/crud/course_crud.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.course.course_model import Course, CourseStatus

logger = logging.getLogger(__name__)


def create_course(
    db: Session,
    *,
    name: str,
    description: str | None = None,
    language: str = "en",
    trainer_id: str | None = None,
    trainer_name: str | None = None,
) -> Course:
    db_course = Course(
        name=name,
        description=description,
        language=language,
        trainer_id=trainer_id,
        trainer_name=trainer_name,
        status=CourseStatus.active,
    )
    db.add(db_course)
    db.commit()
    db.refresh(db_course)
    return db_course


def get_course(db: Session, course_id: int) -> Optional[Course]:
    return db.get(Course, course_id)


def set_course_status(db: Session, course_id: int, status: CourseStatus) -> Optional[Course]:
    """Update the course status. Returns None when the course does not exist."""
    db_course = db.get(Course, course_id)
    if db_course is None:
        return None
    db_course.status = status
    db.commit()
    db.refresh(db_course)
    logger.info("Course %s status set to %s", course_id, status.value)
    return db_course
