# Fichier: app/api/v1/dependencies.py
import logging
from typing import Generator, NoReturn

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.errors import ContentStudioError
from app.db import session as db_session
from app.notifications.generation_progress import GenerationProgressManager, generation_progress_manager
from app.services.content_generator import ContentGenerator, OpenAIContentGenerator
from app.services.course_builder_client import CourseBuilderClient, course_builder_client
from app.services.course_publisher import CoursePublisher
from app.services.storage.supabase_storage import SupabaseStorageClient, storage_client
from app.services.topic_publisher import StandaloneTopicPublisher

log = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    # resolved at call time: configure_database may have swapped the factory
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_storage() -> SupabaseStorageClient:
    return storage_client


def get_generator() -> ContentGenerator:
    return OpenAIContentGenerator()


def get_course_builder() -> CourseBuilderClient:
    return course_builder_client


def get_progress_manager() -> GenerationProgressManager:
    return generation_progress_manager


def get_course_publisher(
    db: Session = Depends(get_db),
    transfer: CourseBuilderClient = Depends(get_course_builder),
    storage: SupabaseStorageClient = Depends(get_storage),
) -> CoursePublisher:
    return CoursePublisher(db, transfer=transfer, storage=storage)


def get_topic_publisher(
    db: Session = Depends(get_db),
    storage: SupabaseStorageClient = Depends(get_storage),
) -> StandaloneTopicPublisher:
    return StandaloneTopicPublisher(db, storage=storage)


def raise_http_error(exc: ContentStudioError) -> NoReturn:
    """Translate a domain error into the HTTPException FastAPI renders."""

    if exc.status_code >= 500:
        log.error("%s (%s): %s", exc.__class__.__name__, exc.error_code, exc.message)
    else:
        log.info("%s (%s): %s", exc.__class__.__name__, exc.error_code, exc.message)

    detail = {"message": exc.message, "error_code": exc.error_code}
    issues = getattr(exc, "issues", None)
    if issues:
        detail["errors"] = [issue.as_dict() for issue in issues]
    raise HTTPException(status_code=exc.status_code, detail=detail) from exc
