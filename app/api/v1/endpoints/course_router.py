# Fichier: app/api/v1/endpoints/course_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_course_publisher, get_db, raise_http_error
from app.core.errors import ContentStudioError
from app.schemas.content.publication_schema import PublicationCheckResponse, PublishResponse
from app.services.course_publisher import CoursePublisher
from app.services.publication_validator import PublicationValidator

router = APIRouter()


@router.get("/{course_id}/publication-check", response_model=PublicationCheckResponse)
def check_course_publication(course_id: int, db: Session = Depends(get_db)):
    """Lists every problem blocking the transfer, without transferring anything."""
    try:
        result = PublicationValidator(db).validate(course_id)
    except ContentStudioError as exc:
        raise_http_error(exc)
    return {"course_id": course_id, **result.as_dict()}


@router.post("/{course_id}/publish", response_model=PublishResponse)
async def publish_course(course_id: int, publisher: CoursePublisher = Depends(get_course_publisher)):
    try:
        return await publisher.execute(course_id)
    except ContentStudioError as exc:
        raise_http_error(exc)
