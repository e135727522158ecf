# Fichier: app/api/v1/endpoints/topic_router.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_db, get_topic_publisher, raise_http_error
from app.core.errors import ContentStudioError
from app.crud import content_crud, topic_crud
from app.schemas.content.generation_schema import TopicFormatsResponse
from app.schemas.content.publication_schema import LessonCheckResponse, PublishResponse
from app.services.publication_validator import PublicationValidator
from app.services.topic_publisher import StandaloneTopicPublisher

router = APIRouter()


@router.get("/{topic_id}/formats", response_model=TopicFormatsResponse)
def read_topic_formats(topic_id: int, db: Session = Depends(get_db)):
    if topic_crud.get_topic(db, topic_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Topic not found")
    return {"topic_id": topic_id, "formats": content_crud.get_format_slots(db, topic_id)}


@router.get("/{topic_id}/publication-check", response_model=LessonCheckResponse)
def check_lesson_publication(topic_id: int, db: Session = Depends(get_db)):
    try:
        result = PublicationValidator(db).validate_standalone_topic(topic_id)
    except ContentStudioError as exc:
        raise_http_error(exc)
    return {"topic_id": topic_id, **result.as_dict()}


@router.post("/{topic_id}/publish", response_model=PublishResponse)
async def publish_lesson(topic_id: int, publisher: StandaloneTopicPublisher = Depends(get_topic_publisher)):
    """Archive a standalone lesson so Course Builder can pick it up."""
    try:
        return await publisher.execute(topic_id)
    except ContentStudioError as exc:
        raise_http_error(exc)
