# Fichier: app/api/v1/endpoints/generation_router.py
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import (
    get_db,
    get_generator,
    get_progress_manager,
    get_storage,
    raise_http_error,
)
from app.core.errors import ContentStudioError, NotFoundError
from app.crud import course_crud, topic_crud
from app.notifications.generation_progress import GenerationProgressManager
from app.schemas.content.generation_schema import GenerationResponse, TranscriptGenerationRequest
from app.services.content_generator import ContentGenerator
from app.services.content_persistence import ContentPersistenceGateway
from app.services.format_generation_coordinator import FormatGenerationCoordinator
from app.services.storage.supabase_storage import SupabaseStorageClient
from app.services.topic_metadata_resolver import DEFAULT_TITLE

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/transcript",
    response_model=GenerationResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate every content format of a lesson from a transcript",
)
async def generate_from_transcript(
    payload: TranscriptGenerationRequest,
    db: Session = Depends(get_db),
    generator: ContentGenerator = Depends(get_generator),
    storage: SupabaseStorageClient = Depends(get_storage),
    progress: GenerationProgressManager = Depends(get_progress_manager),
):
    """
    Runs the six formats concurrently. When no ``topic_id`` is given a topic is
    created first (inside ``course_id`` when provided, standalone otherwise).
    Per-format failures are reported in ``content_formats``, never as an HTTP error.
    """
    try:
        topic_id = payload.topic_id
        if topic_id is None:
            if payload.course_id is not None and course_crud.get_course(db, payload.course_id) is None:
                raise NotFoundError(f"Course {payload.course_id} not found", error_code="COURSE_NOT_FOUND")
            topic = topic_crud.create_system_topic(
                db,
                name=payload.topic_name or DEFAULT_TITLE,
                course_id=payload.course_id,
                language=payload.language,
                skills=payload.skills,
                trainer_id=payload.trainer_id,
            )
            topic_id = topic.id
        elif topic_crud.get_topic(db, topic_id) is None:
            raise NotFoundError(f"Topic {topic_id} not found", error_code="TOPIC_NOT_FOUND")

        coordinator = FormatGenerationCoordinator(
            db,
            generator=generator,
            persistence=ContentPersistenceGateway(db, storage),
        )
        return await coordinator.generate_all(
            payload.transcript,
            topic_id,
            on_progress=progress.sink_for(topic_id),
            topic_name=payload.topic_name,
            language=payload.language,
            skills=payload.skills or None,
        )
    except ContentStudioError as exc:
        raise_http_error(exc)
