import json

import pytest
from fastapi import HTTPException

from app.api.v1.endpoints import course_router, generation_router, topic_router
from app.core import openai_service
from app.core.config import settings
from app.crud import topic_crud
from app.notifications.generation_progress import GenerationProgressManager
from app.schemas.content.generation_schema import TranscriptGenerationRequest
from app.services.course_publisher import CoursePublisher
from app.services.topic_publisher import StandaloneTopicPublisher
from tests.utils import DummyWebSocket, FakeStorage, create_course, create_topic, ready_course


class EchoGenerator:
    async def generate(self, request):
        return {"content_data": {"text": request["transcriptText"], "code": "x", "nodes": [{"id": "a"}]}}


class FakeTransfer:
    def __init__(self, error=None):
        self.error = error

    def send(self, course):
        if self.error is not None:
            raise self.error


@pytest.fixture(autouse=True)
def _no_openai(monkeypatch):
    monkeypatch.setattr(openai_service, "openai_client", None)


async def _generate(db, payload, progress=None):
    return await generation_router.generate_from_transcript(
        payload,
        db=db,
        generator=EchoGenerator(),
        storage=FakeStorage(),
        progress=progress or GenerationProgressManager(),
    )


@pytest.mark.asyncio
async def test_generation_creates_system_topic_and_streams_progress(db_session):
    progress = GenerationProgressManager()
    listener = DummyWebSocket()
    await progress.connect(1, listener)

    result = await _generate(
        db_session,
        TranscriptGenerationRequest(transcript="Loops repeat work. They save typing.", topic_name="Loops"),
        progress,
    )

    topic = topic_crud.get_topic(db_session, result["topic_id"])
    assert topic.id == 1
    assert topic.trainer_id == settings.SYSTEM_TRAINER_ID
    assert len(result["content_formats"]) == 6
    events = [json.loads(message) for message in listener.sent]
    assert len(events) == 12
    assert {event["type"] for event in events} == {"generation_progress"}


@pytest.mark.asyncio
async def test_generation_for_unknown_topic_is_404(db_session):
    with pytest.raises(HTTPException) as exc_info:
        await _generate(db_session, TranscriptGenerationRequest(transcript="Text.", topic_id=99))
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail["error_code"] == "TOPIC_NOT_FOUND"


@pytest.mark.asyncio
async def test_generation_into_unknown_course_is_404(db_session):
    with pytest.raises(HTTPException) as exc_info:
        await _generate(db_session, TranscriptGenerationRequest(transcript="Text.", course_id=5))
    assert exc_info.value.status_code == 404


def test_blank_transcript_is_rejected():
    with pytest.raises(ValueError):
        TranscriptGenerationRequest(transcript="   ")


def test_topic_formats(db_session):
    topic = create_topic(db_session)

    response = topic_router.read_topic_formats(topic.id, db=db_session)

    assert response["topic_id"] == topic.id
    assert [slot["status"] for slot in response["formats"]] == ["missing"] * 6

    with pytest.raises(HTTPException) as exc_info:
        topic_router.read_topic_formats(404, db=db_session)
    assert exc_info.value.status_code == 404


def test_publication_check(db_session):
    course = create_course(db_session)

    response = course_router.check_course_publication(course.id, db=db_session)

    assert response["course_id"] == course.id
    assert response["valid"] is False
    assert len(response["errors"]) == 1


@pytest.mark.asyncio
async def test_publish_success(db_session):
    course, _ = ready_course(db_session)
    publisher = CoursePublisher(db_session, transfer=FakeTransfer(), storage=FakeStorage())

    response = await course_router.publish_course(course.id, publisher=publisher)

    assert response["success"] is True


@pytest.mark.asyncio
async def test_publish_not_ready_is_422_with_issues(db_session):
    course = create_course(db_session)
    publisher = CoursePublisher(db_session, transfer=FakeTransfer())

    with pytest.raises(HTTPException) as exc_info:
        await course_router.publish_course(course.id, publisher=publisher)

    assert exc_info.value.status_code == 422
    assert exc_info.value.detail["errors"][0]["topic"] == "Course"


@pytest.mark.asyncio
async def test_publish_transfer_failure_is_502(db_session):
    course, _ = ready_course(db_session)
    publisher = CoursePublisher(db_session, transfer=FakeTransfer(ConnectionError("down")))

    with pytest.raises(HTTPException) as exc_info:
        await course_router.publish_course(course.id, publisher=publisher)

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_publish_unknown_course_is_404(db_session):
    publisher = CoursePublisher(db_session, transfer=FakeTransfer())

    with pytest.raises(HTTPException) as exc_info:
        await course_router.publish_course(404, publisher=publisher)

    assert exc_info.value.status_code == 404


def test_lesson_publication_check(db_session):
    topic = create_topic(db_session)

    response = topic_router.check_lesson_publication(topic.id, db=db_session)

    assert response == {
        "topic_id": topic.id,
        "valid": False,
        "errors": [{"topic": "Variables", "issue": "A template has not been selected for this lesson"}],
    }

    with pytest.raises(HTTPException) as exc_info:
        topic_router.check_lesson_publication(404, db=db_session)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_publish_lesson_from_a_course_is_422(db_session):
    _, topic = ready_course(db_session)
    publisher = StandaloneTopicPublisher(db_session, storage=FakeStorage())

    with pytest.raises(HTTPException) as exc_info:
        await topic_router.publish_lesson(topic.id, publisher=publisher)

    assert exc_info.value.status_code == 422
    assert exc_info.value.detail["error_code"] == "LESSON_NOT_READY"
