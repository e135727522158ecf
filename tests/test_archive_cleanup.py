import pytest

from app.core.content_formats import ContentFormat
from app.crud import content_history_crud
from app.services.archive_cleanup import ArchiveCleanupService, extract_storage_paths
from tests.utils import FakeStorage, create_course, create_history, create_topic

PUBLIC = "https://x.supabase.co/storage/v1/object/public/media/"


def test_avatar_paths_are_deduplicated_and_decoded():
    paths = extract_storage_paths(
        {
            "storagePath": "videos/lesson 1.mp4",
            "videoUrl": PUBLIC + "videos/lesson%201.mp4",
            "metadata": {"storagePath": "videos/raw.mp4"},
        },
        ContentFormat.AVATAR_VIDEO.type_id,
    )
    assert paths == ["videos/lesson 1.mp4", "videos/raw.mp4"]


def test_presentation_and_audio_paths():
    assert extract_storage_paths(
        {"presentationUrl": PUBLIC + "slides/a.pptx", "fileUrl": "https://elsewhere/b.pdf"},
        ContentFormat.PRESENTATION.type_id,
    ) == ["slides/a.pptx"]
    assert extract_storage_paths({"audioUrl": PUBLIC + "audio/a.mp3"}, ContentFormat.AUDIO.type_id) == ["audio/a.mp3"]
    assert extract_storage_paths({"text": "x"}, ContentFormat.TEXT.type_id) == []


@pytest.mark.asyncio
async def test_topic_history_is_purged_and_soft_deleted(db_session, storage):
    topic = create_topic(db_session)
    create_history(db_session, topic, ContentFormat.AVATAR_VIDEO, {"videoUrl": PUBLIC + "videos/a.mp4"})
    create_history(db_session, topic, ContentFormat.TEXT, {"text": "old"})

    report = await ArchiveCleanupService(db_session, storage).cleanup_topic_history(topic.id)

    assert storage.deleted == ["videos/a.mp4"]
    assert report.deleted_from_storage == 1
    assert report.deleted_from_database == 2
    assert report.success
    assert content_history_crud.get_active_history_for_topic(db_session, topic.id) == []


@pytest.mark.asyncio
async def test_blob_failures_are_recorded_but_rows_still_soft_deleted(db_session):
    storage = FakeStorage(fail_on={"slides/a.pptx"})
    topic = create_topic(db_session)
    row = create_history(db_session, topic, ContentFormat.PRESENTATION, {"presentationUrl": PUBLIC + "slides/a.pptx"})
    create_history(db_session, topic, ContentFormat.CODE, "not json {")

    report = await ArchiveCleanupService(db_session, storage).cleanup_topic_history(topic.id)

    assert report.deleted_from_database == 2
    assert report.deleted_from_storage == 0
    assert not report.success
    assert report.errors[0]["historyId"] == row.id
    assert report.errors[1]["error"].startswith("Failed to parse content_data")


@pytest.mark.asyncio
async def test_unconfigured_storage_skips_blobs(db_session):
    storage = FakeStorage(configured=False)
    topic = create_topic(db_session)
    create_history(db_session, topic, ContentFormat.AVATAR_VIDEO, {"storagePath": "videos/a.mp4"})

    report = await ArchiveCleanupService(db_session, storage).cleanup_topic_history(topic.id)

    assert storage.deleted == []
    assert report.deleted_from_database == 1


@pytest.mark.asyncio
async def test_course_cleanup_aggregates_topics(db_session, storage):
    course = create_course(db_session)
    first = create_topic(db_session, course=course, name="One")
    second = create_topic(db_session, course=course, name="Two")
    create_history(db_session, first, ContentFormat.AUDIO, {"audioUrl": PUBLIC + "audio/1.mp3"})
    create_history(db_session, second, ContentFormat.AUDIO, {"audioUrl": PUBLIC + "audio/2.mp3"})

    report = await ArchiveCleanupService(db_session, storage).cleanup_course_history(course.id)

    assert report.as_dict() == {
        "success": True,
        "topicsProcessed": 2,
        "deletedFromStorage": 2,
        "deletedFromDatabase": 2,
        "errors": [],
    }
