from app.core.content_formats import ContentFormat
from app.crud import content_crud, content_history_crud
from app.models.content.content_model import QualityCheckStatus
from tests.utils import create_content, create_topic


def test_format_slots_always_list_six_formats(db_session):
    topic = create_topic(db_session)
    create_content(db_session, topic, ContentFormat.CODE, {"code": "x"})

    slots = content_crud.get_format_slots(db_session, topic.id)

    assert [slot["content_type_id"] for slot in slots] == [1, 2, 3, 4, 5, 6]
    assert [slot["status"] for slot in slots] == ["missing", "approved", "missing", "missing", "missing", "missing"]
    assert slots[1]["content"]["content_data"] == {"code": "x"}
    assert slots[0]["content"] is None


def test_save_generated_content_inserts(db_session):
    topic = create_topic(db_session)

    content = content_crud.save_generated_content(
        db_session,
        topic_id=topic.id,
        content_type_id=ContentFormat.TEXT.type_id,
        content_data={"text": "v1"},
        generation_method_id="video_to_lesson",
    )

    assert content.id is not None
    assert content.quality_check_status == QualityCheckStatus.pending
    assert content_history_crud.get_active_history_for_topic(db_session, topic.id) == []


def test_replacing_content_moves_previous_version_to_history(db_session):
    topic = create_topic(db_session)
    original = create_content(db_session, topic, ContentFormat.TEXT, {"text": "v1"})

    replaced = content_crud.save_generated_content(
        db_session,
        topic_id=topic.id,
        content_type_id=ContentFormat.TEXT.type_id,
        content_data={"text": "v2"},
    )

    assert replaced.id == original.id
    assert replaced.content_data == {"text": "v2"}
    assert replaced.quality_check_status == QualityCheckStatus.pending

    history = content_history_crud.get_active_history_for_topic(db_session, topic.id)
    assert len(history) == 1
    assert history[0].content_id == original.id
    assert history[0].content_data == {"text": "v1"}
