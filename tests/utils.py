"""Utility helpers for test factories."""

from __future__ import annotations

from typing import Any

from starlette.websockets import WebSocketState

from app.core.content_formats import ContentFormat
from app.models.content.content_model import Content, QualityCheckStatus
from app.models.content.content_history_model import ContentHistory
from app.models.course.course_model import Course, CourseStatus
from app.models.course.template_model import Template
from app.models.course.topic_model import Topic, TopicStatus


def create_course(db, **kwargs) -> Course:
    defaults = {
        "name": "Python Basics",
        "description": "An introduction",
        "language": "en",
        "trainer_id": "trainer-1",
        "trainer_name": "Dana",
        "status": CourseStatus.active,
    }
    defaults.update(kwargs)
    course = Course(**defaults)
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def create_template(db, format_order: list[str] | None = None, **kwargs) -> Template:
    template = Template(
        name=kwargs.pop("name", "Default"),
        format_order=["text", "code"] if format_order is None else format_order,
        **kwargs,
    )
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


def create_topic(db, *, course: Course | None = None, template: Template | None = None, **kwargs) -> Topic:
    defaults = {
        "name": "Variables",
        "course_id": course.id if course else None,
        "template_id": template.id if template else None,
        "language": "en",
        "skills": [],
        "trainer_id": "trainer-1",
        "status": TopicStatus.active,
    }
    defaults.update(kwargs)
    topic = Topic(**defaults)
    db.add(topic)
    db.commit()
    db.refresh(topic)
    return topic


def create_content(db, topic: Topic, fmt: ContentFormat, content_data: Any, **kwargs) -> Content:
    content = Content(
        topic_id=topic.id,
        content_type_id=fmt.type_id,
        content_data=content_data,
        quality_check_status=kwargs.pop("quality_check_status", QualityCheckStatus.approved),
        **kwargs,
    )
    db.add(content)
    db.commit()
    db.refresh(content)
    return content


def create_history(db, topic: Topic, fmt: ContentFormat, content_data: Any, **kwargs) -> ContentHistory:
    row = ContentHistory(
        content_id=kwargs.pop("content_id", None),
        topic_id=topic.id,
        content_type_id=fmt.type_id,
        content_data=content_data,
        generation_method_id=kwargs.pop("generation_method_id", "ai_assisted"),
        **kwargs,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def ready_course(db) -> tuple[Course, Topic]:
    """A course with one topic that passes every publication check."""
    course = create_course(db)
    template = create_template(db, ["text", "code"])
    topic = create_topic(db, course=course, template=template, devlab_exercises=[{"q": "1+1"}])
    create_content(db, topic, ContentFormat.TEXT, {"text": "Lesson body"})
    create_content(db, topic, ContentFormat.CODE, {"code": "print(1)"})
    return course, topic


class FakeStorage:
    """In-memory stand-in for SupabaseStorageClient recording deletions."""

    def __init__(self, *, configured: bool = True, fail_on: set[str] | None = None) -> None:
        self.configured = configured
        self.fail_on = fail_on or set()
        self.deleted: list[str] = []
        self.video_deletions: list[str] = []

    def is_configured(self) -> bool:
        return self.configured

    def delete_file_from_storage(self, path: str) -> None:
        if path in self.fail_on:
            raise RuntimeError(f"cannot delete {path}")
        self.deleted.append(path)

    def delete_video_from_storage(self, path: str) -> bool:
        self.video_deletions.append(path)
        if path in self.fail_on:
            raise RuntimeError(f"cannot delete {path}")
        return True


class DummyWebSocket:
    """Minimal websocket double capturing accepted and sent payloads."""

    def __init__(self, *, fail: bool = False) -> None:
        self.accepted = False
        self.fail = fail
        self.sent: list[str] = []
        self.application_state = WebSocketState.CONNECTED

    async def accept(self) -> None:  # pragma: no cover - executed in tests
        self.accepted = True

    async def send_text(self, data: str) -> None:  # pragma: no cover - executed in tests
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)
