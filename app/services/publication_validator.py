# app/services/publication_validator.py
"""Decide whether a course, or a standalone lesson, is complete enough to hand off for publishing.

The validator only reads. It never writes or commits, so the UI can call it
as often as it likes, including while a generation run is still in flight.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.content_formats import ContentFormat
from app.core.errors import NotFoundError
from app.crud import content_crud, course_crud, template_crud, topic_crud
from app.models.content.content_model import Content
from app.models.course.topic_model import Topic, TopicStatus
from app.services.devlab_exercises import decode_devlab_exercises
from app.utils.json_utils import load_json_column

logger = logging.getLogger(__name__)

NO_TOPICS = "Course has no lessons/topics. Add at least one lesson before transferring."
TEMPLATE_NOT_SELECTED = "A template has not been selected for this lesson"
TEMPLATE_NOT_FOUND = "Selected template not found"
TEMPLATE_WITHOUT_FORMAT_ORDER = "Template has no format order defined"
FORMAT_NOT_GENERATED = "Required format '{format}' has not been generated for this lesson"
CONTENT_PARSE_ERROR = "Content data for format '{format}' is invalid (parse error)"
AVATAR_VIDEO_FAILED = "Avatar video generation failed or is incomplete for format '{format}'"
GENERATION_FAILED = "Content generation failed for format '{format}'"
CONTENT_EMPTY = "Content for format '{format}' is empty or incomplete"
EXERCISES_INVALID = "DevLab exercises are missing or invalid"
TOPIC_IN_COURSE = "This topic belongs to a course. Use course publish instead."


class _UnparseableContent(ValueError):
    pass


@dataclass(frozen=True)
class ValidationIssue:
    topic: str
    issue: str

    def as_dict(self) -> Dict[str, str]:
        return {"topic": self.topic, "issue": self.issue}


@dataclass
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def as_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": [error.as_dict() for error in self.errors]}


def topic_label(topic: Topic) -> str:
    return topic.name or f"Topic ID {topic.id}"


def is_content_empty(content_data: Any, format_name: str) -> bool:
    if not isinstance(content_data, dict):
        return True

    if format_name in ("text", "audio"):
        return not _non_blank(content_data.get("text"))
    if format_name == "code":
        return not _non_blank(content_data.get("code"))
    if format_name == "presentation":
        return not (content_data.get("presentationUrl") or content_data.get("fileUrl"))
    if format_name == "mind_map":
        nodes = content_data.get("nodes")
        return not (isinstance(nodes, list) and nodes)
    if format_name == "avatar_video":
        return not content_data.get("videoUrl")
    return len(content_data) == 0


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _decode_content_data(raw: Any) -> Any:
    try:
        return load_json_column(raw, default={})
    except ValueError as exc:
        raise _UnparseableContent(str(exc)) from exc


def _index_contents(contents: List[Content]) -> Dict[str, Content]:
    """Key the topic's rows by every name a template may use for them."""
    by_name: Dict[str, Content] = {}
    for content in contents:
        fmt = ContentFormat.from_type_id(content.content_type_id)
        if fmt is None:
            by_name.setdefault(str(content.content_type_id), content)
            continue
        by_name[fmt.format_name] = content
        by_name[fmt.type_name] = content

    text_audio = by_name.get(ContentFormat.TEXT.type_name)
    if text_audio is not None:
        # narration lives on the text_audio row
        by_name["text"] = text_audio
        by_name["audio"] = text_audio
    return by_name


class PublicationValidator:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def validate(self, course_id: int) -> ValidationResult:
        course = course_crud.get_course(self.db, course_id)
        if course is None:
            raise NotFoundError(f"Course {course_id} not found", error_code="COURSE_NOT_FOUND")

        result = ValidationResult()
        topics = topic_crud.get_course_topics(self.db, course_id)
        logger.info("Validating course %s (%s topics)", course_id, len(topics))

        if not topics:
            result.errors.append(ValidationIssue(topic="Course", issue=NO_TOPICS))
            return result

        for topic in topics:
            result.errors.extend(self.validate_topic(topic))

        logger.info(
            "Course %s validation finished: valid=%s errors=%s",
            course_id,
            result.valid,
            len(result.errors),
        )
        return result

    def validate_standalone_topic(self, topic_id: int) -> ValidationResult:
        """Readiness of a lesson that lives outside any course."""
        topic = topic_crud.get_topic(self.db, topic_id)
        if topic is None or topic.status == TopicStatus.deleted:
            raise NotFoundError(f"Topic {topic_id} not found", error_code="TOPIC_NOT_FOUND")

        if topic.course_id is not None:
            return ValidationResult([ValidationIssue(topic=topic_label(topic), issue=TOPIC_IN_COURSE)])
        return ValidationResult(self.validate_topic(topic))

    def validate_topic(self, topic: Topic) -> List[ValidationIssue]:
        label = topic_label(topic)
        issues: List[ValidationIssue] = []

        def report(message: str) -> None:
            issues.append(ValidationIssue(topic=label, issue=message))

        if not topic.template_id:
            report(TEMPLATE_NOT_SELECTED)
            return issues

        template = template_crud.get_template(self.db, topic.template_id)
        if template is None:
            report(TEMPLATE_NOT_FOUND)
            return issues

        format_order = template.format_order
        if not isinstance(format_order, list) or not format_order:
            report(TEMPLATE_WITHOUT_FORMAT_ORDER)
            return issues

        contents = _index_contents(content_crud.get_contents_for_topic(self.db, topic.id))
        for format_name in format_order:
            for message in self._check_format(str(format_name), contents):
                report(message)

        if not decode_devlab_exercises(topic.devlab_exercises).is_valid:
            report(EXERCISES_INVALID)

        return issues

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _check_format(self, format_name: str, contents: Dict[str, Content]) -> List[str]:
        fmt = ContentFormat.from_name(format_name)
        content = contents.get(format_name)
        if content is None and fmt is not None:
            content = contents.get(fmt.type_name)
        if content is None:
            return [FORMAT_NOT_GENERATED.format(format=format_name)]

        try:
            data = _decode_content_data(content.content_data)
        except _UnparseableContent as exc:
            logger.error("Unparseable content_data (content=%s): %s", content.id, exc)
            return [CONTENT_PARSE_ERROR.format(format=format_name)]

        messages: List[str] = []
        payload = data if isinstance(data, dict) else {}
        if content.content_type_id == ContentFormat.AVATAR_VIDEO.type_id:
            if not payload.get("videoUrl") or payload.get("error"):
                messages.append(AVATAR_VIDEO_FAILED.format(format=format_name))
        elif payload.get("status") == "failed":
            messages.append(GENERATION_FAILED.format(format=format_name))

        if is_content_empty(data, format_name):
            messages.append(CONTENT_EMPTY.format(format=format_name))
        return messages


def get_validation_summary(result: ValidationResult) -> Optional[str]:
    """Consolidated trainer-facing message, or None when the course is ready."""
    if result.valid:
        return None
    return "\n\n".join(
        f'Cannot transfer the course:\n{error.issue} for the lesson: "{error.topic}"'
        for error in result.errors
    )
