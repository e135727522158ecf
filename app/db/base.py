"""Imports every model so ``Base.metadata`` knows all tables."""

from app.db.base_class import Base

# Courses, topics and templates
from app.models.course.course_model import Course, CourseStatus
from app.models.course.template_model import Template
from app.models.course.topic_model import Topic, TopicStatus

# Generated content
from app.models.content.content_model import Content, GenerationMethod, QualityCheckStatus
from app.models.content.content_history_model import ContentHistory

__all__ = (
    "Base",
    "Course",
    "CourseStatus",
    "Template",
    "Topic",
    "TopicStatus",
    "Content",
    "GenerationMethod",
    "QualityCheckStatus",
    "ContentHistory",
)
