# Fichier: app/models/course/topic_model.py
import enum
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base
from app.models.course.course_model import Course
from app.models.course.template_model import Template


class TopicStatus(enum.Enum):
    active = "active"
    archived = "archived"
    deleted = "deleted"


class Topic(Base):
    __tablename__ = "topics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # NULL => standalone topic
    course_id: Mapped[Optional[int]] = mapped_column(ForeignKey("courses.id"), nullable=True, index=True)
    template_id: Mapped[Optional[int]] = mapped_column(ForeignKey("templates.id"), nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    skills: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[TopicStatus] = mapped_column(
        Enum(TopicStatus, name="topicstatus", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=TopicStatus.active,
    )
    # null, a JSON-encoded string, a list of exercises or {html, questions, metadata}
    devlab_exercises: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    trainer_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    course: Mapped[Optional[Course]] = relationship(back_populates="topics")
    template: Mapped[Optional[Template]] = relationship()

    def __repr__(self) -> str:
        return f"<Topic(id={self.id}, name='{self.name}', course_id={self.course_id})>"
