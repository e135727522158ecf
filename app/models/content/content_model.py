# Fichier: app/models/content/content_model.py
import enum
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base
from app.models.course.topic_model import Topic


class QualityCheckStatus(enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    needs_revision = "needs_revision"


class GenerationMethod(enum.Enum):
    manual = "manual"
    ai_assisted = "ai_assisted"
    video_to_lesson = "video_to_lesson"


class Content(Base):
    """Current content of one format for one topic."""

    __tablename__ = "contents"
    __table_args__ = (
        UniqueConstraint("topic_id", "content_type_id", name="uq_contents_topic_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    topic_id: Mapped[int] = mapped_column(ForeignKey("topics.id"), nullable=False, index=True)
    content_type_id: Mapped[int] = mapped_column(Integer, nullable=False)
    # shape depends on the format; legacy rows may hold a raw JSON string
    content_data: Mapped[Any] = mapped_column(JSON, nullable=False, default=dict)
    audio_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    quality_check_status: Mapped[QualityCheckStatus] = mapped_column(
        Enum(QualityCheckStatus, name="qualitycheckstatus", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=QualityCheckStatus.pending,
    )
    generation_method_id: Mapped[str] = mapped_column(
        String(50), nullable=False, default=GenerationMethod.manual.value
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    topic: Mapped[Topic] = relationship()

    def __repr__(self) -> str:
        return f"<Content(id={self.id}, topic_id={self.topic_id}, type={self.content_type_id})>"
