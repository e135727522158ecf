from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


class ContentHistory(Base):
    """Snapshot of a superseded content row, kept for audit until the course is archived."""

    __tablename__ = "content_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    content_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    topic_id: Mapped[int] = mapped_column(ForeignKey("topics.id"), nullable=False, index=True)
    content_type_id: Mapped[int] = mapped_column(Integer, nullable=False)
    content_data: Mapped[Any] = mapped_column(JSON, nullable=True)
    generation_method_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<ContentHistory(id={self.id}, topic_id={self.topic_id}, type={self.content_type_id})>"
