# Fichier: app/models/course/course_model.py
import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Enum, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base


class CourseStatus(enum.Enum):
    active = "active"
    archived = "archived"
    deleted = "deleted"


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(String(10), nullable=False, default="en")
    trainer_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    trainer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[CourseStatus] = mapped_column(
        Enum(CourseStatus, name="coursestatus", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=CourseStatus.active,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # soft-deleted topics stay attached; readers filter on status
    topics: Mapped[List["Topic"]] = relationship(back_populates="course", order_by="Topic.id")

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, name='{self.name}', status='{self.status.value}')>"
