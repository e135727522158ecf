"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS", "0")

from app.db.base_class import Base
from app.models.course.course_model import Course
from app.models.course.template_model import Template
from app.models.course.topic_model import Topic
from app.models.content.content_model import Content
from app.models.content.content_history_model import ContentHistory
from tests.utils import FakeStorage


TABLES = [
    Course.__table__,
    Template.__table__,
    Topic.__table__,
    Content.__table__,
    ContentHistory.__table__,
]


@pytest.fixture()
def engine():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine, tables=TABLES)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=TABLES)
        engine.dispose()


@pytest.fixture()
def db_session(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, future=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()
