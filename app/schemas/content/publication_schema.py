# Fichier: app/schemas/content/publication_schema.py
from pydantic import BaseModel
from typing import List


class ValidationIssueRead(BaseModel):
    topic: str
    issue: str


class PublicationCheckResponse(BaseModel):
    """Readiness of a course; ``errors`` is empty when ``valid`` is true."""
    course_id: int
    valid: bool
    errors: List[ValidationIssueRead] = []


class PublishResponse(BaseModel):
    success: bool
    message: str


class LessonCheckResponse(BaseModel):
    topic_id: int
    valid: bool
    errors: List[ValidationIssueRead] = []
