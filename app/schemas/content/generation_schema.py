# Fichier: app/schemas/content/generation_schema.py
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional


class TranscriptGenerationRequest(BaseModel):
    """What the trainer UI (or the video pipeline) posts to start a run."""
    transcript: str
    topic_id: Optional[int] = None
    course_id: Optional[int] = None
    topic_name: Optional[str] = None
    language: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    trainer_id: Optional[str] = None

    @field_validator("transcript")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("transcript must not be empty")
        return value


class TranscriptInfo(BaseModel):
    text: str
    language: str
    length: int


class GenerationMetadata(BaseModel):
    lessonTopic: str
    language: str
    skillsList: List[str] = []
    concepts: List[str] = []


class AvatarVideoStatus(BaseModel):
    status: str
    reason: Optional[str] = None


class GenerationResponse(BaseModel):
    topic_id: int
    transcript: TranscriptInfo
    metadata: GenerationMetadata
    content_formats: Dict[str, Dict[str, Any]]
    continue_generation: Optional[bool] = None
    avatar_video: Optional[AvatarVideoStatus] = None


class FormatSlotContent(BaseModel):
    content_id: int
    content_data: Any
    audio_url: Optional[str] = None
    generation_method_id: Optional[str] = None


class FormatSlot(BaseModel):
    format: str
    content_type_id: int
    label: str
    status: str
    content: Optional[FormatSlotContent] = None


class TopicFormatsResponse(BaseModel):
    topic_id: int
    formats: List[FormatSlot]
