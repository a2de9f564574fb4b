"""
앨범 관련 Pydantic 스키마
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from datetime import datetime
import uuid

from dndspace.schemas.common import sanitize_text
from dndspace.schemas.photo import PhotoResponse


class AlbumCreate(BaseModel):
    """앨범 생성 스키마"""
    character_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)

    @field_validator('title', 'description', mode='before')
    @classmethod
    def sanitize_fields(cls, v, info):
        return sanitize_text(v, {'title': 100, 'description': 500}[info.field_name])


class AlbumUpdate(BaseModel):
    """앨범 수정 스키마. cover_photo_id 에 null 을 보내면 커버를 해제한다."""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    cover_photo_id: Optional[uuid.UUID] = None

    @field_validator('title', 'description', mode='before')
    @classmethod
    def sanitize_fields(cls, v, info):
        return sanitize_text(v, {'title': 100, 'description': 500}[info.field_name])


class AlbumResponse(BaseModel):
    """앨범 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    character_id: uuid.UUID
    title: str
    description: Optional[str] = ""
    cover_photo_id: Optional[uuid.UUID] = None
    photo_count: int
    created_at: datetime
    updated_at: datetime


class AlbumWithPhotosResponse(AlbumResponse):
    photos: List[PhotoResponse] = Field(default_factory=list)
