"""
사진 관련 Pydantic 스키마
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from datetime import datetime
import uuid

from dndspace.schemas.common import sanitize_text, CharacterSummary


class PhotoResponse(BaseModel):
    """사진 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    album_id: uuid.UUID
    character_id: uuid.UUID
    image_url: str
    caption: Optional[str] = ""
    order: int
    like_count: int
    tagged_characters: List[CharacterSummary] = Field(default_factory=list)
    created_at: datetime


class PhotoUploadResponse(BaseModel):
    message: str
    photos: List[PhotoResponse]


class PhotoUpdate(BaseModel):
    """사진 수정 (캡션, 태그)"""
    caption: Optional[str] = Field(None, max_length=500)
    tagged_character_ids: Optional[List[uuid.UUID]] = None

    @field_validator('caption', mode='before')
    @classmethod
    def sanitize_caption(cls, v):
        return sanitize_text(v, 500)


class CaptionUpdate(BaseModel):
    caption: Optional[str] = Field(None, max_length=500)

    @field_validator('caption', mode='before')
    @classmethod
    def sanitize_caption(cls, v):
        return sanitize_text(v, 500)


class CaptionResponse(BaseModel):
    message: str
    caption: str


class PhotoReorderRequest(BaseModel):
    album_id: uuid.UUID
    photo_ids: List[uuid.UUID]


class LikeToggleRequest(BaseModel):
    """좋아요를 누르는 캐릭터"""
    character_id: uuid.UUID


class LikeToggleResponse(BaseModel):
    message: str
    liked: bool
    like_count: int


class PhotoLikesResponse(BaseModel):
    likes: List[CharacterSummary]
    like_count: int


class TaggedCharactersResponse(BaseModel):
    message: str
    tagged_characters: List[CharacterSummary]


class PhotoCommentCreate(BaseModel):
    character_id: uuid.UUID
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator('content', mode='before')
    @classmethod
    def sanitize_content(cls, v):
        text = sanitize_text(v, 1000)
        if not text:
            raise ValueError('댓글 내용을 입력해주세요.')
        return text


class PhotoCommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    photo_id: uuid.UUID
    author_id: uuid.UUID
    author: Optional[CharacterSummary] = None
    content: str
    created_at: datetime
