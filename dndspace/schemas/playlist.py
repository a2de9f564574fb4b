"""
플레이리스트 관련 Pydantic 스키마
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Literal, Optional
from datetime import datetime
import uuid

from dndspace.schemas.common import sanitize_text


Platform = Literal["spotify", "youtube", "soundcloud", "amazon-music"]


class PlaylistUpsert(BaseModel):
    """플레이리스트 생성/수정 (캐릭터당 1개)"""
    character_id: uuid.UUID
    title: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    auto_play: Optional[bool] = None
    is_public: Optional[bool] = None

    @field_validator('title', 'description', mode='before')
    @classmethod
    def sanitize_fields(cls, v, info):
        return sanitize_text(v, {'title': 100, 'description': 500}[info.field_name])


class SongCreate(BaseModel):
    platform: Platform
    url: str = Field(..., min_length=1, max_length=500)
    title: str = Field(..., min_length=1, max_length=200)
    artist: Optional[str] = Field(None, max_length=200)

    @field_validator('title', 'artist', mode='before')
    @classmethod
    def sanitize_fields(cls, v):
        return sanitize_text(v, 200)


class SongUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    artist: Optional[str] = Field(None, max_length=200)

    @field_validator('title', 'artist', mode='before')
    @classmethod
    def sanitize_fields(cls, v):
        return sanitize_text(v, 200)


class SongReorderRequest(BaseModel):
    song_ids: List[uuid.UUID]


class SongResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    platform: str
    embed_url: str
    title: str
    artist: Optional[str] = None
    order: int


class PlaylistResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    character_id: uuid.UUID
    title: str
    description: Optional[str] = ""
    auto_play: bool
    is_public: bool
    songs: List[SongResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
