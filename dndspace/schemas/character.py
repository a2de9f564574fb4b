"""
캐릭터 관련 Pydantic 스키마
"""

from pydantic import BaseModel, Field, ConfigDict, AliasChoices, field_validator
from typing import Optional, List, Literal
from datetime import datetime
import uuid

from dndspace.schemas.common import sanitize_text, CharacterSummary


Alignment = Literal[
    "Lawful Good", "Neutral Good", "Chaotic Good",
    "Lawful Neutral", "True Neutral", "Chaotic Neutral",
    "Lawful Evil", "Neutral Evil", "Chaotic Evil",
]


class AbilityScores(BaseModel):
    """6대 능력치 (각 1~30)"""
    strength: int = Field(..., ge=1, le=30)
    dexterity: int = Field(..., ge=1, le=30)
    constitution: int = Field(..., ge=1, le=30)
    intelligence: int = Field(..., ge=1, le=30)
    wisdom: int = Field(..., ge=1, le=30)
    charisma: int = Field(..., ge=1, le=30)


_TEXT_LIMITS = {
    'name': 100,
    'race': 100,
    'character_class': 100,
    'background': 2000,
    'bio': 2000,
}


class CharacterCreate(BaseModel):
    """캐릭터 생성 스키마"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    race: str = Field(..., min_length=1, max_length=100)
    character_class: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("character_class", "class"),
    )
    level: int = Field(1, ge=1, le=20)
    stats: AbilityScores
    background: str = Field("", max_length=2000)
    alignment: Alignment = "True Neutral"
    bio: str = Field("", max_length=2000)

    @field_validator('name', 'race', 'character_class', 'background', 'bio', mode='before')
    @classmethod
    def sanitize_fields(cls, v, info):
        return sanitize_text(v, _TEXT_LIMITS.get(info.field_name))


class CharacterUpdate(BaseModel):
    """캐릭터 수정 스키마 - 전달된 필드만 반영"""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    race: Optional[str] = Field(None, min_length=1, max_length=100)
    character_class: Optional[str] = Field(
        None,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("character_class", "class"),
    )
    level: Optional[int] = Field(None, ge=1, le=20)
    stats: Optional[AbilityScores] = None
    background: Optional[str] = Field(None, max_length=2000)
    alignment: Optional[Alignment] = None
    bio: Optional[str] = Field(None, max_length=2000)
    top_friend_ids: Optional[List[uuid.UUID]] = None

    @field_validator('name', 'race', 'character_class', 'background', 'bio', mode='before')
    @classmethod
    def sanitize_fields(cls, v, info):
        return sanitize_text(v, _TEXT_LIMITS.get(info.field_name))

    @field_validator('top_friend_ids')
    @classmethod
    def dedupe_friends(cls, v):
        if v is None:
            return v
        seen = set()
        ordered = []
        for friend_id in v:
            if friend_id not in seen:
                seen.add(friend_id)
                ordered.append(friend_id)
        return ordered


class CharacterResponse(BaseModel):
    """캐릭터 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    race: str
    character_class: str
    level: int
    stats: AbilityScores
    background: Optional[str] = ""
    alignment: str
    bio: Optional[str] = ""
    profile_image_url: Optional[str] = None
    banner_image_url: Optional[str] = None
    top_friend_ids: List[uuid.UUID] = Field(default_factory=list)
    profile_views: int = 0
    slug: str
    created_at: datetime
    updated_at: datetime

    @field_validator('top_friend_ids', mode='before')
    @classmethod
    def none_to_list(cls, v):
        return v or []


class CharacterListResponse(CharacterResponse):
    """캐릭터 목록 응답 (소유자 이름 포함)"""
    owner_username: Optional[str] = None


class CharacterDetailResponse(CharacterResponse):
    """캐릭터 상세 응답 (탑 프렌즈 펼침)"""
    owner_username: Optional[str] = None
    top_friends: List[CharacterSummary] = Field(default_factory=list)


class CharacterImageResponse(BaseModel):
    message: str
    image_type: Literal["profile", "banner"]
    image_url: str


class ProfileViewResponse(BaseModel):
    views: int
