"""
담벼락 댓글 관련 Pydantic 스키마
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from datetime import datetime
import uuid

from dndspace.schemas.common import sanitize_text, CharacterSummary


COMMENT_MAX_LENGTH = 1000


def sanitize_comment(value: Optional[str]) -> str:
    """댓글 본문 정리. 빈 문자열은 허용 (사진만 있는 댓글)"""
    return sanitize_text(value, COMMENT_MAX_LENGTH) or ""


class CommentUpdate(BaseModel):
    """댓글 수정 스키마"""
    content: str = Field(..., min_length=1, max_length=COMMENT_MAX_LENGTH)

    @field_validator('content', mode='before')
    @classmethod
    def sanitize_content(cls, v):
        text = sanitize_comment(v)
        if not text:
            raise ValueError('댓글 내용을 입력해주세요.')
        return text


class WallCommentResponse(BaseModel):
    """담벼락 댓글 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    character_id: uuid.UUID
    author_id: uuid.UUID
    author: Optional[CharacterSummary] = None
    content: str = ""
    photo_url: Optional[str] = None
    parent_comment_id: Optional[uuid.UUID] = None
    is_edited: bool = False
    created_at: datetime
    updated_at: datetime


class WallThreadResponse(WallCommentResponse):
    """최상위 댓글 + 답글 목록"""
    replies: List[WallCommentResponse] = Field(default_factory=list)
