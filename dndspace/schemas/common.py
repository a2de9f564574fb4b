"""
공용 스키마 헬퍼
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional
import uuid
import re


def sanitize_text(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """HTML 태그 제거 + 공백 정리. 길이 초과 시 ValueError."""
    if value is None:
        return None
    text = re.sub(r'<[^>]*>', '', str(value)).strip()
    if max_length is not None and len(text) > max_length:
        raise ValueError(f'최대 {max_length}자까지 입력할 수 있습니다.')
    return text


class CharacterSummary(BaseModel):
    """다른 리소스에 포함되는 캐릭터 요약 (작성자, 태그, 탑 프렌즈)"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    profile_image_url: Optional[str] = None
    slug: str


class MessageResponse(BaseModel):
    message: str
