"""
소유권 기반 권한 검사

모든 변경 요청은 "리소스 → 소유 캐릭터 → 소유 계정" 으로 거슬러 올라가
현재 사용자와 비교한다. 핸들러마다 비교 로직을 반복하지 않고 이 모듈을 거친다.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from dndspace.core.exceptions import ForbiddenError, NotFoundError
from dndspace.models.album import Album
from dndspace.models.character import Character
from dndspace.models.comment import WallComment
from dndspace.models.photo import Photo, PhotoComment
from dndspace.models.playlist import Playlist
from dndspace.models.user import User


def _owning_character_id(resource) -> uuid.UUID:
    if isinstance(resource, Character):
        return resource.id
    if isinstance(resource, (Album, Photo, Playlist)):
        return resource.character_id
    if isinstance(resource, (WallComment, PhotoComment)):
        return resource.author_id
    raise TypeError(f"소유 캐릭터를 알 수 없는 리소스: {type(resource).__name__}")


async def get_owning_character(db: AsyncSession, resource) -> Character:
    """리소스를 소유한 캐릭터 조회. 체인이 끊겨 있으면 NotFoundError"""
    if isinstance(resource, Character):
        return resource
    character = await db.get(Character, _owning_character_id(resource))
    if character is None:
        raise NotFoundError("캐릭터를 찾을 수 없습니다.")
    return character


def is_owner(user: User, character: Optional[Character]) -> bool:
    return character is not None and character.owner_id == user.id


async def ensure_owner(db: AsyncSession, user: User, resource, action: str = "수정") -> Character:
    """리소스 소유자만 통과. 소유 캐릭터를 반환한다."""
    if resource is None:
        raise NotFoundError()
    character = await get_owning_character(db, resource)
    if not is_owner(user, character):
        raise ForbiddenError(f"이 리소스를 {action}할 권한이 없습니다.")
    return character


async def ensure_acting_character(db: AsyncSession, user: User, character_id: uuid.UUID) -> Character:
    """댓글 작성/좋아요 등에서 '이 캐릭터로 행동'할 수 있는지 확인"""
    character = await db.get(Character, character_id)
    if character is None:
        raise NotFoundError("캐릭터를 찾을 수 없습니다.")
    if not is_owner(user, character):
        raise ForbiddenError("이 캐릭터로 활동할 권한이 없습니다.")
    return character


async def ensure_can_delete_wall_comment(db: AsyncSession, user: User, comment: WallComment) -> None:
    """작성자 캐릭터의 소유자 또는 담벼락 주인 캐릭터의 소유자만 삭제 가능"""
    author = await db.get(Character, comment.author_id)
    wall_owner = await db.get(Character, comment.character_id)
    if not (is_owner(user, author) or is_owner(user, wall_owner)):
        raise ForbiddenError("이 댓글을 삭제할 권한이 없습니다.")


async def ensure_can_delete_photo_comment(db: AsyncSession, user: User, photo: Photo, comment: PhotoComment) -> None:
    """댓글 작성자 캐릭터의 소유자 또는 사진 주인 캐릭터의 소유자만 삭제 가능"""
    author = await db.get(Character, comment.author_id)
    photo_owner = await db.get(Character, photo.character_id)
    if not (is_owner(user, author) or is_owner(user, photo_owner)):
        raise ForbiddenError("이 댓글을 삭제할 권한이 없습니다.")
