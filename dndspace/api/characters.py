"""
캐릭터 관련 API 라우터
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Literal
import uuid

from dndspace.core.config import settings
from dndspace.core.database import get_db
from dndspace.core.exceptions import NotFoundError
from dndspace.core.rate_limit import enforce_upload_rate_limit
from dndspace.core.security import get_current_active_user
from dndspace.models.character import Character
from dndspace.models.user import User
from dndspace.schemas.character import (
    CharacterCreate,
    CharacterUpdate,
    CharacterResponse,
    CharacterListResponse,
    CharacterDetailResponse,
    CharacterImageResponse,
    ProfileViewResponse,
)
from dndspace.schemas.common import CharacterSummary, MessageResponse
from dndspace.services import character_service
from dndspace.services.authorization import ensure_owner
from dndspace.services.media_service import read_image_upload
from dndspace.services.storage import Storage, get_storage

router = APIRouter()


def _with_owner(character: Character, response_model):
    data = response_model.model_validate(character).model_dump()
    data["owner_username"] = character.owner.username if character.owner else None
    return data


async def _detail(db: AsyncSession, character: Character) -> dict:
    data = _with_owner(character, CharacterDetailResponse)
    friends = await character_service.get_characters_by_ids(db, character.top_friend_ids or [])
    data["top_friends"] = [CharacterSummary.model_validate(f).model_dump() for f in friends]
    return data


@router.get("/", response_model=List[CharacterListResponse])
async def list_characters(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """캠페인 디렉토리 - 전체 캐릭터 (최신순)"""
    characters = await character_service.get_characters(db, skip=skip, limit=limit)
    return [_with_owner(c, CharacterListResponse) for c in characters]


@router.get("/my", response_model=List[CharacterListResponse])
async def list_my_characters(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """내 캐릭터 목록"""
    characters = await character_service.get_characters_by_owner(db, current_user.id)
    return [_with_owner(c, CharacterListResponse) for c in characters]


@router.get("/url/{slug}", response_model=CharacterDetailResponse)
async def get_character_by_slug(slug: str, db: AsyncSession = Depends(get_db)):
    """프로필 주소로 캐릭터 조회"""
    character = await character_service.get_character_by_slug(db, slug)
    if character is None:
        raise NotFoundError("캐릭터를 찾을 수 없습니다.")
    return await _detail(db, character)


@router.get("/{character_id}", response_model=CharacterDetailResponse)
async def get_character(character_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """캐릭터 상세 (탑 프렌즈 포함)"""
    character = await character_service.get_character_or_404(db, character_id)
    return await _detail(db, character)


@router.post("/", response_model=CharacterResponse, status_code=status.HTTP_201_CREATED)
async def create_character(
    character_data: CharacterCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """캐릭터 생성"""
    return await character_service.create_character(db, current_user.id, character_data)


@router.put("/{character_id}", response_model=CharacterResponse)
async def update_character(
    character_id: uuid.UUID,
    character_data: CharacterUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """캐릭터 정보 수정 (소유자만)"""
    character = await character_service.get_character_or_404(db, character_id)
    await ensure_owner(db, current_user, character)
    return await character_service.update_character(db, character, character_data)


@router.delete("/{character_id}", response_model=MessageResponse)
async def delete_character(
    character_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    """캐릭터 삭제 (앨범, 사진, 댓글, 플레이리스트까지 함께 삭제)"""
    character = await character_service.get_character_or_404(db, character_id)
    await ensure_owner(db, current_user, character, action="삭제")
    await character_service.delete_character(db, storage, character)
    return {"message": "캐릭터가 삭제되었습니다."}


@router.post("/{character_id}/view", response_model=ProfileViewResponse)
async def increment_view(character_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """프로필 조회수 증가"""
    views = await character_service.increment_profile_views(db, character_id)
    return {"views": views}


@router.put("/{character_id}/image", response_model=CharacterImageResponse)
async def upload_character_image(
    character_id: uuid.UUID,
    image: UploadFile = File(...),
    image_type: Literal["profile", "banner"] = Form(...),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    """프로필/배너 이미지 업로드"""
    character = await character_service.get_character_or_404(db, character_id)
    await ensure_owner(db, current_user, character)
    await enforce_upload_rate_limit(current_user.id)

    payload = await read_image_upload(image, settings.MAX_CHARACTER_IMAGE_BYTES)
    url = await character_service.set_character_image(db, storage, character, image_type, payload)
    label = "프로필" if image_type == "profile" else "배너"
    return {"message": f"{label} 이미지가 변경되었습니다.", "image_type": image_type, "image_url": url}
