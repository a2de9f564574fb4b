"""
앨범 API 라우터
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from dndspace.core.database import get_db
from dndspace.core.security import get_current_active_user
from dndspace.models.user import User
from dndspace.schemas.album import AlbumCreate, AlbumUpdate, AlbumResponse, AlbumWithPhotosResponse
from dndspace.schemas.common import MessageResponse
from dndspace.schemas.photo import PhotoResponse
from dndspace.services import album_service
from dndspace.services.authorization import ensure_owner, ensure_acting_character
from dndspace.services.storage import Storage, get_storage

router = APIRouter()


def _album_response(album, photos) -> AlbumWithPhotosResponse:
    response = AlbumWithPhotosResponse.model_validate(album)
    response.photos = [PhotoResponse.model_validate(p) for p in photos]
    return response


@router.get("/character/{character_id}", response_model=List[AlbumWithPhotosResponse])
async def get_character_albums(character_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """캐릭터의 앨범 목록 (사진 포함)"""
    albums = await album_service.get_character_albums(db, character_id)
    return [_album_response(album, photos) for album, photos in albums]


@router.get("/{album_id}", response_model=AlbumWithPhotosResponse)
async def get_album(album_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    album, photos = await album_service.get_album_with_photos(db, album_id)
    return _album_response(album, photos)


@router.post("/", response_model=AlbumResponse, status_code=status.HTTP_201_CREATED)
async def create_album(
    album_data: AlbumCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """앨범 생성 (캐릭터 소유자만)"""
    await ensure_acting_character(db, current_user, album_data.character_id)
    return await album_service.create_album(db, album_data)


@router.put("/{album_id}", response_model=AlbumResponse)
async def update_album(
    album_id: uuid.UUID,
    album_data: AlbumUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """앨범 정보/커버 수정"""
    album = await album_service.get_album_or_404(db, album_id)
    await ensure_owner(db, current_user, album)
    return await album_service.update_album(db, album, album_data)


@router.delete("/{album_id}", response_model=MessageResponse)
async def delete_album(
    album_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    """앨범 삭제 (사진 포함)"""
    album = await album_service.get_album_or_404(db, album_id)
    await ensure_owner(db, current_user, album, action="삭제")
    await album_service.delete_album(db, storage, album)
    return {"message": "앨범이 삭제되었습니다."}
