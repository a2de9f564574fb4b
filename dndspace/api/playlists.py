"""
플레이리스트 API 라우터
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from dndspace.core.database import get_db
from dndspace.core.exceptions import NotFoundError
from dndspace.core.security import get_current_active_user
from dndspace.models.user import User
from dndspace.schemas.common import MessageResponse
from dndspace.schemas.playlist import (
    PlaylistUpsert,
    PlaylistResponse,
    SongCreate,
    SongUpdate,
    SongReorderRequest,
)
from dndspace.services import playlist_service
from dndspace.services.authorization import ensure_owner, ensure_acting_character

router = APIRouter()


async def _owned_playlist(db: AsyncSession, user: User, playlist_id: uuid.UUID):
    playlist = await playlist_service.get_playlist_or_404(db, playlist_id)
    await ensure_owner(db, user, playlist)
    return playlist


@router.get("/character/{character_id}", response_model=PlaylistResponse)
async def get_character_playlist(character_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """캐릭터 플레이리스트 조회"""
    playlist = await playlist_service.get_character_playlist(db, character_id)
    if playlist is None:
        raise NotFoundError("플레이리스트를 찾을 수 없습니다.")
    return playlist


@router.post("/", response_model=PlaylistResponse)
async def upsert_playlist(
    playlist_data: PlaylistUpsert,
    response: Response,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """플레이리스트 생성(201) 또는 수정(200)"""
    character = await ensure_acting_character(db, current_user, playlist_data.character_id)
    playlist, created = await playlist_service.upsert_playlist(db, character, playlist_data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return playlist


@router.delete("/{playlist_id}", response_model=MessageResponse)
async def delete_playlist(
    playlist_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await _owned_playlist(db, current_user, playlist_id)
    await playlist_service.delete_playlist(db, playlist)
    return {"message": "플레이리스트가 삭제되었습니다."}


@router.post("/{playlist_id}/songs", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
async def add_song(
    playlist_id: uuid.UUID,
    song_data: SongCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """곡 추가 (링크는 임베드 URL로 변환)"""
    playlist = await _owned_playlist(db, current_user, playlist_id)
    return await playlist_service.add_song(db, playlist, song_data)


@router.put("/{playlist_id}/reorder", response_model=PlaylistResponse)
async def reorder_songs(
    playlist_id: uuid.UUID,
    reorder_data: SongReorderRequest,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await _owned_playlist(db, current_user, playlist_id)
    return await playlist_service.reorder_songs(db, playlist, reorder_data.song_ids)


@router.put("/{playlist_id}/songs/{song_id}", response_model=PlaylistResponse)
async def update_song(
    playlist_id: uuid.UUID,
    song_id: uuid.UUID,
    song_data: SongUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await _owned_playlist(db, current_user, playlist_id)
    return await playlist_service.update_song(db, playlist, song_id, song_data)


@router.delete("/{playlist_id}/songs/{song_id}", response_model=PlaylistResponse)
async def remove_song(
    playlist_id: uuid.UUID,
    song_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await _owned_playlist(db, current_user, playlist_id)
    return await playlist_service.remove_song(db, playlist, song_id)
