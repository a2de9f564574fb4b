"""
플레이리스트 서비스 (캐릭터당 1개)
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload
from typing import Optional, Sequence, Tuple
import logging
import uuid

from dndspace.core.exceptions import NotFoundError
from dndspace.models.character import Character
from dndspace.models.playlist import Playlist, Song
from dndspace.schemas.playlist import PlaylistUpsert, SongCreate, SongUpdate
from dndspace.services.embed_utils import normalize_embed_url

logger = logging.getLogger(__name__)


async def _load(db: AsyncSession, *criteria) -> Optional[Playlist]:
    result = await db.execute(
        select(Playlist)
        .options(selectinload(Playlist.songs))
        .where(*criteria)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_playlist(db: AsyncSession, playlist_id: uuid.UUID) -> Optional[Playlist]:
    return await _load(db, Playlist.id == playlist_id)


async def get_playlist_or_404(db: AsyncSession, playlist_id: uuid.UUID) -> Playlist:
    playlist = await get_playlist(db, playlist_id)
    if playlist is None:
        raise NotFoundError("플레이리스트를 찾을 수 없습니다.")
    return playlist


async def get_character_playlist(db: AsyncSession, character_id: uuid.UUID) -> Optional[Playlist]:
    return await _load(db, Playlist.character_id == character_id)


async def upsert_playlist(db: AsyncSession, character: Character, data: PlaylistUpsert) -> Tuple[Playlist, bool]:
    """캐릭터 플레이리스트 생성 또는 수정. (플레이리스트, 새로 만들었는지) 반환"""
    playlist = await get_character_playlist(db, character.id)
    created = playlist is None
    if created:
        playlist = Playlist(character_id=character.id, title=f"{character.name}'s Playlist")
        db.add(playlist)

    if data.title:
        playlist.title = data.title
    if data.description is not None:
        playlist.description = data.description
    if data.auto_play is not None:
        playlist.auto_play = data.auto_play
    if data.is_public is not None:
        playlist.is_public = data.is_public

    await db.commit()
    return await get_playlist(db, playlist.id), created


async def delete_playlist(db: AsyncSession, playlist: Playlist) -> None:
    await db.execute(delete(Song).where(Song.playlist_id == playlist.id))
    await db.execute(delete(Playlist).where(Playlist.id == playlist.id))
    await db.commit()


def find_song(playlist: Playlist, song_id: uuid.UUID) -> Song:
    for song in playlist.songs:
        if song.id == song_id:
            return song
    raise NotFoundError("곡을 찾을 수 없습니다.")


async def add_song(db: AsyncSession, playlist: Playlist, song_data: SongCreate) -> Playlist:
    """곡 추가. 링크는 임베드 URL로 변환해서 저장한다."""
    embed_url = normalize_embed_url(song_data.platform, song_data.url)
    next_order = max((s.order for s in playlist.songs), default=-1) + 1
    playlist.songs.append(
        Song(
            platform=song_data.platform,
            embed_url=embed_url,
            title=song_data.title,
            artist=song_data.artist,
            order=next_order,
        )
    )
    await db.commit()
    return await get_playlist(db, playlist.id)


async def update_song(db: AsyncSession, playlist: Playlist, song_id: uuid.UUID, song_data: SongUpdate) -> Playlist:
    song = find_song(playlist, song_id)
    data = song_data.model_dump(exclude_unset=True)
    if data.get("title"):
        song.title = data["title"]
    if "artist" in data:
        song.artist = data["artist"]
    await db.commit()
    return await get_playlist(db, playlist.id)


async def remove_song(db: AsyncSession, playlist: Playlist, song_id: uuid.UUID) -> Playlist:
    song = find_song(playlist, song_id)
    playlist.songs.remove(song)
    await db.commit()
    return await get_playlist(db, playlist.id)


async def reorder_songs(db: AsyncSession, playlist: Playlist, song_ids: Sequence[uuid.UUID]) -> Playlist:
    """song_ids 의 위치를 순서값으로 기록. 목록에 없는 곡은 뒤로 보낸다."""
    by_id = {s.id: s for s in playlist.songs}
    position = 0
    for song_id in song_ids:
        song = by_id.pop(song_id, None)
        if song is not None:
            song.order = position
            position += 1
    for song in sorted(by_id.values(), key=lambda s: s.order):
        song.order = position
        position += 1
    await db.commit()
    return await get_playlist(db, playlist.id)
