"""
앨범 관련 서비스
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from typing import Dict, List, Optional, Tuple
import logging
import uuid

from dndspace.core.exceptions import NotFoundError, ValidationError
from dndspace.models.album import Album
from dndspace.models.character import Character
from dndspace.models.photo import Photo
from dndspace.schemas.album import AlbumCreate, AlbumUpdate
from dndspace.services.media_service import release_many
from dndspace.services.photo_service import get_album_photos, purge_photos
from dndspace.services.storage import Storage

logger = logging.getLogger(__name__)


def build_default_album(character: Character) -> Album:
    """캐릭터 생성 시 함께 만드는 기본 앨범"""
    return Album(
        character_id=character.id,
        title=f"{character.name}'s Photos",
        description="",
        photo_count=0,
    )


async def get_album(db: AsyncSession, album_id: uuid.UUID) -> Optional[Album]:
    return await db.get(Album, album_id, populate_existing=True)


async def get_album_or_404(db: AsyncSession, album_id: uuid.UUID) -> Album:
    album = await get_album(db, album_id)
    if album is None:
        raise NotFoundError("앨범을 찾을 수 없습니다.")
    return album


async def get_character_albums(db: AsyncSession, character_id: uuid.UUID) -> List[Tuple[Album, List[Photo]]]:
    """캐릭터 앨범 목록 + 각 앨범 사진 (앨범은 최신순)"""
    if await db.get(Character, character_id) is None:
        raise NotFoundError("캐릭터를 찾을 수 없습니다.")

    result = await db.execute(
        select(Album)
        .where(Album.character_id == character_id)
        .order_by(Album.created_at.desc())
        .execution_options(populate_existing=True)
    )
    albums = result.scalars().all()

    photos_by_album: Dict[uuid.UUID, List[Photo]] = {a.id: [] for a in albums}
    for photo in await get_album_photos(db, list(photos_by_album)):
        photos_by_album[photo.album_id].append(photo)
    return [(album, photos_by_album[album.id]) for album in albums]


async def get_album_with_photos(db: AsyncSession, album_id: uuid.UUID) -> Tuple[Album, List[Photo]]:
    album = await get_album_or_404(db, album_id)
    return album, await get_album_photos(db, [album.id])


async def create_album(db: AsyncSession, album_data: AlbumCreate) -> Album:
    """앨범 생성 (소유권 검사는 라우터에서)"""
    album = Album(
        character_id=album_data.character_id,
        title=album_data.title,
        description=album_data.description or "",
        photo_count=0,
    )
    db.add(album)
    await db.commit()
    return album


async def update_album(db: AsyncSession, album: Album, album_data: AlbumUpdate) -> Album:
    """앨범 수정. 커버 사진은 이 앨범의 사진만 지정할 수 있다."""
    data = album_data.model_dump(exclude_unset=True)

    if "cover_photo_id" in data and data["cover_photo_id"] is not None:
        photo = await db.get(Photo, data["cover_photo_id"])
        if photo is None or photo.album_id != album.id:
            raise ValidationError(
                "커버 사진은 이 앨범의 사진이어야 합니다.",
                errors=[{"field": "cover_photo_id", "message": "앨범에 없는 사진입니다."}],
            )

    if data.get("title") is None:
        data.pop("title", None)
    if "description" in data:
        data["description"] = data["description"] or ""

    for key, value in data.items():
        setattr(album, key, value)
    await db.commit()
    return await get_album(db, album.id)


async def delete_album(db: AsyncSession, storage: Storage, album: Album) -> None:
    """앨범과 모든 사진(좋아요/태그/댓글 포함) 삭제"""
    result = await db.execute(
        select(Photo.id, Photo.storage_key).where(Photo.album_id == album.id)
    )
    rows = result.all()

    await purge_photos(db, [row.id for row in rows])
    await db.execute(delete(Album).where(Album.id == album.id))
    await db.commit()

    failed = release_many(storage, [row.storage_key for row in rows])
    logger.info(f"앨범 삭제: id={album.id} photos={len(rows)} media_failures={len(failed)}")
