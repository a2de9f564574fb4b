"""
사진 관련 서비스
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from typing import List, Optional, Sequence, Tuple
import logging
import uuid

from dndspace.core.exceptions import NotFoundError, ValidationError
from dndspace.models.album import Album
from dndspace.models.character import Character
from dndspace.models.photo import Photo, PhotoLike, PhotoComment, photo_tags
from dndspace.schemas.photo import PhotoUpdate
from dndspace.services.media_service import ImagePayload, store_image, release_media, release_many
from dndspace.services.storage import Storage

logger = logging.getLogger(__name__)


def _decrement(column):
    """0 아래로 내려가지 않는 -1"""
    return case((column > 0, column - 1), else_=0)


async def get_photo(db: AsyncSession, photo_id: uuid.UUID) -> Optional[Photo]:
    result = await db.execute(
        select(Photo)
        .options(selectinload(Photo.tagged_characters))
        .where(Photo.id == photo_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_photo_or_404(db: AsyncSession, photo_id: uuid.UUID) -> Photo:
    photo = await get_photo(db, photo_id)
    if photo is None:
        raise NotFoundError("사진을 찾을 수 없습니다.")
    return photo


async def get_album_photos(db: AsyncSession, album_ids: Sequence[uuid.UUID]) -> List[Photo]:
    """여러 앨범의 사진을 한 번에 조회 (순서값, 생성 시각 순)"""
    if not album_ids:
        return []
    result = await db.execute(
        select(Photo)
        .options(selectinload(Photo.tagged_characters))
        .where(Photo.album_id.in_(list(album_ids)))
        .order_by(Photo.order.asc(), Photo.created_at.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def _load_tag_targets(db: AsyncSession, character_ids: Sequence[uuid.UUID]) -> List[Character]:
    ids = list(dict.fromkeys(character_ids or []))
    if not ids:
        return []
    result = await db.execute(select(Character).where(Character.id.in_(ids)))
    found = {c.id: c for c in result.scalars().all()}
    missing = [str(cid) for cid in ids if cid not in found]
    if missing:
        raise ValidationError(
            "태그할 캐릭터를 찾을 수 없습니다.",
            errors=[{"field": "tagged_characters", "message": ", ".join(missing)}],
        )
    return [found[cid] for cid in ids]


async def upload_photos(
    db: AsyncSession,
    storage: Storage,
    album: Album,
    images: Sequence[ImagePayload],
    captions: Optional[Sequence[Optional[str]]] = None,
    tagged_ids: Optional[Sequence[Sequence[uuid.UUID]]] = None,
) -> List[Photo]:
    """앨범에 사진 여러 장 업로드

    순서값은 기존 최댓값 다음부터 이어서 부여한다.
    저장 중 하나라도 실패하면 이미 올린 파일을 정리하고 전체를 실패 처리한다.
    """
    if not images:
        raise ValidationError("업로드할 사진이 없습니다.")
    captions = list(captions or [])
    tagged_ids = list(tagged_ids or [])

    tag_targets = [await _load_tag_targets(db, ids) for ids in tagged_ids]

    stored = []
    try:
        for image in images:
            stored.append(store_image(storage, image, folder="photos"))
    except Exception:
        release_many(storage, [s.key for s in stored])
        raise

    max_order = await db.scalar(select(func.max(Photo.order)).where(Photo.album_id == album.id))
    next_order = 0 if max_order is None else max_order + 1

    photos = []
    for index, media in enumerate(stored):
        photo = Photo(
            album_id=album.id,
            character_id=album.character_id,
            image_url=media.url,
            storage_key=media.key,
            caption=(captions[index] if index < len(captions) else None) or "",
            order=next_order + index,
            like_count=0,
        )
        photo.tagged_characters = tag_targets[index] if index < len(tag_targets) else []
        db.add(photo)
        photos.append(photo)

    try:
        await db.flush()
        await db.execute(
            update(Album)
            .where(Album.id == album.id)
            .values(photo_count=Album.photo_count + len(photos))
        )
        if album.cover_photo_id is None:
            await db.execute(
                update(Album)
                .where(Album.id == album.id, Album.cover_photo_id.is_(None))
                .values(cover_photo_id=photos[0].id)
            )
        await db.commit()
    except Exception:
        await db.rollback()
        release_many(storage, [s.key for s in stored])
        raise

    logger.info(f"사진 업로드: album={album.id} count={len(photos)}")
    return await get_album_photos_by_ids(db, [p.id for p in photos])


async def get_album_photos_by_ids(db: AsyncSession, photo_ids: Sequence[uuid.UUID]) -> List[Photo]:
    result = await db.execute(
        select(Photo)
        .options(selectinload(Photo.tagged_characters))
        .where(Photo.id.in_(list(photo_ids)))
        .order_by(Photo.order.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def update_photo(db: AsyncSession, photo: Photo, photo_data: PhotoUpdate) -> Photo:
    """캡션/태그 수정. 태그 목록은 통째로 교체한다."""
    data = photo_data.model_dump(exclude_unset=True)
    if "caption" in data:
        photo.caption = data["caption"] or ""
    if data.get("tagged_character_ids") is not None:
        photo.tagged_characters = await _load_tag_targets(db, data["tagged_character_ids"])
    await db.commit()
    return await get_photo(db, photo.id)


async def update_caption(db: AsyncSession, photo: Photo, caption: Optional[str]) -> str:
    photo.caption = caption or ""
    await db.commit()
    return photo.caption


async def remove_tag(db: AsyncSession, photo: Photo, character_id: uuid.UUID) -> List[Character]:
    """태그 제거. 태그되어 있지 않은 캐릭터면 아무 일도 하지 않는다."""
    await db.execute(
        delete(photo_tags).where(
            photo_tags.c.photo_id == photo.id,
            photo_tags.c.character_id == character_id,
        )
    )
    await db.commit()
    refreshed = await get_photo(db, photo.id)
    return list(refreshed.tagged_characters)


async def purge_photos(db: AsyncSession, photo_ids: Sequence[uuid.UUID]) -> None:
    """사진 + 좋아요/태그/댓글 행 삭제 (커밋은 호출자)"""
    ids = list(photo_ids)
    if not ids:
        return
    await db.execute(delete(PhotoLike).where(PhotoLike.photo_id.in_(ids)))
    await db.execute(delete(photo_tags).where(photo_tags.c.photo_id.in_(ids)))
    await db.execute(delete(PhotoComment).where(PhotoComment.photo_id.in_(ids)))
    await db.execute(delete(Photo).where(Photo.id.in_(ids)))


async def delete_photo(db: AsyncSession, storage: Storage, photo: Photo) -> None:
    """사진 삭제. 커버였다면 남은 첫 사진(없으면 None)으로 교체한다."""
    photo_id, album_id, key = photo.id, photo.album_id, photo.storage_key

    await purge_photos(db, [photo_id])
    await db.execute(
        update(Album)
        .where(Album.id == album_id)
        .values(photo_count=_decrement(Album.photo_count))
    )

    album = await db.get(Album, album_id, populate_existing=True)
    if album is not None and album.cover_photo_id == photo_id:
        next_cover = await db.scalar(
            select(Photo.id)
            .where(Photo.album_id == album_id)
            .order_by(Photo.order.asc(), Photo.created_at.asc())
            .limit(1)
        )
        album.cover_photo_id = next_cover

    await db.commit()
    release_media(storage, key)
    logger.info(f"사진 삭제: id={photo_id}")


async def reorder_photos(db: AsyncSession, album: Album, photo_ids: Sequence[uuid.UUID]) -> None:
    """photo_ids 의 위치를 순서값으로 기록. 다른 앨범의 사진은 무시한다."""
    for index, photo_id in enumerate(photo_ids):
        await db.execute(
            update(Photo)
            .where(Photo.id == photo_id, Photo.album_id == album.id)
            .values(order=index)
        )
    await db.commit()


async def _like_count(db: AsyncSession, photo_id: uuid.UUID) -> int:
    return await db.scalar(select(Photo.like_count).where(Photo.id == photo_id)) or 0


async def add_like(db: AsyncSession, photo_id: uuid.UUID, character_id: uuid.UUID) -> int:
    """좋아요 추가 후 현재 좋아요 수 반환

    동시에 같은 좋아요가 먼저 들어간 경우 유니크 제약 위반을 삼키고 현재 상태를 돌려준다.
    """
    db.add(PhotoLike(photo_id=photo_id, character_id=character_id))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.info(f"중복 좋아요 무시: photo={photo_id} character={character_id}")
        return await _like_count(db, photo_id)

    await db.execute(
        update(Photo)
        .where(Photo.id == photo_id)
        .values(like_count=Photo.like_count + 1)
    )
    await db.commit()
    return await _like_count(db, photo_id)


async def remove_like(db: AsyncSession, photo_id: uuid.UUID, character_id: uuid.UUID) -> int:
    """좋아요 취소 후 현재 좋아요 수 반환. 실제로 지워진 행이 있을 때만 감소한다."""
    result = await db.execute(
        delete(PhotoLike).where(
            PhotoLike.photo_id == photo_id,
            PhotoLike.character_id == character_id,
        )
    )
    if result.rowcount:
        await db.execute(
            update(Photo)
            .where(Photo.id == photo_id)
            .values(like_count=_decrement(Photo.like_count))
        )
    await db.commit()
    return await _like_count(db, photo_id)


async def toggle_like(db: AsyncSession, photo: Photo, character_id: uuid.UUID) -> Tuple[bool, int]:
    """좋아요 토글. (좋아요 여부, 현재 좋아요 수) 반환"""
    photo_id = photo.id
    existing = await db.scalar(
        select(PhotoLike.id).where(
            PhotoLike.photo_id == photo_id,
            PhotoLike.character_id == character_id,
        )
    )
    if existing is not None:
        return False, await remove_like(db, photo_id, character_id)
    return True, await add_like(db, photo_id, character_id)


async def get_photo_likes(db: AsyncSession, photo: Photo) -> List[Character]:
    """좋아요를 누른 캐릭터 목록 (먼저 누른 순)"""
    result = await db.execute(
        select(Character)
        .join(PhotoLike, PhotoLike.character_id == Character.id)
        .where(PhotoLike.photo_id == photo.id)
        .order_by(PhotoLike.created_at.asc())
    )
    return list(result.scalars().all())


async def get_photo_comments(db: AsyncSession, photo: Photo) -> List[PhotoComment]:
    result = await db.execute(
        select(PhotoComment)
        .options(selectinload(PhotoComment.author))
        .where(PhotoComment.photo_id == photo.id)
        .order_by(PhotoComment.created_at.asc())
    )
    return list(result.scalars().all())


async def add_photo_comment(db: AsyncSession, photo: Photo, author_id: uuid.UUID, content: str) -> PhotoComment:
    comment = PhotoComment(photo_id=photo.id, author_id=author_id, content=content)
    db.add(comment)
    await db.commit()
    result = await db.execute(
        select(PhotoComment)
        .options(selectinload(PhotoComment.author))
        .where(PhotoComment.id == comment.id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_photo_comment_or_404(db: AsyncSession, photo: Photo, comment_id: uuid.UUID) -> PhotoComment:
    comment = await db.get(PhotoComment, comment_id)
    if comment is None or comment.photo_id != photo.id:
        raise NotFoundError("댓글을 찾을 수 없습니다.")
    return comment


async def delete_photo_comment(db: AsyncSession, comment: PhotoComment) -> None:
    await db.delete(comment)
    await db.commit()
