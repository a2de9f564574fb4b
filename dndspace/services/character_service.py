"""
캐릭터 관련 서비스
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, case
from sqlalchemy.orm import joinedload
from typing import List, Optional, Sequence
import logging
import re
import secrets
import string
import uuid

from dndspace.core.exceptions import NotFoundError, ValidationError
from dndspace.models.album import Album
from dndspace.models.character import Character, ABILITY_NAMES
from dndspace.models.photo import Photo, PhotoLike, PhotoComment, photo_tags
from dndspace.models.playlist import Playlist, Song
from dndspace.schemas.character import CharacterCreate, CharacterUpdate
from dndspace.services.media_service import ImagePayload, store_image, release_media, release_many
from dndspace.services.storage import Storage

logger = logging.getLogger(__name__)

_SLUG_ALPHABET = string.ascii_lowercase + string.digits
_SLUG_ATTEMPTS = 5


def generate_slug(name: str) -> str:
    """이름의 영숫자 + 랜덤 6자리 (예: "thorin-k3x9a1")"""
    clean = re.sub(r"[^a-z0-9]", "", (name or "").lower())
    suffix = "".join(secrets.choice(_SLUG_ALPHABET) for _ in range(6))
    return f"{clean}-{suffix}" if clean else suffix


async def _unique_slug(db: AsyncSession, name: str) -> str:
    for _ in range(_SLUG_ATTEMPTS):
        slug = generate_slug(name)
        exists = await db.scalar(select(Character.id).where(Character.slug == slug))
        if exists is None:
            return slug
    raise RuntimeError("캐릭터 주소 생성에 실패했습니다.")


async def create_character(
    db: AsyncSession,
    owner_id: uuid.UUID,
    character_data: CharacterCreate
) -> Character:
    """캐릭터 생성 + 기본 앨범 생성"""
    data = character_data.model_dump(exclude={"stats"})
    character = Character(
        owner_id=owner_id,
        slug=await _unique_slug(db, character_data.name),
        top_friend_ids=[],
        **data,
        **character_data.stats.model_dump(),
    )
    db.add(character)

    # flush를 통해 ID를 먼저 할당받습니다.
    await db.flush()

    from dndspace.services.album_service import build_default_album
    db.add(build_default_album(character))

    await db.commit()
    logger.info(f"캐릭터 생성: id={character.id} slug={character.slug}")
    return await get_character_by_id(db, character.id)


async def get_character_by_id(db: AsyncSession, character_id: uuid.UUID) -> Optional[Character]:
    """ID로 캐릭터 조회"""
    result = await db.execute(
        select(Character)
        .options(joinedload(Character.owner))
        .where(Character.id == character_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_character_or_404(db: AsyncSession, character_id: uuid.UUID) -> Character:
    character = await get_character_by_id(db, character_id)
    if character is None:
        raise NotFoundError("캐릭터를 찾을 수 없습니다.")
    return character


async def get_character_by_slug(db: AsyncSession, slug: str) -> Optional[Character]:
    """프로필 주소로 캐릭터 조회"""
    result = await db.execute(
        select(Character)
        .options(joinedload(Character.owner))
        .where(Character.slug == slug)
    )
    return result.scalar_one_or_none()


async def get_characters(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[Character]:
    """전체 캐릭터 목록 (캠페인 디렉토리, 최신순)"""
    result = await db.execute(
        select(Character)
        .options(joinedload(Character.owner))
        .order_by(Character.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_characters_by_owner(db: AsyncSession, owner_id: uuid.UUID) -> List[Character]:
    """내 캐릭터 목록 (최신순)"""
    result = await db.execute(
        select(Character)
        .options(joinedload(Character.owner))
        .where(Character.owner_id == owner_id)
        .order_by(Character.created_at.desc())
    )
    return list(result.scalars().all())


async def get_characters_by_ids(db: AsyncSession, character_ids: Sequence) -> List[Character]:
    """ID 목록 순서대로 캐릭터 조회. 없는 ID는 건너뛴다."""
    ids = [uuid.UUID(str(cid)) for cid in character_ids or []]
    if not ids:
        return []
    result = await db.execute(select(Character).where(Character.id.in_(ids)))
    by_id = {c.id: c for c in result.scalars().all()}
    return [by_id[cid] for cid in ids if cid in by_id]


async def update_character(
    db: AsyncSession,
    character: Character,
    character_data: CharacterUpdate
) -> Character:
    """캐릭터 정보 수정. 검증 실패 시 아무 것도 저장하지 않는다."""
    update_data = character_data.model_dump(exclude_unset=True)

    # null 로 지울 수 없는 필드
    for field in ("name", "race", "character_class", "level", "stats", "alignment"):
        if field in update_data and update_data[field] is None:
            raise ValidationError(f"{field} 값은 비울 수 없습니다.", errors=[{"field": field, "message": "필수 값입니다."}])

    stats = update_data.pop("stats", None)
    if stats:
        update_data.update({name: stats[name] for name in ABILITY_NAMES})

    if "top_friend_ids" in update_data:
        friend_ids = list(dict.fromkeys(update_data["top_friend_ids"] or []))
        if character.id in friend_ids:
            raise ValidationError("자기 자신을 탑 프렌즈로 추가할 수 없습니다.")
        found = await get_characters_by_ids(db, friend_ids)
        if len(found) != len(friend_ids):
            raise ValidationError("존재하지 않는 캐릭터가 탑 프렌즈에 포함되어 있습니다.")
        update_data["top_friend_ids"] = [str(fid) for fid in friend_ids]

    if update_data:
        await db.execute(
            update(Character)
            .where(Character.id == character.id)
            .values(**update_data)
        )
        await db.commit()

    return await get_character_by_id(db, character.id)


async def increment_profile_views(db: AsyncSession, character_id: uuid.UUID) -> int:
    """프로필 조회수 +1 (원자적 UPDATE)"""
    result = await db.execute(
        update(Character)
        .where(Character.id == character_id)
        .values(profile_views=Character.profile_views + 1)
    )
    if result.rowcount == 0:
        raise NotFoundError("캐릭터를 찾을 수 없습니다.")
    await db.commit()
    return await db.scalar(select(Character.profile_views).where(Character.id == character_id))


async def set_character_image(
    db: AsyncSession,
    storage: Storage,
    character: Character,
    image_type: str,
    image: ImagePayload,
) -> str:
    """프로필/배너 이미지 교체. 이전 파일은 best-effort 로 정리한다."""
    if image_type not in ("profile", "banner"):
        raise ValidationError("image_type 은 profile 또는 banner 여야 합니다.")

    stored = store_image(storage, image, folder="characters")
    url_field, key_field = f"{image_type}_image_url", f"{image_type}_image_key"
    old_key = getattr(character, key_field)

    try:
        await db.execute(
            update(Character)
            .where(Character.id == character.id)
            .values({url_field: stored.url, key_field: stored.key})
        )
        await db.commit()
    except Exception:
        await db.rollback()
        release_media(storage, stored.key)
        raise

    release_media(storage, old_key)
    return stored.url


async def delete_character(db: AsyncSession, storage: Storage, character: Character) -> None:
    """캐릭터와 모든 종속 데이터 삭제

    단계별로 커밋한다. 중간 단계가 실패하면 이미 끝난 단계는 그대로 남는다.
    """
    from dndspace.services.album_service import delete_album
    from dndspace.services.comment_service import delete_comments_for_character

    character_id = character.id

    # 1. 앨범과 사진
    albums = (await db.execute(select(Album).where(Album.character_id == character_id))).scalars().all()
    for album in albums:
        await delete_album(db, storage, album)

    # 2. 담벼락 댓글 + 이 캐릭터가 다른 곳에 남긴 댓글
    await delete_comments_for_character(db, storage, character_id)

    # 3. 다른 사진에 남긴 좋아요 / 태그 / 사진 댓글
    liked_photo_ids = (
        await db.execute(select(PhotoLike.photo_id).where(PhotoLike.character_id == character_id))
    ).scalars().all()
    if liked_photo_ids:
        await db.execute(
            update(Photo)
            .where(Photo.id.in_(liked_photo_ids))
            .values(like_count=case((Photo.like_count > 0, Photo.like_count - 1), else_=0))
        )
    await db.execute(delete(PhotoLike).where(PhotoLike.character_id == character_id))
    await db.execute(delete(photo_tags).where(photo_tags.c.character_id == character_id))
    await db.execute(delete(PhotoComment).where(PhotoComment.author_id == character_id))
    await db.commit()

    # 4. 플레이리스트
    playlist_ids = (
        await db.execute(select(Playlist.id).where(Playlist.character_id == character_id))
    ).scalars().all()
    if playlist_ids:
        await db.execute(delete(Song).where(Song.playlist_id.in_(playlist_ids)))
        await db.execute(delete(Playlist).where(Playlist.id.in_(playlist_ids)))
        await db.commit()

    # 5. 캐릭터 본체
    image_keys = [character.profile_image_key, character.banner_image_key]
    await db.execute(delete(Character).where(Character.id == character_id))
    await db.commit()
    release_many(storage, image_keys)
    logger.info(f"캐릭터 삭제 완료: id={character_id}")
