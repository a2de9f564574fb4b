"""
사진 API 라우터 (업로드, 태그, 좋아요, 댓글)
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import json
import uuid

from dndspace.core.config import settings
from dndspace.core.database import get_db
from dndspace.core.exceptions import ValidationError
from dndspace.core.rate_limit import enforce_upload_rate_limit
from dndspace.core.security import get_current_active_user
from dndspace.models.user import User
from dndspace.schemas.common import CharacterSummary, MessageResponse, sanitize_text
from dndspace.schemas.photo import (
    PhotoResponse,
    PhotoUploadResponse,
    PhotoUpdate,
    CaptionUpdate,
    CaptionResponse,
    PhotoReorderRequest,
    LikeToggleRequest,
    LikeToggleResponse,
    PhotoLikesResponse,
    TaggedCharactersResponse,
    PhotoCommentCreate,
    PhotoCommentResponse,
)
from dndspace.services import album_service, photo_service
from dndspace.services.authorization import (
    ensure_owner,
    ensure_acting_character,
    ensure_can_delete_photo_comment,
)
from dndspace.services.media_service import read_image_upload
from dndspace.services.storage import Storage, get_storage

router = APIRouter()


def _parse_json_list(raw: Optional[str], field: str) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError(f"{field} 는 JSON 배열이어야 합니다.", errors=[{"field": field, "message": "JSON 형식 오류"}])
    if not isinstance(value, list):
        raise ValidationError(f"{field} 는 JSON 배열이어야 합니다.", errors=[{"field": field, "message": "배열이 아닙니다."}])
    return value


def _parse_captions(raw: Optional[str]) -> List[str]:
    try:
        return [sanitize_text(c, 500) or "" for c in _parse_json_list(raw, "captions")]
    except ValueError as e:
        raise ValidationError(str(e), errors=[{"field": "captions", "message": str(e)}])


def _parse_tagged(raw: Optional[str]) -> List[List[uuid.UUID]]:
    try:
        return [[uuid.UUID(str(cid)) for cid in (ids or [])] for ids in _parse_json_list(raw, "tagged_characters")]
    except (ValueError, TypeError):
        raise ValidationError(
            "tagged_characters 는 캐릭터 ID 배열의 배열이어야 합니다.",
            errors=[{"field": "tagged_characters", "message": "잘못된 캐릭터 ID"}],
        )


@router.post("/upload", response_model=PhotoUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_photos(
    album_id: uuid.UUID = Form(...),
    photos: List[UploadFile] = File(...),
    captions: Optional[str] = Form(None),
    tagged_characters: Optional[str] = Form(None),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    """앨범에 사진 업로드 (최대 20장)"""
    album = await album_service.get_album_or_404(db, album_id)
    await ensure_owner(db, current_user, album)

    if not photos:
        raise ValidationError("업로드할 사진이 없습니다.")
    if len(photos) > settings.MAX_PHOTOS_PER_UPLOAD:
        raise ValidationError(f"한 번에 최대 {settings.MAX_PHOTOS_PER_UPLOAD}장까지 업로드할 수 있습니다.")

    caption_list = _parse_captions(captions)
    tagged_list = _parse_tagged(tagged_characters)

    await enforce_upload_rate_limit(current_user.id)
    images = [await read_image_upload(p, settings.MAX_PHOTO_BYTES) for p in photos]

    created = await photo_service.upload_photos(db, storage, album, images, caption_list, tagged_list)
    return {
        "message": f"{len(created)}장의 사진이 업로드되었습니다.",
        "photos": [PhotoResponse.model_validate(p) for p in created],
    }


@router.put("/reorder", response_model=MessageResponse)
async def reorder_photos(
    reorder_data: PhotoReorderRequest,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """앨범 내 사진 순서 변경"""
    album = await album_service.get_album_or_404(db, reorder_data.album_id)
    await ensure_owner(db, current_user, album)
    await photo_service.reorder_photos(db, album, reorder_data.photo_ids)
    return {"message": "사진 순서가 변경되었습니다."}


@router.put("/{photo_id}", response_model=PhotoResponse)
async def update_photo(
    photo_id: uuid.UUID,
    photo_data: PhotoUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """캡션/태그 수정"""
    photo = await photo_service.get_photo_or_404(db, photo_id)
    await ensure_owner(db, current_user, photo)
    return await photo_service.update_photo(db, photo, photo_data)


@router.put("/{photo_id}/caption", response_model=CaptionResponse)
async def update_caption(
    photo_id: uuid.UUID,
    caption_data: CaptionUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    photo = await photo_service.get_photo_or_404(db, photo_id)
    await ensure_owner(db, current_user, photo)
    caption = await photo_service.update_caption(db, photo, caption_data.caption)
    return {"message": "캡션이 수정되었습니다.", "caption": caption}


@router.delete("/{photo_id}/tags/{character_id}", response_model=TaggedCharactersResponse)
async def remove_tag(
    photo_id: uuid.UUID,
    character_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """사진에서 캐릭터 태그 제거"""
    photo = await photo_service.get_photo_or_404(db, photo_id)
    await ensure_owner(db, current_user, photo)
    remaining = await photo_service.remove_tag(db, photo, character_id)
    return {
        "message": "태그가 제거되었습니다.",
        "tagged_characters": [CharacterSummary.model_validate(c) for c in remaining],
    }


@router.delete("/{photo_id}", response_model=MessageResponse)
async def delete_photo(
    photo_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    """사진 삭제"""
    photo = await photo_service.get_photo_or_404(db, photo_id)
    await ensure_owner(db, current_user, photo, action="삭제")
    await photo_service.delete_photo(db, storage, photo)
    return {"message": "사진이 삭제되었습니다."}


@router.post("/{photo_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    photo_id: uuid.UUID,
    like_data: LikeToggleRequest,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """좋아요 토글 (내 캐릭터로)"""
    photo = await photo_service.get_photo_or_404(db, photo_id)
    await ensure_acting_character(db, current_user, like_data.character_id)
    liked, like_count = await photo_service.toggle_like(db, photo, like_data.character_id)
    return {
        "message": "좋아요를 눌렀습니다." if liked else "좋아요를 취소했습니다.",
        "liked": liked,
        "like_count": like_count,
    }


@router.get("/{photo_id}/likes", response_model=PhotoLikesResponse)
async def get_likes(photo_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """좋아요 누른 캐릭터 목록"""
    photo = await photo_service.get_photo_or_404(db, photo_id)
    likers = await photo_service.get_photo_likes(db, photo)
    return {
        "likes": [CharacterSummary.model_validate(c) for c in likers],
        "like_count": photo.like_count,
    }


@router.get("/{photo_id}/comments", response_model=List[PhotoCommentResponse])
async def get_photo_comments(photo_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    photo = await photo_service.get_photo_or_404(db, photo_id)
    return await photo_service.get_photo_comments(db, photo)


@router.post("/{photo_id}/comments", response_model=PhotoCommentResponse, status_code=status.HTTP_201_CREATED)
async def add_photo_comment(
    photo_id: uuid.UUID,
    comment_data: PhotoCommentCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """사진 댓글 작성 (내 캐릭터로)"""
    photo = await photo_service.get_photo_or_404(db, photo_id)
    await ensure_acting_character(db, current_user, comment_data.character_id)
    return await photo_service.add_photo_comment(db, photo, comment_data.character_id, comment_data.content)


@router.delete("/{photo_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_photo_comment(
    photo_id: uuid.UUID,
    comment_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """사진 댓글 삭제 (작성자 또는 사진 주인)"""
    photo = await photo_service.get_photo_or_404(db, photo_id)
    comment = await photo_service.get_photo_comment_or_404(db, photo, comment_id)
    await ensure_can_delete_photo_comment(db, current_user, photo, comment)
    await photo_service.delete_photo_comment(db, comment)
    return {"message": "댓글이 삭제되었습니다."}
