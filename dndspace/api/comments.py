"""
담벼락 댓글 API 라우터
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from dndspace.core.config import settings
from dndspace.core.database import get_db
from dndspace.core.exceptions import ValidationError
from dndspace.core.rate_limit import enforce_upload_rate_limit
from dndspace.core.security import get_current_active_user
from dndspace.models.user import User
from dndspace.schemas.comment import (
    CommentUpdate,
    WallCommentResponse,
    WallThreadResponse,
    sanitize_comment,
)
from dndspace.schemas.common import MessageResponse
from dndspace.services import comment_service
from dndspace.services.authorization import ensure_owner, ensure_can_delete_wall_comment
from dndspace.services.media_service import read_image_upload
from dndspace.services.storage import Storage, get_storage

router = APIRouter()


def _thread_response(thread: comment_service.WallThread) -> WallThreadResponse:
    response = WallThreadResponse.model_validate(thread.comment)
    response.replies = [WallCommentResponse.model_validate(r) for r in thread.replies]
    return response


@router.get("/character/{character_id}", response_model=List[WallThreadResponse])
async def get_wall(character_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """캐릭터 담벼락 (최상위 댓글 최신순, 답글 오래된 순)"""
    threads = await comment_service.get_wall(db, character_id)
    return [_thread_response(t) for t in threads]


@router.get("/{comment_id}/replies", response_model=List[WallCommentResponse])
async def get_replies(comment_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """댓글의 답글 목록"""
    return await comment_service.get_replies(db, comment_id)


@router.post("/", response_model=WallCommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    character_id: uuid.UUID = Form(...),
    author_character_id: uuid.UUID = Form(...),
    content: Optional[str] = Form(None),
    parent_comment_id: Optional[uuid.UUID] = Form(None),
    photo: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    """담벼락 댓글/답글 작성 (사진 첨부 가능)"""
    try:
        text = sanitize_comment(content)
    except ValueError as e:
        raise ValidationError(str(e), errors=[{"field": "content", "message": str(e)}])

    image = None
    if photo is not None and photo.filename:
        await enforce_upload_rate_limit(current_user.id)
        image = await read_image_upload(photo, settings.MAX_PHOTO_BYTES)

    return await comment_service.create_wall_comment(
        db,
        storage,
        current_user,
        character_id=character_id,
        author_id=author_character_id,
        content=text,
        parent_comment_id=parent_comment_id,
        photo=image,
    )


@router.put("/{comment_id}", response_model=WallCommentResponse)
async def update_comment(
    comment_id: uuid.UUID,
    comment_data: CommentUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """댓글 수정 (작성자만)"""
    comment = await comment_service.get_comment_or_404(db, comment_id)
    await ensure_owner(db, current_user, comment)
    return await comment_service.update_wall_comment(db, comment, comment_data.content)


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    """댓글 삭제 (작성자 또는 담벼락 주인)"""
    comment = await comment_service.get_comment_or_404(db, comment_id)
    await ensure_can_delete_wall_comment(db, current_user, comment)
    await comment_service.delete_wall_comment(db, storage, comment)
    return {"message": "댓글이 삭제되었습니다."}
