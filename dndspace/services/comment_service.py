"""
담벼락 댓글 서비스

댓글 트리는 최상위 댓글 + 답글 1단계로만 구성된다.
담벼락 조회는 쿼리 2번(최상위, 답글)으로 끝내고 트리는 메모리에서 조립한다.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, or_
from sqlalchemy.orm import selectinload
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging
import uuid

from dndspace.core.exceptions import NotFoundError, ValidationError
from dndspace.models.character import Character
from dndspace.models.comment import WallComment
from dndspace.models.user import User
from dndspace.services.authorization import ensure_acting_character
from dndspace.services.media_service import ImagePayload, store_image, release_media, release_many
from dndspace.services.storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class WallThread:
    comment: WallComment
    replies: List[WallComment] = field(default_factory=list)


def assemble_wall(top_level: Sequence[WallComment], replies: Sequence[WallComment]) -> List[WallThread]:
    """최상위 댓글(최신순)에 답글(오래된 순)을 붙인다.

    부모가 목록에 없는 답글은 버린다.
    """
    threads = [WallThread(comment=c) for c in top_level]
    by_id: Dict[uuid.UUID, WallThread] = {t.comment.id: t for t in threads}
    for reply in sorted(replies, key=lambda r: r.created_at):
        thread = by_id.get(reply.parent_comment_id)
        if thread is not None:
            thread.replies.append(reply)
    return threads


def thread_root_id(parent: WallComment) -> uuid.UUID:
    """답글의 답글은 같은 스레드의 최상위 댓글 아래로 평탄화한다."""
    return parent.parent_comment_id or parent.id


async def get_comment(db: AsyncSession, comment_id: uuid.UUID) -> Optional[WallComment]:
    result = await db.execute(
        select(WallComment)
        .options(selectinload(WallComment.author))
        .where(WallComment.id == comment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_comment_or_404(db: AsyncSession, comment_id: uuid.UUID) -> WallComment:
    comment = await get_comment(db, comment_id)
    if comment is None:
        raise NotFoundError("댓글을 찾을 수 없습니다.")
    return comment


async def get_wall(db: AsyncSession, character_id: uuid.UUID) -> List[WallThread]:
    """캐릭터 담벼락 조회"""
    if await db.get(Character, character_id) is None:
        raise NotFoundError("캐릭터를 찾을 수 없습니다.")

    top_result = await db.execute(
        select(WallComment)
        .options(selectinload(WallComment.author))
        .where(
            WallComment.character_id == character_id,
            WallComment.parent_comment_id.is_(None),
        )
        .order_by(WallComment.created_at.desc())
    )
    top_level = top_result.scalars().all()
    if not top_level:
        return []

    reply_result = await db.execute(
        select(WallComment)
        .options(selectinload(WallComment.author))
        .where(WallComment.parent_comment_id.in_([c.id for c in top_level]))
        .order_by(WallComment.created_at.asc())
    )
    return assemble_wall(top_level, reply_result.scalars().all())


async def get_replies(db: AsyncSession, comment_id: uuid.UUID) -> List[WallComment]:
    """특정 댓글의 답글 목록 (오래된 순)"""
    await get_comment_or_404(db, comment_id)
    result = await db.execute(
        select(WallComment)
        .options(selectinload(WallComment.author))
        .where(WallComment.parent_comment_id == comment_id)
        .order_by(WallComment.created_at.asc())
    )
    return list(result.scalars().all())


async def create_wall_comment(
    db: AsyncSession,
    storage: Storage,
    user: User,
    *,
    character_id: uuid.UUID,
    author_id: uuid.UUID,
    content: str = "",
    parent_comment_id: Optional[uuid.UUID] = None,
    photo: Optional[ImagePayload] = None,
) -> WallComment:
    """담벼락 댓글/답글 작성"""
    if not content and photo is None:
        raise ValidationError("댓글 내용 또는 사진이 필요합니다.")

    if await db.get(Character, character_id) is None:
        raise NotFoundError("캐릭터를 찾을 수 없습니다.")
    await ensure_acting_character(db, user, author_id)

    if parent_comment_id is not None:
        parent = await db.get(WallComment, parent_comment_id)
        if parent is None:
            raise NotFoundError("답글을 달 댓글을 찾을 수 없습니다.")
        if parent.character_id != character_id:
            raise ValidationError("다른 담벼락의 댓글에는 답글을 달 수 없습니다.")
        parent_comment_id = thread_root_id(parent)

    stored = store_image(storage, photo, folder="comments") if photo is not None else None

    comment = WallComment(
        character_id=character_id,
        author_id=author_id,
        content=content,
        parent_comment_id=parent_comment_id,
        photo_url=stored.url if stored else None,
        photo_key=stored.key if stored else None,
    )
    db.add(comment)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        if stored:
            release_media(storage, stored.key)
        raise

    return await get_comment(db, comment.id)


async def update_wall_comment(db: AsyncSession, comment: WallComment, content: str) -> WallComment:
    """댓글 본문 수정 (작성자만)"""
    comment.content = content
    comment.is_edited = True
    await db.commit()
    return await get_comment(db, comment.id)


async def delete_wall_comment(db: AsyncSession, storage: Storage, comment: WallComment) -> None:
    """댓글 삭제. 최상위 댓글이면 답글도 함께 삭제한다."""
    ids = [comment.id]
    keys = [comment.photo_key]
    if comment.parent_comment_id is None:
        replies = (
            await db.execute(select(WallComment).where(WallComment.parent_comment_id == comment.id))
        ).scalars().all()
        ids.extend(r.id for r in replies)
        keys.extend(r.photo_key for r in replies)

    # 답글 먼저 (self FK)
    await db.execute(delete(WallComment).where(WallComment.parent_comment_id == comment.id))
    await db.execute(delete(WallComment).where(WallComment.id == comment.id))
    await db.commit()
    release_many(storage, keys)
    logger.info(f"댓글 삭제: ids={ids}")


async def delete_comments_for_character(db: AsyncSession, storage: Storage, character_id: uuid.UUID) -> None:
    """캐릭터 삭제 시 담벼락 댓글과 이 캐릭터가 작성한 댓글(+그 답글) 정리"""
    result = await db.execute(
        select(WallComment).where(
            or_(WallComment.character_id == character_id, WallComment.author_id == character_id)
        )
    )
    targets = result.scalars().all()
    if not targets:
        return

    target_ids = [c.id for c in targets]
    children = (
        await db.execute(select(WallComment).where(WallComment.parent_comment_id.in_(target_ids)))
    ).scalars().all()

    keys = [c.photo_key for c in targets] + [c.photo_key for c in children]
    child_ids = [c.id for c in children if c.id not in set(target_ids)]

    if child_ids:
        await db.execute(delete(WallComment).where(WallComment.id.in_(child_ids)))
    # 답글 -> 최상위 순서로 지워야 self FK 가 깨지지 않는다
    await db.execute(
        delete(WallComment).where(
            WallComment.id.in_(target_ids),
            WallComment.parent_comment_id.is_not(None),
        )
    )
    await db.execute(delete(WallComment).where(WallComment.id.in_(target_ids)))
    await db.commit()
    release_many(storage, set(keys))
