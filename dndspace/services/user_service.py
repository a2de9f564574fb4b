"""
사용자 관련 서비스
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Union
import uuid

from dndspace.models.user import User


async def get_user_by_id(db: AsyncSession, user_id: Union[str, uuid.UUID]) -> Optional[User]:
    """ID로 사용자 조회. 잘못된 ID 형식이면 ValueError"""
    if not isinstance(user_id, uuid.UUID):
        user_id = uuid.UUID(str(user_id))
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """이메일로 사용자 조회"""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    """사용자명으로 조회"""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    email: str,
    username: str,
    password_hash: str,
) -> User:
    """사용자 생성"""
    user = User(
        email=email,
        username=username,
        hashed_password=password_hash,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
