"""
인증 관련 API 라우터
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from dndspace.core.database import get_db
from dndspace.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    verify_token,
    get_current_active_user,
)
from dndspace.models.user import User
from dndspace.schemas.auth import Token, RefreshTokenRequest
from dndspace.schemas.user import UserCreate, UserLogin, UserResponse
from dndspace.services.user_service import (
    get_user_by_id,
    get_user_by_email,
    get_user_by_username,
    create_user,
)

router = APIRouter()


def _issue_tokens(user: User) -> Token:
    subject = {"sub": str(user.id)}
    return Token(
        access_token=create_access_token(subject),
        refresh_token=create_refresh_token(subject),
        token_type="bearer",
        user_id=str(user.id),
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """사용자 회원가입"""
    # 이메일 중복 확인
    if await get_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="이미 등록된 이메일입니다."
        )
    # 사용자명 중복 확인
    if await get_user_by_username(db, user_data.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="이미 사용 중인 사용자명입니다."
        )

    return await create_user(
        db=db,
        email=user_data.email,
        username=user_data.username,
        password_hash=get_password_hash(user_data.password),
    )


@router.post("/login", response_model=Token)
async def login(
    login_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """이메일 + 비밀번호 로그인"""
    user = await get_user_by_email(db, login_data.email)
    if not user or not verify_password(login_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="이메일 또는 비밀번호가 올바르지 않습니다.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="비활성화된 사용자입니다."
        )
    return _issue_tokens(user)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """리프레시 토큰으로 토큰 재발급"""
    payload = verify_token(refresh_data.refresh_token, "refresh")
    user = None
    if payload and payload.get("sub"):
        try:
            user = await get_user_by_id(db, payload["sub"])
        except ValueError:
            user = None
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="유효하지 않은 리프레시 토큰입니다.",
        )
    return _issue_tokens(user)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_active_user)):
    """현재 로그인한 사용자 정보"""
    return current_user
