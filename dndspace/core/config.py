"""
애플리케이션 설정
"""

from pydantic_settings import BaseSettings
from typing import Optional, List
from pathlib import Path
from dotenv import load_dotenv


"""env 로딩 우선순위
1) OS 환경변수
2) 프로젝트 루트의 .env (repo/.env)
"""

# .env 사전 로드 (OS 환경변수 우선, override=False)
_here = Path(__file__).resolve()
_repo_root_env = _here.parents[2] / ".env"  # repo/.env
if _repo_root_env.exists():
    load_dotenv(dotenv_path=str(_repo_root_env), override=False)


DEFAULT_JWT_SECRET = "your-super-secret-jwt-key-change-this-in-production"


class Settings(BaseSettings):
    """애플리케이션 설정"""
    # 환경 설정
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    DATABASE_URL: str = "sqlite+aiosqlite:///./data/dndspace.db"
    REDIS_URL: str = "redis://localhost:6379/0"

    # JWT
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # 미디어 스토리지 (local | s3)
    STORAGE_BACKEND: str = "local"
    UPLOAD_DIRECTORY: Optional[str] = None
    S3_ENDPOINT_URL: Optional[str] = None
    S3_ACCESS_KEY_ID: Optional[str] = None
    S3_SECRET_ACCESS_KEY: Optional[str] = None
    S3_BUCKET: Optional[str] = None
    S3_REGION: Optional[str] = None
    S3_PUBLIC_BASE_URL: Optional[str] = None

    # 업로드 제한
    MAX_CHARACTER_IMAGE_BYTES: int = 5 * 1024 * 1024   # 5MB
    MAX_PHOTO_BYTES: int = 10 * 1024 * 1024            # 10MB
    MAX_PHOTOS_PER_UPLOAD: int = 20

    # 레이트 리밋 (Redis)
    RATE_LIMIT_ENABLED: bool = True
    UPLOAD_RATE_LIMIT_PER_MINUTE: int = 30

    # CORS
    FRONTEND_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'ignore'

settings = Settings()


# 환경별 설정 검증
def validate_settings():
    """설정 검증"""
    if settings.ENVIRONMENT == "production":
        if settings.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
            raise ValueError("프로덕션 환경에서는 JWT_SECRET_KEY를 변경해야 합니다.")

    if settings.STORAGE_BACKEND.lower() == "s3":
        missing = [
            name for name in ("S3_ENDPOINT_URL", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY", "S3_BUCKET")
            if not getattr(settings, name)
        ]
        if missing:
            raise ValueError(f"S3 스토리지 설정이 누락되었습니다: {', '.join(missing)}")

    return True


# 설정 검증 실행
validate_settings()
