"""
DnD Space - 캠페인 캐릭터 소셜 네트워크 FastAPI 메인 애플리케이션
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging
import os

from dndspace import __version__
from dndspace.core.config import settings
from dndspace.core.database import engine, Base, check_db_connection, check_redis_connection
from dndspace.core.exceptions import AppError
from dndspace.core.paths import get_upload_dir

# API 라우터 임포트
from dndspace.api.auth import router as auth_router
from dndspace.api.characters import router as characters_router
from dndspace.api.comments import router as comments_router
from dndspace.api.albums import router as albums_router
from dndspace.api.photos import router as photos_router
from dndspace.api.playlists import router as playlists_router

# 로깅 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 시작/종료 시 실행되는 이벤트"""
    logger.info("DnD Space API 시작")

    # 데이터베이스 테이블 생성 (개발용)
    if settings.ENVIRONMENT == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("데이터베이스 테이블 생성 완료")

    yield

    await engine.dispose()
    logger.info("DnD Space API 종료")


# FastAPI 앱 생성
app = FastAPI(
    title="DnD Space API",
    description="캠페인 캐릭터 프로필, 담벼락, 앨범, 플레이리스트",
    version=__version__,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan
)

# 로컬 스토리지일 때만 업로드 파일을 직접 서빙
if (settings.STORAGE_BACKEND or "local").lower() == "local":
    UPLOAD_DIR = get_upload_dir()
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    app.mount("/static", StaticFiles(directory=UPLOAD_DIR), name="static")

# CORS: 개발 환경에선 프론트 도메인을 명시적으로 허용, 그 외 환경에서도 로컬 호스트는 정규식으로 허용
ALLOWED_ORIGINS = settings.FRONTEND_ORIGINS if settings.ENVIRONMENT == "development" else []
ALLOWED_ORIGIN_REGEX = None if settings.ENVIRONMENT == "development" else r"https?://(localhost|127\.0\.0\.1)(:\d+)?"
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_origin_regex=ALLOWED_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.ENVIRONMENT == "production":
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.dndspace.app"]
    )


# 예외 핸들러
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 실패: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "요청을 처리할 수 없습니다."
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message, "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # ("body", "stats", "strength") -> "stats.strength"
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "입력값이 올바르지 않습니다.", "detail": "입력값이 올바르지 않습니다.", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} 처리 중 예기치 못한 오류: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "서버 내부 오류가 발생했습니다."},
    )


# 라우터 등록
app.include_router(auth_router, prefix="/auth", tags=["인증"])
app.include_router(characters_router, prefix="/characters", tags=["캐릭터"])
app.include_router(comments_router, prefix="/comments", tags=["담벼락 댓글"])
app.include_router(albums_router, prefix="/albums", tags=["앨범"])
app.include_router(photos_router, prefix="/photos", tags=["사진"])
app.include_router(playlists_router, prefix="/playlists", tags=["플레이리스트"])


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "message": "DnD Space API",
        "version": __version__,
        "docs": "/docs",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """헬스 체크 엔드포인트"""
    database_ok = await check_db_connection()
    redis_ok = await check_redis_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "environment": settings.ENVIRONMENT,
        "database": "connected" if database_ok else "unavailable",
        "redis": "connected" if redis_ok else "unavailable",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "dndspace.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
