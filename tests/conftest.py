import os
import tempfile

# 앱 임포트 전에 테스트 환경 고정
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIRECTORY"] = tempfile.mkdtemp(prefix="dndspace-test-")

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from dndspace.core.database import Base, get_db
from dndspace.core.security import create_access_token
from dndspace.main import app
from dndspace.models import User
from dndspace.services.storage import Storage, StoredMedia, get_storage


class MemoryStorage(Storage):
    """외부 스토리지 대역. 저장/삭제 기록을 남기고 실패를 흉내낼 수 있다."""

    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.saves = 0
        self.fail_on_save = None
        self.fail_delete = False

    def save_bytes(self, data, *, content_type=None, key_hint=None, folder="uploads"):
        self.saves += 1
        if self.fail_on_save is not None and self.saves >= self.fail_on_save:
            raise RuntimeError("storage unavailable")
        key = f"{folder}/{self.saves}-{key_hint or 'upload'}"
        self.objects[key] = data
        return StoredMedia(url=f"https://media.test/{key}", key=key)

    def delete(self, key):
        if self.fail_delete:
            raise RuntimeError("storage unavailable")
        self.objects.pop(key, None)
        self.deleted.append(key)


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
async def client(session_factory, storage):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """계정 생성 + Authorization 헤더 (bcrypt 해싱은 건너뛴다)"""

    async def _make(username="player"):
        async with session_factory() as session:
            user = User(email=f"{username}@example.com", username=username, hashed_password="unused")
            session.add(user)
            await session.commit()
        token = create_access_token({"sub": str(user.id)})
        return user, {"Authorization": f"Bearer {token}"}

    return _make
