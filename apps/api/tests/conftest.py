from pathlib import Path
from typing import List, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from config import settings
from database import Base, get_db
from main import app
from models.user import User
from routers import rate_limit
from services.crypto import hash_password
from services.media import MediaAsset, MediaHost, get_media_host
from services.session_token import create_access_token


DEFAULT_PASSWORD = "s3cret-pass"


class FakeMediaHost(MediaHost):
    """Records uploads and deletions instead of talking to Cloudinary."""

    def __init__(self):
        self.uploads: List[Tuple[str, str]] = []
        self.deleted: List[Tuple[str, str]] = []

    async def upload(self, path: Path, resource_type: str = "auto") -> MediaAsset:
        assert Path(path).exists()
        index = len(self.uploads) + 1
        url = f"https://media.test/{resource_type}/asset{index}.bin"
        self.uploads.append((url, resource_type))
        return MediaAsset(
            url=url,
            public_id=f"asset{index}",
            resource_type=resource_type,
            duration=12.5 if resource_type == "video" else None,
        )

    async def delete(self, url: str, resource_type: str = "image") -> None:
        self.deleted.append((url, resource_type))


@pytest.fixture(autouse=True)
def reset_local_rate_limit_counters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = getattr(app.state, "disable_rate_limits", False)
    app.state.disable_rate_limits = True
    rate_limit._local_counters.clear()
    yield
    rate_limit._local_counters.clear()
    app.state.disable_rate_limits = previous


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "PASSWORD_HASH_ITERATIONS", 1000)
    monkeypatch.setattr(settings, "COOKIE_SECURE", False)
    monkeypatch.setattr(settings, "MAIL_HOST", "")
    monkeypatch.setattr(settings, "MEDIA_UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "ACCESS_TOKEN_SECRET", "test-access-secret-0123456789abcdef")
    monkeypatch.setattr(settings, "REFRESH_TOKEN_SECRET", "test-refresh-secret-0123456789abcdef")


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'videotube.db'}")
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield maker
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def media_host():
    return FakeMediaHost()


@pytest_asyncio.fixture
async def client(session_maker, media_host):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_host] = lambda: media_host
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_media_host, None)


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.email, user.user_name, user.full_name)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def make_user(session_maker):
    """Insert a user directly and return it with ready-made auth headers."""

    async def _make_user(user_name: str, password: str = DEFAULT_PASSWORD):
        async with session_maker() as session:
            user = User(
                user_name=user_name,
                email=f"{user_name}@example.com",
                full_name=user_name.title(),
                avatar=f"https://media.test/image/{user_name}.png",
                password=hash_password(password),
            )
            session.add(user)
            await session.commit()
        return user, auth_headers(user)

    return _make_user
