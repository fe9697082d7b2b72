import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import httpx
import pytest
import pyvips
from jose import jwt
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.pool import StaticPool

from buildings_api.infra.asset_store import AssetStore
from buildings_api.infra.r2_storage import get_asset_store
from buildings_api.lib.config import settings
from buildings_api.lib.database import Base, get_db
from buildings_api.lib.errors import UploadChannelError
from buildings_api.main import app

TEST_EMAIL = "editor@example.com"


def make_token(sub="editor-1", expires_in=timedelta(minutes=15), secret=None, **claims):
    """Sign an access token the way the identity service does."""
    payload = {
        "sub": sub,
        "email": TEST_EMAIL,
        "role": "editor",
        "type": "access",
        "exp": datetime.now(timezone.utc) + expires_in,
        **claims,
    }
    return jwt.encode(payload, secret or settings.secret_key, algorithm=settings.jwt_algorithm)


def make_image(fmt=".png", width=8, height=6):
    return pyvips.Image.black(width, height, bands=3).write_to_buffer(fmt)


class FakeAssetStore(AssetStore):
    """In-memory asset store; every upload gets a distinct URL."""

    def __init__(self):
        self.uploads: List[dict] = []
        self.error: Optional[str] = None
        self.failure: Optional[Exception] = None

    async def upload(
        self,
        content,
        folder,
        public_id,
        *,
        resource_type="raw",
        format=None,
        overwrite=True,
        content_type=None,
    ):
        if self.failure is not None:
            raise self.failure
        if self.error is not None:
            raise UploadChannelError(self.error)
        self.uploads.append({
            "content": content,
            "folder": folder,
            "public_id": public_id,
            "resource_type": resource_type,
            "format": format,
            "overwrite": overwrite,
            "content_type": content_type,
        })
        return f"https://assets.example.com/{folder}/{public_id}?v={len(self.uploads)}"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def asset_store():
    return FakeAssetStore()


@pytest.fixture
async def client(session_factory, asset_store):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_asset_store] = lambda: asset_store

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}
