import os
import random
import tempfile
import uuid
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so the environment goes first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="photospot-uploads-")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from api.dependencies import get_rng
from db.database import Base, get_async_session
from db.models import Photo, PhotoTag, Tag, User
from services.auth_service import create_access_token


@pytest_asyncio.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_rng] = lambda: random.Random(1234)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    async def _make(role: str = "enthusiast", **fields) -> User:
        fields.setdefault("display_name", f"{role.title()} {uuid.uuid4().hex[:6]}")
        user = User(role=role, **fields)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_photo(db_session):
    counter = {"n": 0}

    async def _make(
        owner: User,
        status: str = "approved",
        lat: float = 40.7128,
        lon: float = -74.0060,
        public_lat: float = None,
        public_lon: float = None,
        tags=(),
        **fields,
    ) -> Photo:
        # Strictly increasing timestamps so "newest first" is deterministic
        counter["n"] += 1
        fields.setdefault(
            "created_at",
            datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=counter["n"]),
        )
        fields.setdefault("title", f"Photo {counter['n']}")
        fields.setdefault("category", "landscape")
        fields.setdefault("file_url", f"/files/photos/{uuid.uuid4().hex}.jpg")

        tag_rows = []
        for name in tags:
            result = await db_session.execute(select(Tag).where(Tag.name == name))
            tag = result.scalar_one_or_none()
            if tag is None:
                tag = Tag(name=name)
                db_session.add(tag)
            tag_rows.append(PhotoTag(tag=tag))

        blurred = public_lat is not None or public_lon is not None
        photo = Photo(
            user_id=owner.id,
            status=status,
            exact_latitude=lat,
            exact_longitude=lon,
            public_latitude=public_lat if public_lat is not None else lat,
            public_longitude=public_lon if public_lon is not None else lon,
            blur_location=blurred,
            blur_radius=200 if blurred else None,
            photo_tags=tag_rows,
            **fields,
        )
        db_session.add(photo)
        await db_session.commit()
        await db_session.refresh(photo)
        return photo

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers
