"""Pytest configuration and fixtures."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from serenity.auth.tokens import create_access_token
from serenity.core.config import settings
from serenity.db.session import DatabaseManager, set_manager
from serenity.main import app
from serenity.schemas.generation import ReadyOutcome
from serenity.services.events import reset_change_feed
from serenity.services.library import tracks
from serenity.services.tasks.queue import drain

TEST_SECRET = "test_secret_key_for_unit_tests_only_32chars"

USER = "user-a"
OTHER_USER = "user-b"


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    monkeypatch.setattr(settings, "ACCESS_TOKEN_SECRET", TEST_SECRET)
    monkeypatch.setattr(settings, "GENERATION_BACKEND", "inline")
    monkeypatch.setattr(settings, "CHANGE_FEED", "memory")
    monkeypatch.setattr(settings, "SUNO_API_KEY", None)
    monkeypatch.setattr(settings, "DEMO_DELAY_SECONDS", 0.0)
    reset_change_feed()
    yield settings
    reset_change_feed()


@pytest_asyncio.fixture
async def db_manager(tmp_path):
    """File-backed SQLite so the API session and background jobs get separate connections."""
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'serenity-test.db'}")
    await manager.create_all()
    set_manager(manager)
    try:
        yield manager
    finally:
        await drain()
        set_manager(None)
        await manager.dispose()


@pytest_asyncio.fixture
async def db(db_manager):
    async with db_manager.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_manager):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def headers_for(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, expires_hours=1)}"}


@pytest.fixture
def auth_headers():
    return headers_for(USER)


@pytest.fixture
def other_headers():
    return headers_for(OTHER_USER)


async def make_ready_track(db, user_id=USER, title="Night Drive", genre="jazz", **outcome):
    track = await tracks.create_track(db, user_id, title, "soft rain", genre)
    await tracks.begin_generation(db, user_id, track.id)
    outcome.setdefault("audio_url", f"https://cdn.example/{title}.mp3")
    return await tracks.complete_generation(db, user_id, track.id, ReadyOutcome(**outcome))
