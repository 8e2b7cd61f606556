"""
Shared fixtures: an app per test on a throwaway SQLite file, driven
in-process through httpx.
"""

from datetime import date, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from phuongnam.core.config import EnvironmentMode, Settings
from phuongnam.database import init_db
from phuongnam.main import create_app


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        env_mode=EnvironmentMode.DEVELOPMENT,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret-for-the-api-suite-0123456789",
        gemini_api_key=None,
        groq_api_key=None,
        image_base_url="http://testserver/images",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    await init_db(app.state.engine)
    yield app
    await app.state.chat.aclose()
    await app.state.engine.dispose()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c


@pytest.fixture
async def db(app):
    async with app.state.session_maker() as session:
        yield session


@pytest.fixture
def tomorrow() -> str:
    return (date.today() + timedelta(days=1)).isoformat()


@pytest.fixture
def booking(tomorrow) -> dict:
    return {
        "ten_khach": "Nguyen Van A",
        "sdt": "0912345678",
        "email": "nguyenvana@example.com",
        "ngay": tomorrow,
        "gio": "19:00",
        "so_luong_khach": 4,
        "ghi_chu": "Window seat",
    }
