"""
Catalog Backend: Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── image_dir: Temporary image directory, already created
    ├── test_settings: Settings pointing at a per-test SQLite file and image_dir
    ├── database: Database handle with all tables created
    ├── app: Application built from test_settings, tables created
    ├── test_client: HTTPX AsyncClient bound to `app`
    └── small_picture / wide_picture / png_picture: base64 images made with Pillow

The ASGI transport does not run the lifespan, so fixtures create the tables
and the image directory themselves.
"""

import base64
import os
import tempfile
from io import BytesIO
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from PIL import Image


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings BEFORE any catalog import builds the default app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
# Never created: tests build their own app on a per-test image_dir
os.environ["IMAGE_DIRECTORY"] = os.path.join(tempfile.gettempdir(), "catalog_test_images")
os.environ["LOG_LEVEL"] = "WARNING"

from catalog.config import Settings  # noqa: E402
from catalog.database import Database  # noqa: E402


def encode_image(size, mode: str = "RGB", fmt: str = "JPEG", color=(200, 80, 40)) -> str:
    """Render a solid image with Pillow and return it base64-encoded."""
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_category(mock_db_session):
            mock_db_session.get.return_value = None
            with pytest.raises(NotFoundError):
                await service.find_by_id(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def image_dir(tmp_path):
    directory = tmp_path / "images"
    directory.mkdir()
    return directory


@pytest.fixture
def test_settings(tmp_path, image_dir):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
        image_directory=str(image_dir),
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings) -> AsyncGenerator[Database, None]:
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def app(test_settings):
    from catalog.main import create_app

    application = create_app(test_settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed straight into the test app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def small_picture() -> str:
    """64x48 JPEG, already inside the resize box."""
    return encode_image((64, 48))


@pytest.fixture
def wide_picture() -> str:
    """4000x1000 JPEG; fits the 3200x3200 box as 3200x800."""
    return encode_image((4000, 1000))


@pytest.fixture
def png_picture() -> str:
    """Semi-transparent RGBA PNG; JPEG output needs an RGB conversion."""
    return encode_image((120, 90), mode="RGBA", fmt="PNG", color=(10, 20, 30, 128))


@pytest_asyncio.fixture
async def lenient_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Like test_client, but unhandled errors come back as the 500 response."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
