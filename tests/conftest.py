"""
Shared fixtures and configuration.

Settings, the database engine and the upload directory are resolved when
``photoshelf`` is first imported, so the environment below must be in
place before any test module imports the application.
"""

import io
import os
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Dict, Generator

import pytest
from PIL import ExifTags, Image

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="photoshelf-tests-"))

os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from photoshelf.main import app  # noqa: E402


# =============================================================================
# PYTEST HOOKS
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """Mark API tests as integration tests, everything else as unit tests."""
    for item in items:
        if "test_api" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def client() -> Generator[TestClient, None, None]:
    """
    Application client for the whole session.

    Entering the context runs the lifespan (tables, upload directory).
    Tests isolate themselves by registering their own user.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_credentials() -> Dict[str, str]:
    """Fresh, unregistered credentials."""
    suffix = uuid.uuid4().hex[:10]
    return {
        "username": f"user_{suffix}",
        "email": f"user_{suffix}@example.com",
        "password": "secret123",
    }


@pytest.fixture
def auth_headers(client, user_credentials) -> Dict[str, str]:
    """Register a new user and return its bearer header."""
    response = client.post("/api/auth/register", json=user_credentials)
    assert response.status_code == 201, response.text
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# IMAGE FIXTURES
# =============================================================================

def _encode_image(size=(64, 48), color=(200, 50, 10), fmt="PNG", exif=None) -> bytes:
    image = Image.new("RGB", size, color=color)
    buffer = io.BytesIO()
    save_kwargs = {"exif": exif} if exif is not None else {}
    image.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    """Factory: ``make_image(size=(w, h), color=(r, g, b), fmt="PNG", exif=None)``."""
    return _encode_image


@pytest.fixture
def png_bytes() -> bytes:
    """64x48 solid PNG."""
    return _encode_image()


@pytest.fixture
def camera_exif() -> Image.Exif:
    """EXIF block as a camera with GPS would write it."""
    exif = Image.Exif()
    exif[ExifTags.Base.Make] = "TestCamera"
    exif[ExifTags.Base.Model] = "TestModel"
    exif[ExifTags.Base.Orientation] = 1
    exif[ExifTags.IFD.Exif] = {
        ExifTags.Base.DateTimeOriginal: "2024:01:15 14:30:00",
    }
    exif[ExifTags.IFD.GPSInfo] = {
        ExifTags.GPS.GPSLatitudeRef: "N",
        ExifTags.GPS.GPSLatitude: (40.0, 26.0, 46.0),
        ExifTags.GPS.GPSLongitudeRef: "W",
        ExifTags.GPS.GPSLongitude: (79.0, 58.0, 56.0),
    }
    return exif


@pytest.fixture
def jpeg_with_exif(camera_exif) -> bytes:
    """640x480 JPEG carrying ``camera_exif``."""
    return _encode_image(size=(640, 480), fmt="JPEG", exif=camera_exif)
