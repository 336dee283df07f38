"""Test configuration and fixtures for the Dolly Hotel API.

- Environment is set before any app module is imported
- Each test gets freshly created tables in a temporary SQLite database
- Cloudinary SDK calls are replaced by an in-memory fake
"""
import asyncio
import io
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List

import bcrypt
import pytest
from fastapi.testclient import TestClient

# Ensure app is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

ADMIN_PASSWORD = "HotelAdmin123!"

_DB_DIR = tempfile.mkdtemp(prefix="dolly-hotel-tests-")

# Set test environment BEFORE importing app modules
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "test-key"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["ADMIN_PASSWORD_HASH"] = bcrypt.hashpw(
    ADMIN_PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)
).decode("utf-8")


class FakeCloudinary:
    """Stands in for cloudinary.uploader.upload/destroy and records every call."""

    def __init__(self):
        self.uploads: List[Dict[str, Any]] = []
        self.destroys: List[Dict[str, Any]] = []
        self.upload_error: Exception = None
        self.destroy_error: Exception = None
        self.upload_result: Dict[str, Any] = None
        # public_id -> result sentinel; anything unlisted is "ok"
        self.destroy_results: Dict[str, str] = {}

    def upload(self, file, **options):
        self.uploads.append({"file": file, **options})
        if self.upload_error is not None:
            raise self.upload_error
        if self.upload_result is not None:
            return self.upload_result
        resource_type = options.get("resource_type", "image")
        public_id = f"{options.get('folder', 'test')}/asset{len(self.uploads)}"
        fmt = "mp4" if resource_type == "video" else "webp"
        return {
            "secure_url": f"https://res.cloudinary.com/test-cloud/{resource_type}/upload/v1700000000/{public_id}.{fmt}",
            "public_id": public_id,
            "resource_type": resource_type,
            "format": fmt,
            "width": 1200,
            "height": 800,
            "bytes": len(file) if isinstance(file, (bytes, bytearray)) else 0,
        }

    def destroy(self, public_id, **options):
        self.destroys.append({"public_id": public_id, **options})
        if self.destroy_error is not None:
            raise self.destroy_error
        return {"result": self.destroy_results.get(public_id, "ok")}


@pytest.fixture
def fake_cloudinary(monkeypatch) -> FakeCloudinary:
    import cloudinary.uploader

    fake = FakeCloudinary()
    monkeypatch.setattr(cloudinary.uploader, "upload", fake.upload)
    monkeypatch.setattr(cloudinary.uploader, "destroy", fake.destroy)
    return fake


@pytest.fixture
def run_async():
    """Helper to run async functions in sync context."""
    def _run(coro):
        return asyncio.run(coro)
    return _run


@pytest.fixture
def database(run_async):
    """Fresh tables for each test."""
    from app.database import create_tables, drop_tables

    run_async(drop_tables())
    run_async(create_tables())
    yield
    run_async(drop_tables())


@pytest.fixture
def seed(database, run_async):
    """Insert ORM rows and return them (ids populated).

    Usage:
        category, = seed(HotelCategory(title="Deluxe", slug="deluxe"))
    """
    from app.database import AsyncSessionLocal

    def _seed(*rows):
        async def _insert():
            async with AsyncSessionLocal() as session:
                session.add_all(rows)
                await session.commit()
            return list(rows)
        return run_async(_insert())
    return _seed


@pytest.fixture
def count_rows(database, run_async):
    from sqlalchemy import func, select
    from app.database import AsyncSessionLocal

    def _count(model) -> int:
        async def _query():
            async with AsyncSessionLocal() as session:
                result = await session.execute(select(func.count()).select_from(model))
                return result.scalar()
        return run_async(_query())
    return _count


@pytest.fixture
def client(database, fake_cloudinary) -> Generator[TestClient, None, None]:
    """Test client with fresh tables and a fake Cloudinary."""
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_password() -> str:
    return ADMIN_PASSWORD


@pytest.fixture
def admin_token() -> str:
    from app.utils.jwt_auth import create_access_token

    return create_access_token({"role": "admin", "sub": "hotel_admin"})


@pytest.fixture
def admin_client(client: TestClient, admin_token: str) -> TestClient:
    client.headers["Authorization"] = f"Bearer {admin_token}"
    return client


@pytest.fixture
def image_bytes() -> bytes:
    """A small JPEG."""
    from PIL import Image

    img = Image.new("RGB", (64, 48), color="orange")
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG")
    return buffer.getvalue()
