"""Shared fixtures: fresh stores, a temporary uploads dir and an API client."""

import asyncio
import os
import tempfile

# Keep the module-level app in fileshare.main away from the package dir.
os.environ.setdefault("FILESHARE_UPLOADS_DIR", tempfile.mkdtemp(prefix="fileshare-uploads-"))
os.environ.setdefault("FILESHARE_STORAGE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from fileshare.config import Settings
from fileshare.main import create_app
from fileshare.schemas import FileCreate
from fileshare.storage import MemStorage, SqliteStorage


def run(coro):
    return asyncio.run(coro)


def make_draft(share_id: str, **overrides) -> FileCreate:
    fields = {
        "filename": f"{share_id}.png",
        "original_name": "photo.png",
        "mime_type": "image/png",
        "size": 2048,
        "share_id": share_id,
    }
    fields.update(overrides)
    return FileCreate(**fields)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each store contract test runs against both backends."""
    if request.param == "memory":
        return MemStorage()
    return SqliteStorage(tmp_path / "files.db")


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        uploads_dir=tmp_path / "uploads",
        storage_backend="memory",
        db_path=tmp_path / "fileshare.db",
        max_upload_mb=1,
        log_level="WARNING",
        log_file="",
    )


@pytest.fixture()
def client(settings):
    app = create_app(settings, storage=MemStorage())
    with TestClient(app) as test_client:
        yield test_client
