"""
CampusNotes Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (temp notes file, mocked blob
       storage, API client, note factory).

Fixtures (all function-scoped, created fresh for each test):
    ├── store_path: Notes file location inside pytest's tmp_path
    ├── record_store: Initialized RecordStore on store_path
    ├── mock_blob_storage: AsyncMock standing in for Cloudinary
    ├── note_service: NoteService wired to the two above
    ├── make_note: Factory for Note records
    ├── sample_file_bytes: Small fake PDF payload
    └── test_client: HTTPX AsyncClient talking to an app built on the fixtures
"""

import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock

# Override settings for testing BEFORE any campusnotes imports
# Why: Prevents tests from touching the real notes file or Cloudinary account
os.environ["NOTES_STORE_PATH"] = os.path.join(
    tempfile.mkdtemp(prefix="campusnotes_test_"), "notes-data.json"
)
os.environ["CLOUDINARY_CLOUD_NAME"] = "test-cloud"
os.environ["CLOUDINARY_API_KEY"] = "test-key-not-real"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from campusnotes.models.note import Note  # noqa: E402
from campusnotes.services.blob_storage import BlobStorage, StoredBlob  # noqa: E402
from campusnotes.services.note_service import NoteService  # noqa: E402
from campusnotes.services.record_store import RecordStore  # noqa: E402


@pytest.fixture
def store_path(tmp_path):
    """Notes file path in an isolated temporary directory."""
    return tmp_path / "notes-data.json"


@pytest_asyncio.fixture
async def record_store(store_path):
    """A RecordStore that has already created its (empty) backing file."""
    store = RecordStore(store_path)
    await store.initialize()
    return store


@pytest.fixture
def mock_blob_storage():
    """
    Blob storage double.

    upload() echoes the folder/object key back as a Cloudinary-like URL and
    storage ID; delete() succeeds.
    """
    blobs = AsyncMock(spec=BlobStorage)

    async def fake_upload(content, *, resource_kind, folder, object_key):
        storage_id = f"{folder}/{object_key}"
        return StoredBlob(
            url=f"https://res.cloudinary.com/test-cloud/{resource_kind}/upload/{storage_id}",
            storage_id=storage_id,
        )

    blobs.upload.side_effect = fake_upload
    blobs.delete.return_value = None
    return blobs


@pytest.fixture
def note_service(record_store, mock_blob_storage):
    return NoteService(
        record_store,
        mock_blob_storage,
        blob_folder="campusnotes",
        max_upload_size=1024 * 1024,
    )


@pytest.fixture
def make_note():
    """
    Factory for Note records with realistic defaults.

    Usage:
        note = make_note("1700000000000", title="A", created_at=some_datetime)
    """

    def _make(note_id="1700000000000", title="Linear Algebra Week 3", created_at=None, **overrides):
        data = {
            "id": note_id,
            "title": title,
            "subject": "Mathematics",
            "description": "Eigenvalues worksheet",
            "type": "note",
            "file_name": "week3.pdf",
            "file_url": f"https://res.cloudinary.com/test-cloud/raw/upload/campusnotes/notes/{note_id}_week3",
            "public_id": f"campusnotes/notes/{note_id}_week3",
            "file_type": "application/pdf",
            "file_size": 2048,
            "created_at": created_at or datetime.now(timezone.utc),
        }
        data.update(overrides)
        return Note(**data)

    return _make


@pytest.fixture
def sample_file_bytes():
    """A few bytes that start like a PDF. Nothing parses them."""
    return b"%PDF-1.4\n% campusnotes test fixture\n%%EOF\n"


@pytest_asyncio.fixture
async def test_client(record_store, mock_blob_storage):
    """
    HTTPX AsyncClient routed directly to a fresh app (no server needed).

    The app is built around the record_store and mock_blob_storage fixtures,
    so tests can seed or inspect both.
    """
    from campusnotes.main import create_app

    app = create_app(record_store=record_store, blob_storage=mock_blob_storage)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
