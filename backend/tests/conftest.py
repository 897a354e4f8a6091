"""
Notes API — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (in-memory gateway, mocked driver
       objects, API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    ├── gateway: InMemoryNoteGateway (no MongoDB needed)
    ├── note_service: NoteService around that gateway
    ├── mock_collection / mock_client: MagicMock driver objects for
    │   MongoNoteGateway unit tests
    └── test_client: HTTPX AsyncClient for endpoint tests
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any app imports
os.environ["MONGODB_URI"] = "mongodb://localhost:27017/notes-test"
os.environ["MONGODB_TIMEOUT_MS"] = "1000"
os.environ["LOG_LEVEL"] = "WARNING"

from app.database import NoteGateway  # noqa: E402
from app.exceptions import DatabaseError  # noqa: E402
from app.services.note_service import NoteService  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Gateway
# ══════════════════════════════════════════════════════════════════════════

class InMemoryNoteGateway(NoteGateway):
    """
    Dict-backed NoteGateway with the same contract as MongoNoteGateway.

    Ids are real ObjectId hex strings so malformed-id handling matches the
    MongoDB implementation. Set `unavailable = True` to make every
    operation fail the way an unreachable store does.
    """

    def __init__(self):
        self.notes: Dict[str, Dict[str, Any]] = {}
        self.unavailable = False
        self.closed = False

    def _check(self, operation: str) -> None:
        if self.unavailable:
            raise DatabaseError(
                description="localhost:27017: [Errno 111] Connection refused",
                context={"operation": operation},
            )

    @staticmethod
    def _sorted(notes: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [dict(n) for n in sorted(notes, key=lambda n: n["updatedAt"], reverse=True)]

    async def find_all(self) -> List[Dict[str, Any]]:
        self._check("find_all")
        return self._sorted(list(self.notes.values()))

    async def find_by_tag(self, tag: str) -> List[Dict[str, Any]]:
        self._check("find_by_tag")
        return self._sorted([n for n in self.notes.values() if tag in n["tags"]])

    async def find_by_id(self, note_id: str) -> Optional[Dict[str, Any]]:
        self._check("find_by_id")
        note = self.notes.get(note_id)
        return dict(note) if note else None

    async def insert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        self._check("insert")
        note = {"id": str(ObjectId()), **fields}
        note["tags"] = list(note.get("tags") or [])
        self.notes[note["id"]] = note
        return dict(note)

    async def update_by_id(
        self, note_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        self._check("update_by_id")
        note = self.notes.get(note_id)
        if note is None:
            return None
        note.update(changes)
        return dict(note)

    async def delete_by_id(self, note_id: str) -> Optional[Dict[str, Any]]:
        self._check("delete_by_id")
        return self.notes.pop(note_id, None)

    async def ping(self) -> bool:
        return not self.unavailable

    async def close(self) -> None:
        self.closed = True


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def gateway():
    """Fresh, empty in-memory gateway."""
    return InMemoryNoteGateway()


@pytest.fixture
def note_service(gateway):
    """NoteService wired to the in-memory gateway."""
    return NoteService(gateway)


@pytest.fixture
def base_time():
    """A fixed UTC instant with millisecond precision."""
    return datetime(2024, 1, 15, 12, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def seed_note(gateway, base_time):
    """
    Insert a note directly into the gateway, bypassing the service.

    Usage:
        note = await seed_note("Title", tags=["x"], minutes=5)
    `minutes` offsets both timestamps from base_time, which makes ordering
    by updatedAt deterministic.
    """
    async def _seed(title: str = "Title", content: str = "Content",
                    tags: Optional[List[str]] = None, minutes: int = 0):
        stamp = base_time + timedelta(minutes=minutes)
        return await gateway.insert({
            "title": title,
            "content": content,
            "tags": tags or [],
            "createdAt": stamp,
            "updatedAt": stamp,
        })
    return _seed


@pytest.fixture
def mock_collection():
    """
    A MagicMock standing in for a pymongo AsyncCollection.

    find() returns a cursor whose sort() returns itself and whose to_list()
    is awaitable; configure `mock_collection.cursor.to_list.return_value`.
    """
    collection = MagicMock()
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    collection.cursor = cursor
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    return collection


@pytest.fixture
def mock_client(mock_collection):
    """A MagicMock AsyncMongoClient whose default database yields mock_collection."""
    database = MagicMock()
    database.__getitem__.return_value = mock_collection
    client = MagicMock()
    client.get_default_database.return_value = database
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.close = AsyncMock()
    return client


@pytest_asyncio.fixture
async def test_client(gateway):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient talking to an app built around the in-memory gateway.
    How:     Uses ASGITransport to route requests directly to the app.
    """
    from app.main import create_app
    app = create_app(gateway=gateway)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
