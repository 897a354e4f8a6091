"""
Notes API — Document Store Gateway
====================================

What:  The persistence gateway: a narrow interface over the `notes` collection
       plus its MongoDB implementation and the FastAPI dependency exposing it.
Why:   Centralizes all driver and connection logic in one place. Services see
       plain dicts and string ids, never driver objects.
How:   `MongoNoteGateway` wraps a single `pymongo.AsyncMongoClient` created at
       process start. Every driver failure is translated into DatabaseError.
Who:   Built by the application factory; handed to NoteService per request.
When:  Client created once at startup; used by every request; closed on shutdown.

Architecture Decision:
    We use PyMongo's native asyncio client because:
    1. Non-blocking I/O — a slow query doesn't block other requests
    2. Natural fit with FastAPI's async request handling
    3. Connection pooling and server monitoring are handled by the driver

Connection Strategy:
    serverSelectionTimeoutMS: fixed at client creation (default 5s). Any
        operation that cannot find a reachable server fails after this delay.
    tz_aware=True: BSON dates come back as UTC-aware datetimes, matching what
        the service writes.
    The driver reconnects on its own; there is no custom reconnect logic.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from bson import ObjectId
from fastapi import Request
from pymongo import AsyncMongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from app.config import Settings
from app.exceptions import DatabaseError

logger = logging.getLogger(__name__)

# Fields copied from a stored document into the API representation
NOTE_FIELDS = ("title", "content", "tags", "createdAt", "updatedAt")


class NoteGateway(ABC):
    """
    Abstract interface for note persistence.

    Contract:
        - Ids are strings at this boundary
        - Returned notes are dicts with keys: id, title, content, tags,
          createdAt, updatedAt
        - Lookups by an unknown or malformed id return None (never raise)
        - Store failures raise DatabaseError

    Implementations:
        - MongoNoteGateway: MongoDB via PyMongo's async client
        - InMemoryNoteGateway (tests/conftest.py): dict-backed fake for tests
    """

    @abstractmethod
    async def find_all(self) -> List[Dict[str, Any]]:
        """All notes, most recently updated first."""
        ...

    @abstractmethod
    async def find_by_tag(self, tag: str) -> List[Dict[str, Any]]:
        """Notes whose tags contain `tag` exactly, most recently updated first."""
        ...

    @abstractmethod
    async def find_by_id(self, note_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def insert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a new note and return it with its store-assigned id."""
        ...

    @abstractmethod
    async def update_by_id(
        self, note_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Apply `changes` and return the note as it is after the update."""
        ...

    @abstractmethod
    async def delete_by_id(self, note_id: str) -> Optional[Dict[str, Any]]:
        """Remove the note and return its state prior to deletion."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """
        Check whether the store is reachable.

        Who:     Startup sequence and the health check endpoint.
        Returns: True if reachable, False otherwise. Never raises.
        """
        ...

    async def close(self) -> None:
        """Release connections. No-op by default."""
        return None


def _to_object_id(note_id: str) -> Optional[ObjectId]:
    """Parse a hex id; malformed ids map to None so they read as not-found."""
    if not ObjectId.is_valid(note_id):
        return None
    return ObjectId(note_id)


def _to_note(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert a stored document into the API-facing dict."""
    if document is None:
        return None
    note = {"id": str(document["_id"])}
    for field in NOTE_FIELDS:
        note[field] = document.get(field)
    if note["tags"] is None:
        note["tags"] = []
    return note


@contextmanager
def _store_operation(operation: str, **context: Any) -> Iterator[None]:
    """
    Translate driver failures raised inside the block into DatabaseError.

    The driver's message is preserved as the error description so the
    client sees what went wrong (e.g. server selection timeout).
    """
    try:
        yield
    except PyMongoError as e:
        logger.error("Document store error during %s: %s", operation, e)
        raise DatabaseError(
            description=str(e),
            context={"operation": operation, "error_type": type(e).__name__, **context},
        ) from e


class MongoNoteGateway(NoteGateway):
    """
    MongoDB-backed note persistence.

    Query Patterns:
        - List:    find({}).sort(updatedAt, -1)
        - By tag:  find({tags: tag}).sort(updatedAt, -1)  (array element match)
        - By id:   find_one({_id: ObjectId})
        - Update:  find_one_and_update(..., $set, return AFTER)
        - Delete:  find_one_and_delete(...)
    """

    def __init__(
        self,
        client: AsyncMongoClient,
        database: str = "notes-app",
        collection: str = "notes",
    ):
        self.client = client
        # The URI's own database wins; `database` is the fallback
        self.db = client.get_default_database(default=database)
        self.collection = self.db[collection]

    async def find_all(self) -> List[Dict[str, Any]]:
        with _store_operation("find_all"):
            cursor = self.collection.find({}).sort("updatedAt", -1)
            documents = await cursor.to_list(None)
        return [_to_note(doc) for doc in documents]

    async def find_by_tag(self, tag: str) -> List[Dict[str, Any]]:
        with _store_operation("find_by_tag", tag=tag):
            cursor = self.collection.find({"tags": tag}).sort("updatedAt", -1)
            documents = await cursor.to_list(None)
        return [_to_note(doc) for doc in documents]

    async def find_by_id(self, note_id: str) -> Optional[Dict[str, Any]]:
        oid = _to_object_id(note_id)
        if oid is None:
            return None
        with _store_operation("find_by_id", note_id=note_id):
            document = await self.collection.find_one({"_id": oid})
        return _to_note(document)

    async def insert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        document = dict(fields)
        with _store_operation("insert"):
            result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return _to_note(document)

    async def update_by_id(
        self, note_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        oid = _to_object_id(note_id)
        if oid is None:
            return None
        with _store_operation("update_by_id", note_id=note_id):
            document = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        return _to_note(document)

    async def delete_by_id(self, note_id: str) -> Optional[Dict[str, Any]]:
        oid = _to_object_id(note_id)
        if oid is None:
            return None
        with _store_operation("delete_by_id", note_id=note_id):
            document = await self.collection.find_one_and_delete({"_id": oid})
        return _to_note(document)

    async def ping(self) -> bool:
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning("Document store unreachable: %s", e)
            return False

    async def close(self) -> None:
        await self.client.close()


# ── Factory ───────────────────────────────────────────────────────────────
def create_gateway(settings: Settings) -> MongoNoteGateway:
    """
    What:  Builds the process-wide gateway from settings.
    When:  Once, by the application factory.
    Note:  Creating the client does not connect; the first operation (or the
           startup ping) does. An unreachable server therefore never prevents
           the application from starting.
    """
    client = AsyncMongoClient(
        settings.mongodb_uri,
        serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        tz_aware=True,
        connect=False,
    )
    return MongoNoteGateway(
        client,
        database=settings.mongodb_database,
        collection=settings.mongodb_collection,
    )


# ── Gateway Dependency ────────────────────────────────────────────────────
def get_gateway(request: Request) -> NoteGateway:
    """
    FastAPI dependency returning the gateway attached to the running app.

    Why app.state (not a module global): the gateway is handed to the app at
    construction, so tests can build an app around an in-memory fake.
    """
    return request.app.state.gateway
