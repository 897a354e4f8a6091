"""
Notes API — MongoDB Gateway Unit Tests (Mocked)
=================================================

What:  Tests for MongoNoteGateway with mocked PyMongo driver objects.
Why:   Tests should not need a running MongoDB.
How:   The client, database and collection are MagicMocks; awaitable driver
       methods are AsyncMocks.

What we test:
    ✅ Driver calls (filters, sort, $set, return document)
    ✅ Document → API dict conversion (_id → id)
    ✅ Malformed ids never reach the driver
    ✅ Driver errors become DatabaseError with the driver's description
    ✅ ping() never raises
    ❌ Real MongoDB behaviour (use integration tests for that)
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import ServerSelectionTimeoutError

from app.config import Settings
from app.database import MongoNoteGateway, create_gateway
from app.exceptions import DatabaseError

STAMP = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_document(**overrides):
    document = {
        "_id": ObjectId(),
        "title": "A",
        "content": "B",
        "tags": ["x"],
        "createdAt": STAMP,
        "updatedAt": STAMP,
    }
    document.update(overrides)
    return document


class TestMongoNoteGatewayReads:

    def test_uses_default_database_and_collection(self, mock_client):
        MongoNoteGateway(mock_client, database="fallback-db", collection="notes")
        mock_client.get_default_database.assert_called_once_with(default="fallback-db")
        mock_client.get_default_database.return_value.__getitem__.assert_called_with("notes")

    @pytest.mark.asyncio
    async def test_find_all_sorts_by_updated_at_desc(self, mock_client, mock_collection):
        document = make_document()
        mock_collection.cursor.to_list.return_value = [document]
        gateway = MongoNoteGateway(mock_client)

        notes = await gateway.find_all()

        mock_collection.find.assert_called_once_with({})
        mock_collection.cursor.sort.assert_called_once_with("updatedAt", -1)
        assert notes == [{
            "id": str(document["_id"]),
            "title": "A",
            "content": "B",
            "tags": ["x"],
            "createdAt": STAMP,
            "updatedAt": STAMP,
        }]

    @pytest.mark.asyncio
    async def test_find_by_tag_filters_on_array(self, mock_client, mock_collection):
        gateway = MongoNoteGateway(mock_client)

        assert await gateway.find_by_tag("work") == []

        mock_collection.find.assert_called_once_with({"tags": "work"})
        mock_collection.cursor.sort.assert_called_once_with("updatedAt", -1)

    @pytest.mark.asyncio
    async def test_find_by_id(self, mock_client, mock_collection):
        document = make_document()
        mock_collection.find_one.return_value = document
        gateway = MongoNoteGateway(mock_client)

        note = await gateway.find_by_id(str(document["_id"]))

        mock_collection.find_one.assert_awaited_once_with({"_id": document["_id"]})
        assert note["id"] == str(document["_id"])

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self, mock_client, mock_collection):
        gateway = MongoNoteGateway(mock_client)
        assert await gateway.find_by_id(str(ObjectId())) is None

    @pytest.mark.asyncio
    async def test_malformed_id_skips_driver(self, mock_client, mock_collection):
        gateway = MongoNoteGateway(mock_client)

        assert await gateway.find_by_id("not-an-id") is None
        assert await gateway.update_by_id("not-an-id", {"title": "T"}) is None
        assert await gateway.delete_by_id("123") is None

        mock_collection.find_one.assert_not_awaited()
        mock_collection.find_one_and_update.assert_not_awaited()
        mock_collection.find_one_and_delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_tags_become_empty_list(self, mock_client, mock_collection):
        document = make_document()
        del document["tags"]
        mock_collection.find_one.return_value = document
        gateway = MongoNoteGateway(mock_client)

        note = await gateway.find_by_id(str(document["_id"]))
        assert note["tags"] == []


class TestMongoNoteGatewayWrites:

    @pytest.mark.asyncio
    async def test_insert_returns_generated_id(self, mock_client, mock_collection):
        oid = ObjectId()
        mock_collection.insert_one.return_value = MagicMock(inserted_id=oid)
        gateway = MongoNoteGateway(mock_client)
        fields = {"title": "A", "content": "B", "tags": [], "createdAt": STAMP, "updatedAt": STAMP}

        note = await gateway.insert(fields)

        assert note["id"] == str(oid)
        assert note["title"] == "A"
        # The caller's dict is not mutated by the driver
        assert "_id" not in fields

    @pytest.mark.asyncio
    async def test_update_uses_set_and_returns_after(self, mock_client, mock_collection):
        document = make_document(content="C")
        mock_collection.find_one_and_update.return_value = document
        gateway = MongoNoteGateway(mock_client)
        changes = {"content": "C", "updatedAt": STAMP}

        note = await gateway.update_by_id(str(document["_id"]), changes)

        mock_collection.find_one_and_update.assert_awaited_once_with(
            {"_id": document["_id"]},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        assert note["content"] == "C"

    @pytest.mark.asyncio
    async def test_delete_returns_prior_document(self, mock_client, mock_collection):
        document = make_document()
        mock_collection.find_one_and_delete.return_value = document
        gateway = MongoNoteGateway(mock_client)

        note = await gateway.delete_by_id(str(document["_id"]))

        mock_collection.find_one_and_delete.assert_awaited_once_with({"_id": document["_id"]})
        assert note["title"] == "A"


class TestMongoNoteGatewayFailures:

    @pytest.mark.asyncio
    async def test_driver_error_becomes_database_error(self, mock_client, mock_collection):
        mock_collection.cursor.to_list.side_effect = ServerSelectionTimeoutError(
            "localhost:27017: [Errno 111] Connection refused"
        )
        gateway = MongoNoteGateway(mock_client)

        with pytest.raises(DatabaseError) as exc_info:
            await gateway.find_all()

        assert "Connection refused" in exc_info.value.description
        assert exc_info.value.context["operation"] == "find_all"
        assert exc_info.value.context["error_type"] == "ServerSelectionTimeoutError"

    @pytest.mark.asyncio
    async def test_insert_error(self, mock_client, mock_collection):
        mock_collection.insert_one.side_effect = ServerSelectionTimeoutError("timed out")
        gateway = MongoNoteGateway(mock_client)

        with pytest.raises(DatabaseError):
            await gateway.insert({"title": "A", "content": "B"})

    @pytest.mark.asyncio
    async def test_ping_success(self, mock_client):
        gateway = MongoNoteGateway(mock_client)
        assert await gateway.ping() is True
        mock_client.admin.command.assert_awaited_once_with("ping")

    @pytest.mark.asyncio
    async def test_ping_failure_returns_false(self, mock_client):
        mock_client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        gateway = MongoNoteGateway(mock_client)
        assert await gateway.ping() is False

    @pytest.mark.asyncio
    async def test_close(self, mock_client):
        gateway = MongoNoteGateway(mock_client)
        await gateway.close()
        mock_client.close.assert_awaited_once()


class TestCreateGateway:

    def test_builds_without_connecting(self):
        """Creating the gateway performs no I/O, so startup never blocks on the store."""
        settings = Settings(mongodb_uri="mongodb://localhost:27017/notes-app")
        gateway = create_gateway(settings)

        assert gateway.db.name == "notes-app"
        assert gateway.collection.name == "notes"

    def test_falls_back_to_configured_database(self):
        settings = Settings(
            mongodb_uri="mongodb://localhost:27017",
            mongodb_database="fallback-db",
        )
        gateway = create_gateway(settings)

        assert gateway.db.name == "fallback-db"
