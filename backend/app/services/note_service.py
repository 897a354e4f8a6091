"""
Notes API — Note Service (Business Logic)
===========================================

What:  The note resource handler: list, get, create, update, delete and
       search-by-tag over the persistence gateway.
Why:   Encapsulates all business logic in one place, independent of HTTP concerns.
How:   Validates input (services/validation.py), calls the gateway, converts
       gateway dicts into response models.
Who:   Called by route handlers through the get_note_service dependency.
When:  Once per request; holds no state between requests.

Design Decision:
    NoteService receives its gateway at construction instead of importing a
    module-level connection. This enables:
    1. Easy testing: inject an in-memory gateway
    2. No ambient global state: the app owns the single gateway instance

Error Handling Strategy:
    - Missing documents (gateway returns None) → NotFoundError
    - Invalid payloads → ValidationError (raised before any write)
    - Store failures → DatabaseError raised by the gateway, propagated as-is
"""

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import Depends

from app.database import NoteGateway, get_gateway
from app.exceptions import NotFoundError
from app.schemas.note import DeleteResponse, NoteCreate, NoteResponse, NoteUpdate
from app.services.validation import validate_new_note, validate_note_changes

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """
    Current UTC time truncated to milliseconds.

    Why truncate: BSON dates have millisecond resolution. Truncating before
    the write means the value returned on create equals the stored value.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - list_notes(): every note, newest update first
        - get_note(): single note with not-found handling
        - create_note(): validate, stamp timestamps, insert
        - update_note(): validate partial changes, refresh updatedAt
        - delete_note(): remove and return prior state
        - search_by_tag(): exact, case-sensitive tag match
    """

    def __init__(self, gateway: NoteGateway):
        self.gateway = gateway

    async def list_notes(self) -> List[NoteResponse]:
        """
        Return all notes ordered by updatedAt descending.

        Raises:
            DatabaseError: store unavailable (→ 500)
        """
        notes = await self.gateway.find_all()
        return [NoteResponse.model_validate(note) for note in notes]

    async def get_note(self, note_id: str) -> NoteResponse:
        """
        Retrieve a single note by id.

        Malformed ids are not a separate error class: the gateway reports
        them as missing and they surface as 404 like any unknown id.

        Raises:
            NotFoundError: no note has that id (→ 404)
            DatabaseError: store unavailable (→ 500)
        """
        note = await self.gateway.find_by_id(note_id)
        if note is None:
            raise NotFoundError(resource="Note", resource_id=note_id)
        return NoteResponse.model_validate(note)

    async def create_note(self, payload: NoteCreate) -> NoteResponse:
        """
        Create a note.

        Workflow:
            1. Validate required fields (nothing is written on failure)
            2. Stamp createdAt and updatedAt with the same instant
            3. Insert; the store assigns the id

        Raises:
            ValidationError: title or content missing/empty (→ 400)
            DatabaseError: insert failed (→ 500)
        """
        fields = validate_new_note(payload)
        now = utc_now()
        fields["createdAt"] = now
        fields["updatedAt"] = now

        note = await self.gateway.insert(fields)
        logger.info("Note created: %s", note["id"])
        return NoteResponse.model_validate(note)

    async def update_note(self, note_id: str, payload: NoteUpdate) -> NoteResponse:
        """
        Apply a partial update.

        Only fields present in the request body are replaced. updatedAt is
        always refreshed, even for an empty body. Concurrent updates to the
        same note are last-write-wins.

        Raises:
            ValidationError: supplied title/content empty (→ 400)
            NotFoundError: no note has that id (→ 404)
            DatabaseError: update failed (→ 500)
        """
        changes = validate_note_changes(payload)
        changes["updatedAt"] = utc_now()

        note = await self.gateway.update_by_id(note_id, changes)
        if note is None:
            raise NotFoundError(resource="Note", resource_id=note_id)

        logger.info("Note updated: %s (fields: %s)", note_id, ", ".join(sorted(changes)))
        return NoteResponse.model_validate(note)

    async def delete_note(self, note_id: str) -> DeleteResponse:
        """
        Permanently remove a note and return its last state.

        Raises:
            NotFoundError: no note has that id (→ 404)
            DatabaseError: delete failed (→ 500)
        """
        note = await self.gateway.delete_by_id(note_id)
        if note is None:
            raise NotFoundError(resource="Note", resource_id=note_id)

        logger.info("Note deleted: %s", note_id)
        return DeleteResponse(note=NoteResponse.model_validate(note))

    async def search_by_tag(self, tag: str) -> List[NoteResponse]:
        """
        Return notes carrying `tag`, newest update first.

        An empty result is a normal answer, not an error.
        """
        notes = await self.gateway.find_by_tag(tag)
        return [NoteResponse.model_validate(note) for note in notes]


# ── Service Dependency ────────────────────────────────────────────────────
def get_note_service(gateway: NoteGateway = Depends(get_gateway)) -> NoteService:
    """FastAPI dependency building a NoteService around the app's gateway."""
    return NoteService(gateway)
