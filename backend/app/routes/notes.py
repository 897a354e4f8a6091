"""
Notes API — Notes Route Handlers
==================================

What:  CRUD and tag search endpoints for the note resource.
Why:   The HTTP entry point for every note operation.
How:   Parses the JSON body into a schema, delegates to NoteService, returns JSON.
Who:   Called by API clients (web frontend, scripts).

Route Inventory:
    GET    /api/notes              list all notes (newest update first)
    GET    /api/notes/tags/{tag}   notes carrying a tag
    GET    /api/notes/{note_id}    single note
    POST   /api/notes              create (201)
    PUT    /api/notes/{note_id}    partial update
    DELETE /api/notes/{note_id}    delete, returns prior state

Routes are thin: errors are raised by the service and rendered by the global
exception handlers registered in main.py.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from app.schemas.note import (
    DeleteResponse,
    ErrorResponse,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
)
from app.services.note_service import NoteService, get_note_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api", tags=["Notes"])

SERVER_ERROR = {"description": "Server error", "model": ErrorResponse}
NOT_FOUND = {"description": "Note not found", "model": ErrorResponse}


@router.get(
    "/notes",
    response_model=List[NoteResponse],
    responses={500: SERVER_ERROR},
    summary="List all notes",
    description="Returns every note, sorted by last update time (newest first).",
)
async def list_notes(
    service: NoteService = Depends(get_note_service),
) -> List[NoteResponse]:
    return await service.list_notes()


@router.get(
    "/notes/tags/{tag:path}",
    response_model=List[NoteResponse],
    responses={500: SERVER_ERROR},
    summary="Search notes by tag",
    description=(
        "Returns notes whose tag list contains the given tag exactly "
        "(case-sensitive), newest update first. An empty list means no match. "
        "Tags containing `/` are sent percent-encoded (`a%2Fb`)."
    ),
)
async def search_by_tag(
    tag: str,
    service: NoteService = Depends(get_note_service),
) -> List[NoteResponse]:
    return await service.search_by_tag(tag)


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={404: NOT_FOUND, 500: SERVER_ERROR},
    summary="Get a note by ID",
    description="Returns a single note. Unknown and malformed IDs both yield 404.",
)
async def get_note(
    note_id: str,
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    return await service.get_note(note_id)


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteResponse,
    responses={
        201: {"description": "Note created", "model": NoteResponse},
        400: {"description": "Title and content are required", "model": ErrorResponse},
        500: SERVER_ERROR,
    },
    summary="Create a note",
    description="Creates a note. `title` and `content` are required; `tags` defaults to [].",
)
async def create_note(
    # No body at all reads as an empty note, so the required-fields rule answers
    payload: NoteCreate = NoteCreate(),
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    return await service.create_note(payload)


@router.put(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={
        400: {"description": "Empty title or content", "model": ErrorResponse},
        404: NOT_FOUND,
        500: SERVER_ERROR,
    },
    summary="Update a note",
    description=(
        "Replaces only the fields present in the body and refreshes `updatedAt`. "
        "`title` and `content`, when supplied, must be non-empty."
    ),
)
async def update_note(
    note_id: str,
    payload: NoteUpdate,
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    return await service.update_note(note_id, payload)


@router.delete(
    "/notes/{note_id}",
    response_model=DeleteResponse,
    responses={404: NOT_FOUND, 500: SERVER_ERROR},
    summary="Delete a note",
    description="Permanently removes a note and returns its last state.",
)
async def delete_note(
    note_id: str,
    service: NoteService = Depends(get_note_service),
) -> DeleteResponse:
    return await service.delete_note(note_id)
