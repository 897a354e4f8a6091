"""
Notes API — Pydantic Request/Response Schemas
===============================================

What:  Pydantic models defining the API contract.
Why:   Automatic serialization and OpenAPI doc generation.
How:   FastAPI uses these models to parse request bodies, serialize responses,
       and generate the OpenAPI document served at /api-docs.
Who:   Used by route handlers and NoteService.

Design Decision:
    Request models declare title/content as optional even though create
    requires them. Required-field checks live in services/validation.py so
    a missing field yields our 400 response rather than FastAPI's 422, and
    so the rule is testable without HTTP or a store.

    Timestamps use camelCase aliases (createdAt, updatedAt) on the wire and
    snake_case attributes in Python.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What the client sends
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    What:  Body of POST /api/notes.
    Rules: title and content must be present and non-empty; tags default to [].
    """
    title: Optional[str] = Field(default=None, description="Note title (required)")
    content: Optional[str] = Field(default=None, description="Note body (required)")
    tags: Optional[List[str]] = Field(default=None, description="Free-text labels")

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Swagger note",
                "content": "Swagger is a great tool for documenting APIs",
                "tags": ["swagger", "api", "docs"],
            }
        }
    }


class NoteUpdate(BaseModel):
    """
    What:  Body of PUT /api/notes/{id}. Every field is optional.
    Rules: Only fields present in the body are changed. A present title or
           content must be non-empty.
    """
    title: Optional[str] = Field(default=None, description="New title")
    content: Optional[str] = Field(default=None, description="New body")
    tags: Optional[List[str]] = Field(default=None, description="Replacement tag list")

    model_config = {
        "json_schema_extra": {"example": {"content": "Updated body"}}
    }


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  Full representation of a stored note.
    Who:   Returned by every note endpoint (singly or in lists).
    """
    id: str = Field(description="Store-generated identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note body")
    tags: List[str] = Field(default_factory=list, description="Note tags")
    created_at: datetime = Field(alias="createdAt", description="Creation time (UTC)")
    updated_at: datetime = Field(alias="updatedAt", description="Last update time (UTC)")

    model_config = {"populate_by_name": True}


class DeleteResponse(BaseModel):
    """Confirmation returned by DELETE /api/notes/{id}, carrying the removed note."""
    message: str = Field(default="Note deleted successfully")
    note: NoteResponse = Field(description="State of the note before deletion")


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by all endpoints.

    Fields:
        message: Human-readable description
        error:   Underlying failure description (storage or body parsing
                 errors only)

    Example:
        {"message": "Server error", "error": "localhost:27017: connection refused"}
    """
    message: str = Field(description="Human-readable error description")
    error: Optional[str] = Field(default=None, description="Underlying error detail")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and store status.
    Who:   Returned by GET /health for monitoring.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Document store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
