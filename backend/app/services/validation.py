"""
Notes API — Input Validation
==============================

What:  Pure checks applied to note payloads before anything is persisted.
Why:   Keeps the required-field rules independent of the document store so
       they can be tested without a database and never depend on the
       store's own schema features.
Who:   Called by NoteService before every insert and update.

Rules:
    Create: title and content present and non-empty; tags default to [].
    Update: only supplied fields are returned; a supplied title or content
            must be non-empty; a supplied null tags list means [].
"""

from typing import Any, Dict

from app.exceptions import ValidationError
from app.schemas.note import NoteCreate, NoteUpdate

REQUIRED_FIELDS_MESSAGE = "Title and content are required"


def validate_new_note(payload: NoteCreate) -> Dict[str, Any]:
    """
    Validate a create payload and return the fields to insert.

    Raises:
        ValidationError: title or content absent or empty (→ 400)
    """
    if not payload.title or not payload.content:
        missing = "title" if not payload.title else "content"
        raise ValidationError(message=REQUIRED_FIELDS_MESSAGE, field=missing)

    return {
        "title": payload.title,
        "content": payload.content,
        "tags": list(payload.tags or []),
    }


def validate_note_changes(payload: NoteUpdate) -> Dict[str, Any]:
    """
    Validate an update payload and return only the supplied fields.

    Fields omitted from the request body are left out of the result, so the
    stored values survive a partial update.

    Raises:
        ValidationError: a supplied title or content is null or empty (→ 400)
    """
    supplied = payload.model_dump(exclude_unset=True)
    changes: Dict[str, Any] = {}

    for field in ("title", "content"):
        if field in supplied:
            if not supplied[field]:
                raise ValidationError(
                    message=f"{field.capitalize()} cannot be empty",
                    field=field,
                )
            changes[field] = supplied[field]

    if "tags" in supplied:
        changes["tags"] = list(supplied["tags"] or [])

    return changes
