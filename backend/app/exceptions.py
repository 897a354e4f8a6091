"""
Notes API — Custom Exception Hierarchy
========================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and consistent JSON bodies.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{message, error?}` responses with the correct status code.
Who:   Raised by the gateway and services; caught by global handlers.
When:  During request processing when recoverable errors occur.

Exception Hierarchy:
    NotesAPIError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    └── DatabaseError     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class NotesAPIError(Exception):
    """
    Base exception for all Notes API application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged alongside the error)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotesAPIError):
    """
    Raised when client input fails validation.

    When:    Missing title/content on create, empty title/content on update,
             malformed JSON body.
    HTTP:    400 Bad Request

    Example response:
        {"message": "Title and content are required"}
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(NotesAPIError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown or malformed note id on get/update/delete.
    HTTP:    404 Not Found

    Why a custom exception:
        The driver returns None for missing documents (not an exception).
        We convert None → NotFoundError in the service layer to keep
        HTTP concerns out of the service logic.
    """

    def __init__(
        self,
        resource: str = "Note",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource_id = resource_id


class DatabaseError(NotesAPIError):
    """
    Raised when a document store operation fails.

    What:    A query, insert, update or delete could not be completed.
    When:    Server selection timeout, connection lost mid-operation,
             driver-level failures.
    HTTP:    500 Internal Server Error

    The driver's own description is kept in `description` and returned to
    the client as the `error` field of the response body. The request is
    never retried; the process keeps serving other requests.
    """

    def __init__(
        self,
        message: str = "Server error",
        description: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if description:
            ctx["description"] = description
        super().__init__(message=message, context=ctx)
        self.description = description
