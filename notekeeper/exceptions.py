"""
NoteKeeper Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the note workflows.
How:   Each exception carries a user-safe message and an optional context
       dict. Global handlers registered in main.py turn them into structured
       JSON error responses with the matching HTTP status code.
Who:   Raised by the controller, platform clients and object store.

Exception Hierarchy:
    NoteKeeperError (base)
    ├── ValidationError            → 400 Bad Request
    ├── AuthenticationError        → 401 Unauthorized
    ├── NotFoundError              → 404 Not Found
    ├── RemoteApiError             → 502 Bad Gateway
    ├── ObjectStoreError           → 502 Bad Gateway
    │   └── AttachmentNotFoundError → 404 Not Found
    └── DatabaseError              → 500 Internal Server Error

None of these are retried. A failed remote call surfaces to the client and
the user re-issues the action.
"""

from typing import Any, Dict, Optional


class NoteKeeperError(Exception):
    """
    Base exception for all NoteKeeper application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only partially returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteKeeperError):
    """
    Raised when client input fails validation.

    When:    Blank note name, unsupported attachment type, file too large.
    HTTP:    400 Bad Request
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


class AuthenticationError(NoteKeeperError):
    """Missing, unknown or revoked bearer token (HTTP 401)."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NoteKeeperError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RemoteApiError(NoteKeeperError):
    """
    Raised when the notes platform rejects or fails a request.

    What:    HTTP error, transport error, or GraphQL `errors` payload.
    HTTP:    502 Bad Gateway — the upstream platform failed, not this service.

    Attributes:
        operation: Platform operation that failed (listNotes, createNote, ...)
    """

    def __init__(
        self,
        message: str = "The notes platform could not complete the request",
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation


class ObjectStoreError(NoteKeeperError):
    """
    Raised when an object store operation (put, resolve, delete) fails.

    HTTP:    502 Bad Gateway
    """

    def __init__(
        self,
        message: str = "Attachment storage operation failed",
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if key is not None:
            ctx["key"] = key
        super().__init__(message=message, context=ctx)
        self.key = key


class AttachmentNotFoundError(ObjectStoreError):
    """No blob is stored under the requested key (HTTP 404)."""

    def __init__(self, key: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"No attachment is stored under key '{key}'",
            key=key,
            context=context,
        )


class DatabaseError(NoteKeeperError):
    """
    Raised when the self-hosted platform's database fails unexpectedly.

    The client always receives a generic message; the SQL error is logged
    server-side only.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
