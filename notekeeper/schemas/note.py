"""
NoteKeeper Backend — Pydantic Schemas
======================================

What:  Typed shapes for everything that crosses a boundary: platform records,
       validated create input, attachment uploads, API responses.
Who:   Used by the controller, the platform clients and the route handlers.

Shapes:
    NoteRecord        ← what the notes platform returns ({id, name, description, image})
    NoteCreate        → validated create-form input (name, description)
    AttachmentUpload  → an uploaded file (filename, bytes, content type)
    NoteView          ← NoteRecord + derived image_url / attachment_error
    NoteListResponse  ← GET /api/notes body
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Domain shapes
# ══════════════════════════════════════════════════════════════════════════


class NoteRecord(BaseModel):
    """
    A note as stored by the platform.

    `image` is the object-store key of the attachment, or None.
    """
    id: str = Field(description="Opaque identifier assigned by the platform")
    name: str = Field(description="Note title; also the attachment storage key")
    description: str = Field(description="Note body")
    image: Optional[str] = Field(default=None, description="Attachment key, null when absent")

    model_config = {"from_attributes": True}

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # Database rows carry UUID objects; GraphQL returns strings
        return str(v) if v is not None else v


class NoteView(NoteRecord):
    """
    In-memory representation of a note in the controller's list.

    `image_url` and `attachment_error` are derived during fetch_all and are
    never sent back to the platform.
    """
    image_url: Optional[str] = Field(
        default=None,
        description="Time-bounded URL of the attachment, set after resolution",
    )
    attachment_error: Optional[str] = Field(
        default=None,
        description="Why the attachment URL could not be resolved, if it failed",
    )


class NoteCreate(BaseModel):
    """
    Validated input of the create form.

    Both fields are required and must contain something other than
    whitespace. The name becomes the attachment's storage key, so it is
    bounded to what the platform can store.
    """
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=10_000)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_and_require(cls, v):
        if isinstance(v, str):
            v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class AttachmentUpload(BaseModel):
    """An uploaded file, read fully into memory (size is bounded by validation)."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_empty(self) -> bool:
        """True for a submitted-but-unused file input (no name, no bytes)."""
        return not self.filename and not self.content


# ══════════════════════════════════════════════════════════════════════════
# Response models
# ══════════════════════════════════════════════════════════════════════════


class NoteListResponse(BaseModel):
    """
    Body of GET /api/notes and POST /api/notes.

    state: not_loaded | loaded | stale (a mutation is still in flight)
    """
    notes: List[NoteView] = Field(description="Notes in platform order")
    state: str = Field(description="List state of the controller")


class ErrorResponse(BaseModel):
    """Standardized error response body for all API errors."""
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response: service status plus collaborator reachability."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    notes_backend: str = Field(description="Configured notes platform backend")
    platform: str = Field(description="Notes platform: available, unavailable")
    object_store: str = Field(description="Object store: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
