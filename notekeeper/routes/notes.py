"""
NoteKeeper Backend — Notes Route Handlers
===========================================

What:  The three note actions of the UI as HTTP endpoints.
How:   Parse and validate the request, call NoteListController, return JSON.
Who:   Called by the NoteKeeper web client.

Endpoints:
    GET    /api/notes          page load → fetch_all (or the cached list)
    POST   /api/notes          create form (multipart: name, description, image)
    DELETE /api/notes/{id}     delete button (?name= attachment key)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from pydantic import ValidationError as PydanticValidationError

from notekeeper.dependencies import get_controller, require_session
from notekeeper.exceptions import ValidationError
from notekeeper.schemas.note import (
    AttachmentUpload,
    ErrorResponse,
    NoteCreate,
    NoteListResponse,
)
from notekeeper.services.attachment_service import attachment_service
from notekeeper.services.auth_service import UserSession
from notekeeper.services.note_controller import NoteListController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])


def _list_response(controller: NoteListController) -> NoteListResponse:
    return NoteListResponse(notes=controller.notes, state=controller.state)


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        502: {"description": "Notes platform failed", "model": ErrorResponse},
    },
    summary="List saved notes",
    description=(
        "Reloads every note from the notes platform and resolves a time-bounded "
        "URL for each attachment. Pass refresh=false to return the list as last "
        "loaded without calling the platform."
    ),
)
async def list_notes(
    refresh: bool = Query(default=True, description="Reload from the platform"),
    controller: NoteListController = Depends(get_controller),
    session: UserSession = Depends(require_session),
) -> NoteListResponse:
    if refresh:
        await controller.fetch_all()
    return _list_response(controller)


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteListResponse,
    responses={
        400: {"description": "Invalid form input or attachment", "model": ErrorResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
        502: {"description": "Upload or platform call failed", "model": ErrorResponse},
    },
    summary="Create a note",
    description=(
        "Creates a note from the form fields. An attached image is uploaded under "
        "the note name before the note is stored. Returns the refreshed list."
    ),
)
async def create_note(
    name: str = Form(default=""),
    description: str = Form(default=""),
    image: Optional[UploadFile] = File(default=None),
    controller: NoteListController = Depends(get_controller),
    session: UserSession = Depends(require_session),
) -> NoteListResponse:
    try:
        note_input = NoteCreate(name=name, description=description)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else None
        raise ValidationError(
            message=f"{field or 'input'}: {first['msg']}",
            field=field,
        ) from e

    attachment = None
    if image is not None:
        try:
            content = await image.read()
        finally:
            await image.close()
        upload = AttachmentUpload(
            filename=image.filename or "",
            content=content,
            content_type=image.content_type,
        )
        if not upload.is_empty:
            attachment = attachment_service.validate(upload, content_length=image.size)

    logger.info(
        "Create request from %s: name=%r, attachment=%s",
        session.subject,
        note_input.name,
        attachment.filename if attachment else None,
    )
    await controller.create(note_input, attachment)
    return _list_response(controller)


@router.delete(
    "/notes/{note_id}",
    status_code=204,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        404: {"description": "Note not found on the platform", "model": ErrorResponse},
        502: {"description": "Attachment or platform delete failed", "model": ErrorResponse},
    },
    summary="Delete a note and its attachment",
)
async def delete_note(
    note_id: str,
    name: Optional[str] = Query(
        default=None,
        description="The note's name (its attachment key); used when the note is not in the loaded list",
    ),
    controller: NoteListController = Depends(get_controller),
    session: UserSession = Depends(require_session),
) -> Response:
    await controller.delete(note_id, name=name)
    return Response(status_code=204)
