"""
NoteKeeper Backend — Note List Controller
===========================================

What:  Owns the in-memory list of notes and the three workflows that change it:
       fetch_all (refresh), create, and delete.
How:   Composes an injected NotesApi (records) and ObjectStore (attachments).
Who:   One instance per application, stored on app.state; called by the
       notes routes.

Workflows:
    fetch_all:  listNotes ──▶ resolve_url(key) × N (concurrent) ──▶ replace list
    create:     [put(name, bytes)] ──▶ createNote ──▶ fetch_all
    delete:     drop from list ──▶ [delete(key)] ──▶ deleteNote   (404 → stays removed)
                          ▲                              │
                          └──── re-insert on failure ◀───┘

List state:
    not_loaded ──fetch_all──▶ loaded ◀──▶ stale (create/delete in flight)

Concurrency:
    Everything runs on one event loop. Attachment resolutions inside fetch_all
    are gathered concurrently; each one succeeds or fails on its own. Requests
    are not serialized against each other: a fetch_all that completes while a
    delete is in flight replaces the list wholesale (last write wins).
"""

import asyncio
import logging
from typing import List, Optional

from notekeeper.exceptions import NotFoundError
from notekeeper.schemas.note import (
    AttachmentUpload,
    NoteCreate,
    NoteRecord,
    NoteView,
)
from notekeeper.services.notes_api import CreateNoteInput, NotesApi
from notekeeper.services.object_store import ObjectStore

logger = logging.getLogger(__name__)

NOT_LOADED = "not_loaded"
LOADED = "loaded"
STALE = "stale"


class NoteListController:
    """
    In-memory mirror of the platform's note collection.

    Args:
        notes_api: Platform client that stores note records.
        object_store: Store that holds attachment blobs.

    Error Handling Strategy:
        Platform and store errors propagate unchanged to the caller. The only
        failures absorbed here are per-note attachment resolutions, which are
        recorded on the note (attachment_error) instead of failing the list.
    """

    def __init__(self, notes_api: NotesApi, object_store: ObjectStore):
        self.notes_api = notes_api
        self.object_store = object_store
        self._notes: List[NoteView] = []
        self._loaded = False
        self._in_flight = 0

    # ── Read-only views ───────────────────────────────────────────────────

    @property
    def notes(self) -> List[NoteView]:
        """A copy of the current list; callers cannot mutate controller state."""
        return list(self._notes)

    @property
    def state(self) -> str:
        if not self._loaded:
            return NOT_LOADED
        return STALE if self._in_flight else LOADED

    def get(self, note_id: str) -> Optional[NoteView]:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    # ── fetch_all ─────────────────────────────────────────────────────────

    async def _resolve(self, record: NoteRecord) -> NoteView:
        """
        Build the in-memory view of one record, resolving its attachment URL.

        A failed resolution is kept on the note rather than raised, so one
        missing blob does not block the rest of the list.
        """
        view = NoteView(**record.model_dump())
        if record.image is None:
            return view
        try:
            view.image_url = await self.object_store.resolve_url(record.image)
        except Exception as e:
            logger.warning(
                "Could not resolve attachment %r of note %s: %s",
                record.image,
                record.id,
                e,
            )
            view.attachment_error = str(e) or type(e).__name__
        return view

    async def fetch_all(self) -> List[NoteView]:
        """
        Replace the in-memory list with the platform's notes.

        Raises whatever list_notes raises; the previous list is then left
        untouched.
        """
        records = await self.notes_api.list_notes()
        views = await asyncio.gather(*(self._resolve(record) for record in records))

        self._notes = list(views)
        self._loaded = True

        failed = sum(1 for view in self._notes if view.attachment_error)
        logger.info(
            "Fetched %d notes (%d attachment resolution failures)",
            len(self._notes),
            failed,
        )
        return self.notes

    # ── create ────────────────────────────────────────────────────────────

    async def create(
        self,
        note_input: NoteCreate,
        attachment: Optional[AttachmentUpload] = None,
    ) -> NoteRecord:
        """
        Store a new note, uploading its attachment first, then refresh.

        The blob is stored under the note's name before the record exists, so
        a stored record never points at a missing blob. If createNote fails
        after the upload, the blob is left behind.

        Returns:
            The record as created by the platform.
        """
        if attachment is not None and attachment.is_empty:
            attachment = None

        payload: CreateNoteInput = {
            "name": note_input.name,
            "description": note_input.description,
            "image": note_input.name if attachment is not None else None,
        }

        self._in_flight += 1
        try:
            if attachment is not None:
                await self.object_store.put(
                    note_input.name, attachment.content, attachment.content_type
                )
            record = await self.notes_api.create_note(payload)
            logger.info("Created note %s (%s)", record.id, record.name)
        finally:
            self._in_flight -= 1

        await self.fetch_all()
        return record

    # ── delete ────────────────────────────────────────────────────────────

    async def _attachment_key(self, note_id: str, name: Optional[str]) -> Optional[str]:
        """
        Key of the blob to delete for a note that is not in the list.

        The caller's name is the key the blob was uploaded under. Without one,
        the platform is asked for the record.
        """
        if name:
            return name
        for record in await self.notes_api.list_notes():
            if record.id == note_id:
                return record.image
        return None

    async def delete(self, note_id: str, name: Optional[str] = None) -> None:
        """
        Remove a note from the list immediately, then from the store and platform.

        Args:
            note_id: Platform id of the note.
            name: The note's name, i.e. its attachment key. Only consulted
                when the note is not in the loaded list.

        The attachment blob is deleted before the record. If a remote call
        fails, the note is put back at its previous position and the error is
        re-raised; when its blob is already gone, the restored note carries
        attachment_error instead of a URL. A NotFoundError from the platform
        means the record is already gone, so the note stays removed.
        """
        index = next((i for i, n in enumerate(self._notes) if n.id == note_id), None)
        removed = self._notes.pop(index) if index is not None else None
        blob_deleted = False

        self._in_flight += 1
        try:
            if removed is not None:
                key = removed.image
            else:
                key = await self._attachment_key(note_id, name)
            if key:
                await self.object_store.delete(key)
                blob_deleted = True
            await self.notes_api.delete_note(note_id)
        except NotFoundError:
            logger.info("Note %s is no longer on the platform", note_id)
            raise
        except Exception:
            if removed is not None and self.get(note_id) is None:
                if blob_deleted:
                    removed = removed.model_copy(update={
                        "image_url": None,
                        "attachment_error": "The attachment was deleted but the note could not be.",
                    })
                self._notes.insert(min(index, len(self._notes)), removed)
                logger.warning("Delete of note %s failed; restored it to the list", note_id)
            raise
        finally:
            self._in_flight -= 1

        logger.info("Deleted note %s", note_id)
