"""
NoteKeeper Backend — Self-Hosted Notes Platform (SQLAlchemy)
==============================================================

What:  NotesApi implementation that stores notes in a SQL database.
How:   Each call opens its own AsyncSession from the injected factory,
       commits on success and rolls back on error.
Who:   Built by main.py when NOTES_BACKEND=database (the default).

Query patterns:
    listNotes   → SELECT * FROM notes ORDER BY created_at, id
    createNote  → INSERT; id and created_at assigned on flush
    deleteNote  → DELETE WHERE id = :id   (unknown id → NotFoundError)
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List

from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notekeeper.exceptions import DatabaseError, NotFoundError
from notekeeper.models.note import Note
from notekeeper.schemas.note import NoteRecord
from notekeeper.services.notes_api import CreateNoteInput, NotesApi

logger = logging.getLogger(__name__)


class DatabaseNotesApi(NotesApi):
    """
    Notes platform backed by async SQLAlchemy.

    Error Handling Strategy:
        SQLAlchemy errors are wrapped in DatabaseError (internal details go
        to the log, not the client). NotFoundError propagates as-is.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        """One transaction per platform call."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def list_notes(self) -> List[NoteRecord]:
        try:
            async with self._session() as session:
                result = await session.execute(
                    select(Note).order_by(Note.created_at, Note.id)
                )
                rows = result.scalars().all()
                return [NoteRecord.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def create_note(self, note_input: CreateNoteInput) -> NoteRecord:
        try:
            async with self._session() as session:
                note = Note(
                    name=note_input["name"],
                    description=note_input["description"],
                    image=note_input.get("image"),
                )
                session.add(note)
                await session.flush()
                record = NoteRecord.model_validate(note)
            logger.info("Note record created: %s (image=%s)", record.id, record.image)
            return record
        except SQLAlchemyError as e:
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def delete_note(self, note_id: str) -> None:
        try:
            parsed_id = uuid.UUID(note_id)
        except ValueError:
            raise NotFoundError(resource="note", resource_id=note_id)

        try:
            async with self._session() as session:
                result = await session.execute(delete(Note).where(Note.id == parsed_id))
                deleted = result.rowcount
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": note_id},
            ) from e

        if not deleted:
            raise NotFoundError(resource="note", resource_id=note_id)
        logger.info("Note record deleted: %s", note_id)

    async def health_check(self) -> bool:
        try:
            async with self._session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Health check: database unreachable: %s", str(e))
            return False
