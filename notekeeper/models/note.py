"""
NoteKeeper Backend — Note SQLAlchemy Model
============================================

What:  ORM model for the `notes` table used by DatabaseNotesApi.
Who:   Read and written by DatabaseNotesApi; tracked by Alembic.

Table Design:
    - id: UUID primary key assigned on insert; immutable afterwards
    - name: note title, also the object-store key of its attachment
    - description: free text
    - image: attachment key, NULL when the note has no attachment
    - created_at: UTC insertion time, used for stable list ordering
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from notekeeper.database import Base


class Note(Base):
    """
    A note record as persisted by the self-hosted platform.

    Lifecycle:
        1. Inserted by createNote
        2. Never updated
        3. Deleted by deleteNote (the blob is deleted separately by the caller)
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Opaque identifier assigned by the platform",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Note title; also the attachment storage key",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Note body",
    )

    image: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Object-store key of the attachment, NULL when absent",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was created (UTC)",
    )

    __table_args__ = (
        Index("idx_notes_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, name='{self.name}', image={self.image!r})>"
