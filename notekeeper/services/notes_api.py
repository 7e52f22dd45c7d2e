"""
NoteKeeper Backend — Abstract Notes Platform Interface
========================================================

What:  Contract for the remote service that stores note records.
How:   Concrete platforms inherit from NotesApi:
       - GraphQLNotesApi:  a hosted GraphQL API (listNotes/createNote/deleteNote)
       - DatabaseNotesApi: a self-hosted platform on async SQLAlchemy
Who:   Injected into NoteListController; the controller never knows which
       platform it talks to.

Request/response contract:
    list_notes()                               → [NoteRecord]   (order irrelevant)
    create_note({name, description, image})    → NoteRecord     (at least id)
    delete_note(note_id)                       → None           (acknowledged)
"""

from abc import ABC, abstractmethod
from typing import List, Optional, TypedDict

from notekeeper.schemas.note import NoteRecord


class CreateNoteInput(TypedDict):
    """Payload of the createNote call."""
    name: str
    description: str
    image: Optional[str]


class NotesApi(ABC):
    """
    Abstract interface to the notes platform.

    Contract:
        - Implementations translate their transport errors into RemoteApiError
          (or DatabaseError for the self-hosted platform)
        - Nothing is retried; a failure propagates to the caller
    """

    @abstractmethod
    async def list_notes(self) -> List[NoteRecord]:
        """Return every stored note."""
        ...

    @abstractmethod
    async def create_note(self, note_input: CreateNoteInput) -> NoteRecord:
        """
        Store a new note and return the created record.

        The platform assigns the id; `image` is stored as given (a key or None).
        """
        ...

    @abstractmethod
    async def delete_note(self, note_id: str) -> None:
        """Delete the record with the given id."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability probe used by GET /health."""
        ...

    async def close(self) -> None:
        """Release transport resources. Default: nothing to release."""
        return None
