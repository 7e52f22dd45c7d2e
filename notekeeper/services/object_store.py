"""
NoteKeeper Backend — Abstract Object Store Interface
======================================================

What:  Contract for the blob store that holds note attachments.
Who:   Injected into NoteListController (put / resolve_url / delete) and
       used by the file-serving route (open / verify).

Contract:
    put(key, bytes)    uploads or overwrites the blob under `key`
    resolve_url(key)   → fetchable URL, valid for a store-defined duration
    delete(key)        removes the blob (missing key is not an error)
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple


class ObjectStore(ABC):
    """Abstract attachment store keyed by arbitrary strings (note names)."""

    @abstractmethod
    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> None:
        ...

    @abstractmethod
    async def resolve_url(self, key: str) -> str:
        """
        Return a fetchable URL for `key`.

        Raises:
            AttachmentNotFoundError: nothing is stored under `key`
            ObjectStoreError: the store could not be reached
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def open(self, key: str) -> Tuple[bytes, str]:
        """Return (content, content_type) of the blob under `key`."""
        ...

    def verify(self, key: str, expires: int, signature: str) -> bool:
        """
        Check a URL previously returned by resolve_url.

        Stores whose URLs point elsewhere never receive such requests and
        keep this default.
        """
        return False

    async def health_check(self) -> bool:
        return True
