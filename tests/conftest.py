"""
NoteKeeper Backend — Test Configuration (conftest.py)
======================================================

What:  Shared fixtures and in-memory test doubles for the whole suite.
How:   The controller and the app take their collaborators as arguments, so
       tests inject FakeNotesApi / FakeObjectStore instead of patching modules.

Fixtures:
    call_log          ordered list of remote calls made by both fakes
    fake_api          in-memory notes platform
    fake_store        in-memory object store
    controller        NoteListController wired to the two fakes
    local_store       LocalObjectStore on a temporary directory
    sample_png_bytes  a minimal PNG header
"""

import asyncio
import os
import tempfile
from typing import Dict, List, Optional, Set, Tuple

# Settings are read at import time: configure them before importing notekeeper
os.environ["NOTES_BACKEND"] = "database"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="notekeeper_test_")
os.environ["URL_SIGNING_SECRET"] = "test-signing-secret"
os.environ["AUTH_TOKENS"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest

from notekeeper.exceptions import AttachmentNotFoundError, NotFoundError, RemoteApiError
from notekeeper.schemas.note import NoteRecord
from notekeeper.services.local_store import LocalObjectStore
from notekeeper.services.note_controller import NoteListController
from notekeeper.services.notes_api import CreateNoteInput, NotesApi
from notekeeper.services.object_store import ObjectStore


# ══════════════════════════════════════════════════════════════════════════
# Test doubles
# ══════════════════════════════════════════════════════════════════════════


class FakeNotesApi(NotesApi):
    """
    Notes platform held in a dict.

    Set `fail_list` / `fail_create` / `fail_delete` to make the next calls
    raise RemoteApiError.
    """

    def __init__(self, call_log: List[str]):
        self.call_log = call_log
        self.records: Dict[str, NoteRecord] = {}
        self.created_inputs: List[CreateNoteInput] = []
        self._next_id = 1
        self.fail_list = False
        self.fail_create = False
        self.fail_delete = False

    def seed(self, name: str, description: str = "desc", image: Optional[str] = None) -> NoteRecord:
        record = NoteRecord(id=str(self._next_id), name=name, description=description, image=image)
        self._next_id += 1
        self.records[record.id] = record
        return record

    async def list_notes(self) -> List[NoteRecord]:
        self.call_log.append("list_notes")
        if self.fail_list:
            raise RemoteApiError(message="listNotes failed", operation="listNotes")
        return [r.model_copy() for r in self.records.values()]

    async def create_note(self, note_input: CreateNoteInput) -> NoteRecord:
        self.call_log.append(f"create_note:{note_input['name']}")
        self.created_inputs.append(dict(note_input))
        if self.fail_create:
            raise RemoteApiError(message="createNote failed", operation="createNote")
        return self.seed(note_input["name"], note_input["description"], note_input["image"])

    async def delete_note(self, note_id: str) -> None:
        self.call_log.append(f"delete_note:{note_id}")
        if self.fail_delete:
            raise RemoteApiError(message="deleteNote failed", operation="deleteNote")
        if note_id not in self.records:
            raise NotFoundError(resource="note", resource_id=note_id)
        del self.records[note_id]

    async def health_check(self) -> bool:
        return True


class FakeObjectStore(ObjectStore):
    """
    Object store held in a dict.

    `broken_keys` make resolve_url raise; `delete_gate`, when set, makes
    delete() wait until the event is set.
    """

    def __init__(self, call_log: List[str]):
        self.call_log = call_log
        self.blobs: Dict[str, Tuple[bytes, str]] = {}
        self.broken_keys: Set[str] = set()
        self.delete_gate: Optional[asyncio.Event] = None
        self.fail_put = False

    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> None:
        self.call_log.append(f"put:{key}")
        if self.fail_put:
            raise RuntimeError("upload failed")
        self.blobs[key] = (content, content_type or "application/octet-stream")

    async def resolve_url(self, key: str) -> str:
        self.call_log.append(f"resolve_url:{key}")
        if key in self.broken_keys or key not in self.blobs:
            raise AttachmentNotFoundError(key)
        return f"https://store.test/{key}?sig=1"

    async def delete(self, key: str) -> None:
        self.call_log.append(f"delete:{key}")
        if self.delete_gate is not None:
            await self.delete_gate.wait()
        self.blobs.pop(key, None)

    async def open(self, key: str) -> Tuple[bytes, str]:
        if key not in self.blobs:
            raise AttachmentNotFoundError(key)
        return self.blobs[key]


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def call_log() -> List[str]:
    return []


@pytest.fixture
def fake_api(call_log):
    return FakeNotesApi(call_log)


@pytest.fixture
def fake_store(call_log):
    return FakeObjectStore(call_log)


@pytest.fixture
def controller(fake_api, fake_store):
    return NoteListController(fake_api, fake_store)


@pytest.fixture
def local_store(tmp_path):
    """LocalObjectStore on a fresh directory with a fixed signing secret."""
    return LocalObjectStore(
        storage_root=str(tmp_path / "storage"),
        public_base_url="http://test",
        signing_secret="unit-test-secret",
        url_expiry_seconds=60,
    )


@pytest.fixture
def sample_png_bytes():
    """PNG signature + IHDR start. Not a decodable image, but a PNG to libmagic."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
    )
