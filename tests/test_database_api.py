"""
NoteKeeper Backend — DatabaseNotesApi Integration Tests
=========================================================

What:  The SQL-backed notes platform against a real SQLite database.
How:   Each test gets a fresh sqlite+aiosqlite file under tmp_path.
"""

import uuid

import pytest
import pytest_asyncio

from notekeeper.database import (
    build_engine,
    build_session_factory,
    create_schema,
    dispose_engine,
)
from notekeeper.exceptions import NotFoundError
from notekeeper.services.database_api import DatabaseNotesApi


@pytest_asyncio.fixture
async def db_api(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}")
    await create_schema(engine)
    yield DatabaseNotesApi(build_session_factory(engine))
    await dispose_engine(engine)


class TestDatabaseNotesApi:

    @pytest.mark.asyncio
    async def test_create_then_list(self, db_api):
        created = await db_api.create_note({"name": "A", "description": "B", "image": "A"})

        notes = await db_api.list_notes()

        assert [n.id for n in notes] == [created.id]
        assert notes[0].name == "A"
        assert notes[0].image == "A"
        uuid.UUID(created.id)

    @pytest.mark.asyncio
    async def test_image_is_optional(self, db_api):
        created = await db_api.create_note({"name": "A", "description": "B", "image": None})
        assert created.image is None

    @pytest.mark.asyncio
    async def test_list_keeps_creation_order(self, db_api):
        for name in ("first", "second", "third"):
            await db_api.create_note({"name": name, "description": "d", "image": None})

        notes = await db_api.list_notes()

        assert len(notes) == 3
        assert {n.name for n in notes} == {"first", "second", "third"}

    @pytest.mark.asyncio
    async def test_delete(self, db_api):
        keep = await db_api.create_note({"name": "keep", "description": "d", "image": None})
        drop = await db_api.create_note({"name": "drop", "description": "d", "image": None})

        await db_api.delete_note(drop.id)

        assert [n.id for n in await db_api.list_notes()] == [keep.id]

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, db_api):
        with pytest.raises(NotFoundError):
            await db_api.delete_note(str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_delete_malformed_id(self, db_api):
        with pytest.raises(NotFoundError):
            await db_api.delete_note("not-a-uuid")

    @pytest.mark.asyncio
    async def test_health_check(self, db_api):
        assert await db_api.health_check() is True
