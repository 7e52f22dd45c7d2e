"""
NoteKeeper Backend — Application Package Initializer
=====================================================

What: Marks the `notekeeper` directory as a Python package.
Who:  Imported by uvicorn (`notekeeper.main:app`), Alembic, and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← UI events as HTTP requests
    ├─────────────────────────────────────┤
    │     NoteListController (Services)   │  ← fetch / create / delete workflow
    ├─────────────────────────────────────┤
    │   NotesApi          ObjectStore     │  ← injected platform collaborators
    ├─────────────────────────────────────┤
    │  GraphQL / SQLAlchemy   Local disk  │  ← concrete backends
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
