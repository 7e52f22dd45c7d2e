"""
NoteKeeper Backend — FastAPI Dependencies
==========================================

What:  Accessors for the collaborators stored on app.state at startup.
How:   Route handlers declare them with Depends(); tests replace the objects
       on app.state (or pass them to create_app) instead of patching modules.
"""

from fastapi import Request

from notekeeper.services.auth_service import Authenticator, UserSession
from notekeeper.services.note_controller import NoteListController
from notekeeper.services.object_store import ObjectStore


def get_controller(request: Request) -> NoteListController:
    return request.app.state.controller


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


async def require_session(request: Request) -> UserSession:
    """
    Authenticate the caller.

    Raises AuthenticationError (→ 401) when the authenticator rejects the request.
    """
    authenticator: Authenticator = request.app.state.authenticator
    session = await authenticator.authenticate(request)
    request.state.session = session
    return session
