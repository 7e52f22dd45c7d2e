"""
NoteKeeper Backend — Sign-Out Route
=====================================

What:  POST /api/auth/sign-out — the "Sign Out" button.
How:   Delegates to the injected Authenticator; the session token stops
       working for every later request.
"""

import logging

from fastapi import APIRouter, Depends, Response

from notekeeper.dependencies import get_authenticator, require_session
from notekeeper.schemas.note import ErrorResponse
from notekeeper.services.auth_service import Authenticator, UserSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/sign-out",
    status_code=204,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="Sign out the current session",
)
async def sign_out(
    session: UserSession = Depends(require_session),
    authenticator: Authenticator = Depends(get_authenticator),
) -> Response:
    await authenticator.sign_out(session)
    return Response(status_code=204)
