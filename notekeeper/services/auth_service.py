"""
NoteKeeper Backend — Authentication Capability
================================================

What:  The sign-in gate in front of the notes routes and the sign-out action.
How:   An Authenticator is injected into the app (app.state.authenticator).
       Routes depend on `authenticate(request)`; the sign-out route calls
       `sign_out(session)`.
Who:   TokenAuthenticator is the default, configured from AUTH_TOKENS.

TokenAuthenticator:
    - `Authorization: Bearer <token>` must match a configured token
    - sign_out revokes the token for the lifetime of the process
    - no configured tokens → authentication disabled (anonymous session)
"""

import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional, Set

from starlette.requests import Request

from notekeeper.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserSession:
    """An authenticated caller. `token` is None for anonymous sessions."""
    subject: str
    token: Optional[str] = None


class Authenticator(ABC):

    @abstractmethod
    async def authenticate(self, request: Request) -> UserSession:
        """Return the caller's session or raise AuthenticationError."""
        ...

    @abstractmethod
    async def sign_out(self, session: UserSession) -> None:
        ...


class TokenAuthenticator(Authenticator):

    def __init__(self, tokens: Iterable[str]):
        self._tokens: Set[str] = set(tokens)
        self._revoked: Set[str] = set()
        if not self._tokens:
            logger.warning("No AUTH_TOKENS configured; authentication is disabled")

    @property
    def enabled(self) -> bool:
        return bool(self._tokens)

    def _match(self, presented: str) -> Optional[str]:
        for token in self._tokens:
            if hmac.compare_digest(token, presented):
                return token
        return None

    async def authenticate(self, request: Request) -> UserSession:
        if not self.enabled:
            return UserSession(subject="anonymous")

        header = request.headers.get("Authorization", "")
        scheme, _, presented = header.partition(" ")
        if scheme.lower() != "bearer" or not presented:
            raise AuthenticationError()

        token = self._match(presented.strip())
        if token is None or token in self._revoked:
            raise AuthenticationError(message="Invalid or signed-out token")

        # Tokens are never logged; the subject is a short fingerprint
        return UserSession(subject=f"token-{hashlib.sha256(token.encode()).hexdigest()[:8]}", token=token)

    async def sign_out(self, session: UserSession) -> None:
        if session.token is not None:
            self._revoked.add(session.token)
        logger.info("Signed out %s", session.subject)
