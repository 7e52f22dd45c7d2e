"""
NoteKeeper Backend — Access Log Middleware
============================================

What:  One log line per request: method, path, status, duration, request ID
       and the caller's session subject.
How:   Level follows the status code (5xx ERROR, 4xx WARNING, else INFO).
       Health probes and signed file downloads are not logged; the query
       string of a download carries its signature.

Log line:
    DELETE /api/notes/6f1c… 204 12.4ms [a1b2c3d4] token-9e1f03aa
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notekeeper.middleware.request_id import request_id_var

logger = logging.getLogger("notekeeper.access")

QUIET_PREFIXES = ("/health", "/api/files/")


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.startswith(QUIET_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        # Set by require_session; absent when authentication failed
        session = getattr(request.state, "session", None)
        subject = session.subject if session is not None else "-"

        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms [%s] %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
            subject,
            extra={
                "request_id": request_id_var.get(""),
                "subject": subject,
                "elapsed_ms": round(elapsed_ms, 2),
            },
        )
        return response
