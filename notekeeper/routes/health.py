"""
NoteKeeper Backend — Health Check Route
=========================================

What:  GET /health for container probes and load balancers.
How:   Probes the notes platform and the object store with their lightweight
       health checks. Always answers 200; `status` is `degraded` when a
       collaborator is unreachable, so the service keeps receiving traffic
       and reports the platform outage through its error responses.
"""

import logging
import time

from fastapi import APIRouter, Request

from notekeeper import __version__
from notekeeper.config import settings
from notekeeper.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    controller = request.app.state.controller

    platform_ok = await controller.notes_api.health_check()
    store_ok = await controller.object_store.health_check()

    if not platform_ok:
        logger.warning("Health check: notes platform unreachable")
    if not store_ok:
        logger.warning("Health check: object store unavailable")

    return HealthResponse(
        status="healthy" if platform_ok and store_ok else "degraded",
        version=__version__,
        notes_backend=settings.notes_backend,
        platform="available" if platform_ok else "unavailable",
        object_store="available" if store_ok else "unavailable",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
