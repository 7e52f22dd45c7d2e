"""
NoteKeeper Backend — Attachment Download Route
================================================

What:  Serves attachment blobs behind the signed URLs that
       ObjectStore.resolve_url hands out.
How:   Verifies the expiry and HMAC signature in the query string, then streams
       the blob with its stored content type. No bearer token is required:
       the URL itself is the credential, as with <img src="…">.

Failure responses:
    bad or expired signature → 404 (the key's existence is not revealed)
    missing blob             → 404
"""

import logging
import time

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from notekeeper.dependencies import get_object_store
from notekeeper.exceptions import NotFoundError
from notekeeper.schemas.note import ErrorResponse
from notekeeper.services.object_store import ObjectStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Files"])


@router.get(
    "/files/{key:path}",
    responses={
        200: {"description": "Attachment content"},
        404: {"description": "Unknown key, expired or invalid URL", "model": ErrorResponse},
    },
    summary="Download an attachment through a signed URL",
)
async def serve_file(
    key: str,
    expires: int = Query(..., description="Unix time after which the URL is invalid"),
    signature: str = Query(..., description="HMAC signature issued by the object store"),
    store: ObjectStore = Depends(get_object_store),
) -> Response:
    if not store.verify(key, expires, signature):
        logger.info("Rejected attachment URL for key %r (bad or expired signature)", key)
        raise NotFoundError(resource="attachment")

    content, content_type = await store.open(key)

    # Cache no longer than the URL stays valid
    max_age = max(0, expires - int(time.time()))
    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": f"private, max-age={max_age}"},
    )
