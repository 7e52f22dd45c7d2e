"""
NoteKeeper Backend — Local Disk Object Store
==============================================

What:  ObjectStore implementation that keeps attachments on local disk and
       hands out time-bounded, HMAC-signed URLs served by GET /api/files/{key}.
How:   Blobs are written asynchronously with aiofiles. Each key maps to a
       SHA-256 derived filename, so no user text ever reaches a path.
Who:   Built by main.py at startup; used by NoteListController and the
       files route.

Directory Structure:
    storage/
    └── blobs/
        ├── 3f/3fa2…c9.bin     ← content
        └── 3f/3fa2…c9.type    ← content type

Signed URL format:
    {public_base_url}/api/files/{quoted key}?expires={unix ts}&signature={hex}
    signature = HMAC-SHA256(secret, "{key}\n{expires}")
"""

import hashlib
import hmac
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import quote, urlencode

import aiofiles

from notekeeper.exceptions import AttachmentNotFoundError, ObjectStoreError
from notekeeper.services.object_store import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class LocalObjectStore(ObjectStore):
    """
    Attachment store rooted at a local directory.

    Args:
        storage_root: Directory that receives the `blobs/` tree.
        public_base_url: Scheme and host that clients reach this service on.
        signing_secret: HMAC key; a random per-process key when empty.
        url_expiry_seconds: Lifetime of URLs returned by resolve_url.
    """

    def __init__(
        self,
        storage_root: str,
        public_base_url: str = "http://localhost:8000",
        signing_secret: str = "",
        url_expiry_seconds: int = 900,
    ):
        self.storage_root = Path(storage_root).resolve()
        self.blob_root = self.storage_root / "blobs"
        self.blob_root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")
        self.url_expiry_seconds = url_expiry_seconds
        if not signing_secret:
            logger.warning("No URL signing secret configured; using an ephemeral key")
            signing_secret = secrets.token_hex(32)
        self._secret = signing_secret.encode("utf-8")
        logger.info("LocalObjectStore initialized with storage_root=%s", self.storage_root)

    # ── Paths ─────────────────────────────────────────────────────────────

    def _blob_paths(self, key: str) -> Tuple[Path, Path]:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        directory = self.blob_root / digest[:2]
        return directory / f"{digest}.bin", directory / f"{digest}.type"

    # ── Signing ───────────────────────────────────────────────────────────

    def _sign(self, key: str, expires: int) -> str:
        message = f"{key}\n{expires}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def verify(self, key: str, expires: int, signature: str) -> bool:
        """True when `signature` matches and `expires` is still in the future."""
        if expires < int(time.time()):
            return False
        return hmac.compare_digest(self._sign(key, expires), signature)

    # ── ObjectStore contract ──────────────────────────────────────────────

    async def put(self, key: str, content: bytes, content_type: Optional[str] = None) -> None:
        blob_path, type_path = self._blob_paths(key)
        try:
            blob_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(blob_path, "wb") as f:
                await f.write(content)
            async with aiofiles.open(type_path, "w") as f:
                await f.write(content_type or DEFAULT_CONTENT_TYPE)
        except OSError as e:
            logger.error("Failed to store blob for key %r: %s", key, str(e))
            raise ObjectStoreError(
                message="Failed to save the attachment. Please try again.",
                key=key,
                context={"os_error": str(e)},
            ) from e
        logger.info("Stored attachment %r (%d bytes)", key, len(content))

    async def resolve_url(self, key: str) -> str:
        blob_path, _ = self._blob_paths(key)
        if not blob_path.exists():
            raise AttachmentNotFoundError(key)
        expires = int(time.time()) + self.url_expiry_seconds
        query = urlencode({"expires": expires, "signature": self._sign(key, expires)})
        return f"{self.public_base_url}/api/files/{quote(key, safe='')}?{query}"

    async def delete(self, key: str) -> None:
        blob_path, type_path = self._blob_paths(key)
        try:
            for path in (blob_path, type_path):
                if path.exists():
                    os.remove(path)
        except OSError as e:
            logger.error("Failed to delete blob for key %r: %s", key, str(e))
            raise ObjectStoreError(
                message="Failed to delete the attachment.",
                key=key,
                context={"os_error": str(e)},
            ) from e
        logger.info("Deleted attachment %r", key)

    async def open(self, key: str) -> Tuple[bytes, str]:
        blob_path, type_path = self._blob_paths(key)
        if not blob_path.exists():
            raise AttachmentNotFoundError(key)
        try:
            async with aiofiles.open(blob_path, "rb") as f:
                content = await f.read()
            content_type = DEFAULT_CONTENT_TYPE
            if type_path.exists():
                async with aiofiles.open(type_path, "r") as f:
                    content_type = (await f.read()).strip() or DEFAULT_CONTENT_TYPE
        except OSError as e:
            raise ObjectStoreError(
                message="Failed to read the attachment.",
                key=key,
                context={"os_error": str(e)},
            ) from e
        return content, content_type

    async def health_check(self) -> bool:
        return self.blob_root.is_dir() and os.access(self.blob_root, os.W_OK)
