"""
NoteKeeper Backend — Attachment Validation Service
====================================================

What:  Validates an uploaded image before it is handed to the object store.
How:   Extension check, size check, then content sniffing with python-magic.
Who:   Called by the create-note route before NoteListController.create().

Validation order (cheapest first):
    1. Extension   — no content read
    2. Size        — Content-Length header, then the actual byte count
    3. MIME type   — libmagic inspects the file header bytes
"""

import logging
from pathlib import Path
from typing import Optional

from notekeeper.config import settings
from notekeeper.exceptions import ObjectStoreError, ValidationError
from notekeeper.schemas.note import AttachmentUpload

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


def sniff_mime_type(content: bytes) -> str:
    """Detect the MIME type from the content's magic bytes."""
    import magic

    return magic.from_buffer(content, mime=True)


class AttachmentService:
    """
    Upload validation for note attachments.

    Args:
        max_file_size: Byte limit; defaults to settings.max_file_size.
    """

    def __init__(self, max_file_size: Optional[int] = None):
        self.max_file_size = max_file_size or settings.max_file_size

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension or raises ValidationError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject empty files and files over the limit.

        The Content-Length header is checked too: some clients send a
        truncated body with the real length in the header.
        """
        max_mb = self.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(
                message="The attached file is empty.",
                field="image",
            )

        for size in (content_length, actual_size):
            if size and size > self.max_file_size:
                raise ValidationError(
                    message=f"File size exceeds maximum of {max_mb:.0f}MB. Please attach a smaller image.",
                    field="image",
                    context={"max_size_mb": max_mb, "size": size},
                )

    def validate_mime_type(self, content: bytes) -> str:
        try:
            mime_type = sniff_mime_type(content)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise ObjectStoreError(
                message="Could not verify the attachment type. Please try again.",
                context={"error": str(e)},
            ) from e

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The attachment must be a PNG, JPEG, GIF or WebP image."
                ),
                field="image",
                context={"detected_mime": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def validate(
        self,
        upload: AttachmentUpload,
        content_length: Optional[int] = None,
    ) -> AttachmentUpload:
        """
        Run every check and return the upload with its sniffed content type.
        """
        self.validate_extension(upload.filename)
        self.validate_size(content_length, upload.size)
        mime_type = self.validate_mime_type(upload.content)
        logger.debug("Attachment %s validated as %s", upload.filename, mime_type)
        return upload.model_copy(update={"content_type": mime_type})


attachment_service = AttachmentService()
