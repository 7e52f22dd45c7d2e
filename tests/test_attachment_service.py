"""
NoteKeeper Backend — Attachment Validation Unit Tests
=======================================================

What:  Extension, size and MIME checks applied to uploaded images.
How:   MIME sniffing is patched so the suite does not depend on the
       libmagic version installed on the machine.
"""

from unittest.mock import patch

import pytest

from notekeeper.exceptions import ObjectStoreError, ValidationError
from notekeeper.schemas.note import AttachmentUpload
from notekeeper.services.attachment_service import AttachmentService


class TestAttachmentValidation:

    def setup_method(self):
        self.service = AttachmentService(max_file_size=1024)

    # ── Extension ─────────────────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["a.png", "a.jpg", "a.JPEG", "a.gif", "a.webp"])
    def test_image_extensions_pass(self, filename):
        self.service.validate_extension(filename)

    @pytest.mark.parametrize("filename", ["a.pdf", "a.exe", "noextension"])
    def test_other_extensions_rejected(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    # ── Size ──────────────────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(None, 1024)

    def test_size_over_limit(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(None, 1025)

    def test_reported_size_over_limit(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(5000, 10)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(0, 0)

    # ── MIME type ─────────────────────────────────────────────────────────

    def test_validate_sets_sniffed_content_type(self, sample_png_bytes):
        upload = AttachmentUpload(filename="pic.png", content=sample_png_bytes, content_type="text/plain")

        with patch("notekeeper.services.attachment_service.sniff_mime_type", return_value="image/png"):
            validated = self.service.validate(upload)

        assert validated.content_type == "image/png"
        assert validated.content == sample_png_bytes

    def test_renamed_non_image_rejected(self):
        upload = AttachmentUpload(filename="evil.png", content=b"MZ\x90\x00")

        with patch("notekeeper.services.attachment_service.sniff_mime_type", return_value="application/x-dosexec"):
            with pytest.raises(ValidationError, match="not supported"):
                self.service.validate(upload)

    def test_sniffing_failure_is_a_storage_error(self):
        with patch("notekeeper.services.attachment_service.sniff_mime_type", side_effect=OSError("libmagic")):
            with pytest.raises(ObjectStoreError):
                self.service.validate_mime_type(b"data")
