"""
NoteKeeper Backend — LocalObjectStore Unit Tests
==================================================

What:  Blob storage on disk and the signed-URL scheme.

What we test:
    ✅ put → resolve_url → open returns the stored bytes and type
    ✅ resolve_url of an unknown key raises AttachmentNotFoundError
    ✅ signatures: valid, tampered, other key, expired
    ✅ delete is idempotent
    ✅ keys never escape the blob directory
"""

import time
from urllib.parse import parse_qs, unquote, urlparse

import pytest

from notekeeper.exceptions import AttachmentNotFoundError


def _split(url):
    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    key = unquote(parsed.path.removeprefix("/api/files/"))
    return key, int(query["expires"][0]), query["signature"][0]


class TestLocalObjectStore:

    @pytest.mark.asyncio
    async def test_put_then_open(self, local_store, sample_png_bytes):
        await local_store.put("My note", sample_png_bytes, "image/png")

        content, content_type = await local_store.open("My note")

        assert content == sample_png_bytes
        assert content_type == "image/png"

    @pytest.mark.asyncio
    async def test_put_overwrites(self, local_store):
        await local_store.put("A", b"first", "image/png")
        await local_store.put("A", b"second", "image/jpeg")

        assert await local_store.open("A") == (b"second", "image/jpeg")

    @pytest.mark.asyncio
    async def test_resolve_url_is_signed_and_verifiable(self, local_store):
        await local_store.put("My note/1", b"data", "image/png")

        url = await local_store.resolve_url("My note/1")

        assert url.startswith("http://test/api/files/My%20note%2F1?")
        key, expires, signature = _split(url)
        assert key == "My note/1"
        assert expires > time.time()
        assert local_store.verify(key, expires, signature)

    @pytest.mark.asyncio
    async def test_resolve_unknown_key_raises(self, local_store):
        with pytest.raises(AttachmentNotFoundError):
            await local_store.resolve_url("missing")

    @pytest.mark.asyncio
    async def test_verify_rejects_tampering(self, local_store):
        await local_store.put("A", b"data")
        key, expires, signature = _split(await local_store.resolve_url("A"))

        assert not local_store.verify("B", expires, signature)
        assert not local_store.verify(key, expires + 1, signature)
        assert not local_store.verify(key, expires, "0" * len(signature))

    def test_verify_rejects_expired(self, local_store):
        expires = int(time.time()) - 1
        signature = local_store._sign("A", expires)

        assert not local_store.verify("A", expires, signature)

    @pytest.mark.asyncio
    async def test_delete_removes_blob(self, local_store):
        await local_store.put("A", b"data")

        await local_store.delete("A")

        with pytest.raises(AttachmentNotFoundError):
            await local_store.open("A")

    @pytest.mark.asyncio
    async def test_delete_missing_key_is_noop(self, local_store):
        await local_store.delete("never stored")

    @pytest.mark.asyncio
    async def test_keys_stay_inside_blob_root(self, local_store):
        await local_store.put("../../etc/passwd", b"data")

        blob_path, _ = local_store._blob_paths("../../etc/passwd")
        assert local_store.blob_root in blob_path.resolve().parents
        assert blob_path.exists()

    @pytest.mark.asyncio
    async def test_health_check(self, local_store):
        assert await local_store.health_check() is True
