"""Test blob stores."""
import pytest

from core.blobs import BlobNotFoundError, InMemoryBlobStore, LocalBlobStore


@pytest.mark.asyncio
async def test_local_store_writes_under_root(tmp_path):
    blobs = LocalBlobStore(root=str(tmp_path), base_url="http://cdn.test/media/")
    uri = await blobs.store(b"jpeg-bytes", "image/jpeg", "books/u1/b1/cover.jpg")

    assert uri == "http://cdn.test/media/books/u1/b1/cover.jpg"
    assert (tmp_path / "books" / "u1" / "b1" / "cover.jpg").read_bytes() == b"jpeg-bytes"


@pytest.mark.asyncio
async def test_local_store_delete(tmp_path):
    blobs = LocalBlobStore(root=str(tmp_path), base_url="http://cdn.test/media")
    uri = await blobs.store(b"x", "image/png", "books/u1/b1/a.png")

    await blobs.delete(uri)
    assert not (tmp_path / "books" / "u1" / "b1" / "a.png").exists()

    with pytest.raises(BlobNotFoundError):
        await blobs.delete(uri)
    with pytest.raises(BlobNotFoundError):
        await blobs.delete("http://elsewhere/a.png")


@pytest.mark.asyncio
async def test_memory_store_failing_deletes():
    blobs = InMemoryBlobStore(fail_deletes=True)
    uri = await blobs.store(b"x", "image/png", "a.png")
    with pytest.raises(OSError):
        await blobs.delete(uri)
    assert uri in blobs.objects
