"""Behavior every storage adapter must share, run against the S3 and GCS fakes."""

import asyncio
from datetime import timedelta

import pytest

from lifeline.core.constants import MULTIPART_THRESHOLD_BYTES
from lifeline.infrastructure.exceptions import ObjectNotFoundError

SMALL = b"x" * 1024
LARGE = bytes(range(256)) * ((MULTIPART_THRESHOLD_BYTES // 256) + 1) + b"!"


async def test_unwritten_path_does_not_exist(adapter) -> None:
    assert await adapter.exists("tenant-a/missing.json.gz") is False


async def test_read_unwritten_path_raises_not_found(adapter) -> None:
    with pytest.raises(ObjectNotFoundError) as exc_info:
        await adapter.read("tenant-a/missing.json.gz")
    assert exc_info.value.path == "tenant-a/missing.json.gz"
    assert exc_info.value.error_code == "STORAGE_OBJECT_NOT_FOUND"


@pytest.mark.parametrize("payload", [SMALL, LARGE], ids=["1KiB", "over-threshold"])
async def test_write_then_read_returns_same_bytes(adapter, payload: bytes) -> None:
    await adapter.write("tenant-a/snap.json.gz", payload)
    assert await adapter.exists("tenant-a/snap.json.gz") is True
    assert await adapter.read("tenant-a/snap.json.gz") == payload


async def test_write_accepts_text_as_utf8(adapter) -> None:
    await adapter.write("tenant-a/note.txt", "héllo")
    assert await adapter.read("tenant-a/note.txt") == "héllo".encode()


async def test_overwrite_replaces_content(adapter) -> None:
    await adapter.write("tenant-a/snap.json.gz", b"first")
    await adapter.write("tenant-a/snap.json.gz", b"second")
    assert await adapter.read("tenant-a/snap.json.gz") == b"second"


async def test_delete_is_idempotent(adapter) -> None:
    await adapter.write("tenant-a/snap.json.gz", SMALL)
    await adapter.delete("tenant-a/snap.json.gz")
    await adapter.delete("tenant-a/snap.json.gz")
    assert await adapter.exists("tenant-a/snap.json.gz") is False


async def test_delete_of_never_written_path_succeeds(adapter) -> None:
    await adapter.delete("tenant-a/never.json.gz")


async def test_copy_is_independent_of_source(adapter) -> None:
    await adapter.write("tenant-a/src.json.gz", b"payload")
    await adapter.copy("tenant-a/src.json.gz", "tenant-a/dest.json.gz")
    await adapter.delete("tenant-a/src.json.gz")
    assert await adapter.read("tenant-a/dest.json.gz") == b"payload"


async def test_copy_missing_source_raises_not_found_for_source(adapter) -> None:
    with pytest.raises(ObjectNotFoundError) as exc_info:
        await adapter.copy("tenant-a/nope.json.gz", "tenant-a/dest.json.gz")
    assert exc_info.value.path == "tenant-a/nope.json.gz"


async def test_get_metadata_absent_returns_none(adapter) -> None:
    assert await adapter.get_metadata("tenant-a/missing.json.gz") is None


async def test_get_metadata_returns_user_metadata_and_content_type(adapter) -> None:
    await adapter.write(
        "tenant-a/snap.json.gz",
        SMALL,
        {"Content-Type": "application/gzip", "Snapshot_Id": "s1"},
    )
    metadata = await adapter.get_metadata("tenant-a/snap.json.gz")
    assert metadata == {"content-type": "application/gzip", "snapshot-id": "s1"}


async def test_default_content_type_is_octet_stream(adapter) -> None:
    await adapter.write("tenant-a/blob.bin", SMALL)
    metadata = await adapter.get_metadata("tenant-a/blob.bin")
    assert metadata["content-type"] == "application/octet-stream"


async def test_list_returns_only_paths_under_prefix(adapter) -> None:
    await adapter.write("tenant-a/one.json.gz", b"1")
    await adapter.write("tenant-a/two.json.gz", b"2")
    await adapter.write("tenant-b/three.json.gz", b"3")
    assert sorted(await adapter.list("tenant-a/")) == [
        "tenant-a/one.json.gz",
        "tenant-a/two.json.gz",
    ]
    assert await adapter.list("tenant-c/") == []


async def test_concurrent_writes_to_same_path_never_tear(adapter) -> None:
    payload_a = b"a" * 4096
    payload_b = b"b" * 4096
    await asyncio.gather(
        *(
            adapter.write("tenant-a/race.json.gz", p)
            for p in (payload_a, payload_b) * 5
        )
    )
    assert await adapter.read("tenant-a/race.json.gz") in (payload_a, payload_b)


async def test_signed_read_url_sets_attachment_filename(adapter) -> None:
    await adapter.write("tenant-a/snap.json.gz", SMALL)
    url = await adapter.signed_read_url(
        "tenant-a/snap.json.gz",
        expires_in=timedelta(minutes=10),
        download_filename="snap.json.gz",
    )
    assert 'attachment; filename="snap.json.gz"' in url
    assert "600" in url
