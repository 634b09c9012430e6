"""RedundantStorageAdapter: fan-out writes, mirror/archive deletes, fallbacks, retry."""

from datetime import timedelta

import pytest

from lifeline.domain.enums import ReplicationMode
from lifeline.infrastructure.exceptions import (
    ObjectNotFoundError,
    StorageBackendError,
)
from lifeline.infrastructure.external.storage.redundant_storage import (
    RedundantStorageAdapter,
    Replica,
)
from tests.fakes import RecordingAdapter


def _backend_error(operation: str = "write", retryable: bool = False) -> StorageBackendError:
    return StorageBackendError(operation, "t/a.json.gz", retryable=retryable)


@pytest.fixture
def primary() -> RecordingAdapter:
    return RecordingAdapter("primary")


@pytest.fixture
def mirror() -> RecordingAdapter:
    return RecordingAdapter("mirror")


@pytest.fixture
def archive() -> RecordingAdapter:
    return RecordingAdapter("archive")


@pytest.fixture
def redundant(primary, mirror, archive) -> RedundantStorageAdapter:
    return RedundantStorageAdapter(
        primary,
        [
            Replica(mirror, ReplicationMode.MIRROR, "cfg-mirror"),
            Replica(archive, ReplicationMode.ARCHIVE, "cfg-archive"),
        ],
        retry_delay=0,
    )


async def test_write_reaches_every_target(redundant, primary, mirror, archive) -> None:
    await redundant.write("t/a.json.gz", b"data", {"content-type": "application/gzip"})
    for target in (primary, mirror, archive):
        assert target.objects["t/a.json.gz"] == (b"data", {"content-type": "application/gzip"})


async def test_write_succeeds_when_some_targets_fail(redundant, primary, mirror, archive) -> None:
    primary.fail_next["write"].append(_backend_error())
    mirror.fail_next["write"].append(_backend_error())
    await redundant.write("t/a.json.gz", b"data")
    assert "t/a.json.gz" in archive.objects
    assert "t/a.json.gz" not in primary.objects


async def test_write_fails_when_every_target_fails(redundant, primary, mirror, archive) -> None:
    for target in (primary, mirror, archive):
        target.fail_next["write"].append(_backend_error())
    with pytest.raises(StorageBackendError) as exc_info:
        await redundant.write("t/a.json.gz", b"data")
    assert exc_info.value.operation == "write"


async def test_retryable_error_is_retried_once(redundant, primary) -> None:
    primary.fail_next["write"].append(_backend_error(retryable=True))
    await redundant.write("t/a.json.gz", b"data")
    assert primary.count("write") == 2
    assert "t/a.json.gz" in primary.objects


async def test_non_retryable_error_is_not_retried(redundant, primary) -> None:
    primary.fail_next["write"].append(_backend_error(retryable=False))
    await redundant.write("t/a.json.gz", b"data")
    assert primary.count("write") == 1


async def test_delete_keeps_archive_copy(redundant, primary, mirror, archive) -> None:
    await redundant.write("t/a.json.gz", b"data")
    await redundant.delete("t/a.json.gz")
    assert "t/a.json.gz" not in primary.objects
    assert "t/a.json.gz" not in mirror.objects
    assert archive.objects["t/a.json.gz"][0] == b"data"
    assert archive.count("delete") == 0


async def test_read_falls_back_to_replica(redundant, primary, archive) -> None:
    archive.objects["t/a.json.gz"] = (b"archived", {})
    assert await redundant.read("t/a.json.gz") == b"archived"
    assert primary.count("read") == 1


async def test_read_skips_failing_primary(redundant, primary, mirror) -> None:
    primary.objects["t/a.json.gz"] = (b"primary", {})
    mirror.objects["t/a.json.gz"] = (b"mirror", {})
    primary.fail_next["read"].append(_backend_error("read"))
    assert await redundant.read("t/a.json.gz") == b"mirror"


async def test_read_missing_everywhere_raises_not_found(redundant) -> None:
    with pytest.raises(ObjectNotFoundError):
        await redundant.read("t/missing.json.gz")


async def test_read_prefers_backend_error_over_not_found(redundant, mirror) -> None:
    mirror.fail_next["read"].append(_backend_error("read"))
    with pytest.raises(StorageBackendError):
        await redundant.read("t/missing.json.gz")


async def test_exists_and_metadata_consult_replicas(redundant, archive) -> None:
    archive.objects["t/a.json.gz"] = (b"x", {"snapshot-id": "s1"})
    assert await redundant.exists("t/a.json.gz") is True
    assert await redundant.get_metadata("t/a.json.gz") == {"snapshot-id": "s1"}
    assert await redundant.exists("t/b.json.gz") is False
    assert await redundant.get_metadata("t/b.json.gz") is None


async def test_copy_and_signing_use_primary_only(redundant, primary, mirror) -> None:
    primary.objects["t/a.json.gz"] = (b"x", {})
    await redundant.copy("t/a.json.gz", "t/b.json.gz")
    url = await redundant.signed_read_url(
        "t/b.json.gz", expires_in=timedelta(minutes=10), download_filename="b.json.gz"
    )
    assert url.startswith("https://primary.example.test/")
    assert mirror.count("copy") == 0
    assert mirror.count("signed_read_url") == 0


async def test_without_replicas_behaves_like_primary(primary) -> None:
    redundant = RedundantStorageAdapter(primary)
    await redundant.write("t/a.json.gz", b"x")
    assert await redundant.list("t/") == ["t/a.json.gz"]
