"""GCSStorageAdapter: resumable uploads, error classification, signing, credentials."""

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as gcs_exceptions
from google.auth.credentials import AnonymousCredentials
from google.cloud import storage

from lifeline.core.constants import MULTIPART_THRESHOLD_BYTES, UPLOAD_PART_SIZE_BYTES
from lifeline.infrastructure.exceptions import (
    NotSupportedByBackendError,
    ObjectNotFoundError,
    StorageBackendError,
)
from lifeline.infrastructure.external.storage.gcs_client import GCSBlobClient
from lifeline.infrastructure.external.storage.gcs_storage import GCSStorageAdapter
from tests.fakes import FakeGCSClient


async def test_small_payload_uses_single_request(gcs_adapter, fake_gcs: FakeGCSClient) -> None:
    await gcs_adapter.write("t/small.bin", b"s" * 1024)
    assert fake_gcs.count("upload_from_string") == 1
    assert fake_gcs.count("upload_from_file") == 0


async def test_large_payload_uses_resumable_upload_in_chunks(gcs_adapter, fake_gcs: FakeGCSClient) -> None:
    payload = b"L" * (MULTIPART_THRESHOLD_BYTES + 1)
    await gcs_adapter.write("t/large.bin", payload)
    assert fake_gcs.count("upload_from_file") == 1
    assert fake_gcs.resumable_chunk_sizes == [UPLOAD_PART_SIZE_BYTES]
    assert fake_gcs.upload_file_sizes == [None]
    assert await gcs_adapter.read("t/large.bin") == payload


def _upload_response() -> MagicMock:
    response = MagicMock()
    response.json.return_value = {}
    return response


@pytest.mark.parametrize(
    ("size", "resumable", "single_request"),
    [
        (1024, 0, 1),
        (MULTIPART_THRESHOLD_BYTES, 0, 1),
        (MULTIPART_THRESHOLD_BYTES + 1024 * 1024, 1, 0),
    ],
)
async def test_upload_strategy_on_real_client(size: int, resumable: int, single_request: int) -> None:
    client = storage.Client(project="test", credentials=AnonymousCredentials())
    adapter = GCSStorageAdapter(GCSBlobClient(client=client), "b")
    with (
        patch.object(storage.Blob, "_do_resumable_upload", return_value=_upload_response()) as resumable_upload,
        patch.object(storage.Blob, "_do_multipart_upload", return_value=_upload_response()) as multipart_upload,
    ):
        await adapter.write("t/object.bin", b"x" * size)
    assert resumable_upload.call_count == resumable
    assert multipart_upload.call_count == single_request


@pytest.mark.parametrize("method", ["upload_from_string", "upload_from_file"])
async def test_write_to_missing_bucket_is_backend_error(gcs_adapter, fake_gcs: FakeGCSClient, method: str) -> None:
    fake_gcs.fail_next[method].append(gcs_exceptions.NotFound("The specified bucket does not exist."))
    size = MULTIPART_THRESHOLD_BYTES + 1 if method == "upload_from_file" else 16
    with pytest.raises(StorageBackendError) as exc_info:
        await gcs_adapter.write("t/x.bin", b"d" * size)
    assert not isinstance(exc_info.value, ObjectNotFoundError)
    assert exc_info.value.error_code == "STORAGE_BACKEND_ERROR"


async def test_missing_bucket_is_backend_error_not_object_miss(gcs_adapter, fake_gcs: FakeGCSClient) -> None:
    missing = "The specified bucket does not exist."
    fake_gcs.fail_next["reload"].append(gcs_exceptions.NotFound(missing))
    fake_gcs.fail_next["delete"].append(gcs_exceptions.NotFound(missing))
    fake_gcs.fail_next["download_as_bytes"].append(gcs_exceptions.NotFound(missing))
    with pytest.raises(StorageBackendError):
        await gcs_adapter.get_metadata("t/x.bin")
    with pytest.raises(StorageBackendError):
        await gcs_adapter.delete("t/x.bin")
    with pytest.raises(StorageBackendError) as exc_info:
        await gcs_adapter.read("t/x.bin")
    assert not isinstance(exc_info.value, ObjectNotFoundError)


async def test_list_on_missing_bucket_is_backend_error(gcs_adapter, fake_gcs: FakeGCSClient) -> None:
    fake_gcs.fail_next["list_blobs"].append(gcs_exceptions.NotFound("The specified bucket does not exist."))
    with pytest.raises(StorageBackendError):
        await gcs_adapter.list("t/")


async def test_absent_object_is_still_an_object_miss(gcs_adapter) -> None:
    with pytest.raises(ObjectNotFoundError):
        await gcs_adapter.read("t/absent.bin")
    assert await gcs_adapter.get_metadata("t/absent.bin") is None
    await gcs_adapter.delete("t/absent.bin")


async def test_service_unavailable_is_retryable(gcs_adapter, fake_gcs: FakeGCSClient) -> None:
    fake_gcs.fail_next["download_as_bytes"].append(
        gcs_exceptions.ServiceUnavailable("backend unavailable")
    )
    with pytest.raises(StorageBackendError) as exc_info:
        await gcs_adapter.read("t/x.bin")
    assert exc_info.value.retryable is True
    assert exc_info.value.operation == "read"


async def test_forbidden_is_not_retryable(gcs_adapter, fake_gcs: FakeGCSClient) -> None:
    fake_gcs.fail_next["upload_from_string"].append(gcs_exceptions.Forbidden("denied"))
    with pytest.raises(StorageBackendError) as exc_info:
        await gcs_adapter.write("t/x.bin", b"data")
    assert exc_info.value.retryable is False
    assert isinstance(exc_info.value.cause, gcs_exceptions.Forbidden)


async def test_signed_url_is_v4_get_with_attachment(gcs_adapter) -> None:
    url = await gcs_adapter.signed_read_url(
        "t/a.json.gz", expires_in=timedelta(minutes=10), download_filename="a.json.gz"
    )
    assert "version=v4" in url
    assert "method=GET" in url
    assert "X-Goog-Expires=600" in url
    assert 'attachment; filename="a.json.gz"' in url


async def test_token_only_credentials_cannot_sign() -> None:
    adapter = GCSStorageAdapter(GCSBlobClient(client=FakeGCSClient(can_sign=False)), "b")
    with pytest.raises(NotSupportedByBackendError) as exc_info:
        await adapter.signed_read_url(
            "t/a.json.gz", expires_in=timedelta(minutes=10), download_filename="a.json.gz"
        )
    assert exc_info.value.error_code == "STORAGE_NOT_SUPPORTED"
    assert exc_info.value.backend == "gcs"


def test_client_uses_service_account_info_when_key_given() -> None:
    with patch("lifeline.infrastructure.external.storage.gcs_client.storage.Client") as client_cls:
        GCSBlobClient(project="proj", service_account_json='{"type": "service_account"}').client
    client_cls.from_service_account_info.assert_called_once_with(
        {"type": "service_account"}, project="proj"
    )
    client_cls.assert_not_called()


def test_client_falls_back_to_application_default_credentials() -> None:
    with patch("lifeline.infrastructure.external.storage.gcs_client.storage.Client") as client_cls:
        GCSBlobClient().client
    client_cls.assert_called_once_with()


def test_invalid_key_json_does_not_echo_key_material() -> None:
    client = GCSBlobClient(service_account_json="{not json secret-material")
    with pytest.raises(ValueError) as exc_info:
        client.client
    assert "secret-material" not in str(exc_info.value)
    assert exc_info.value.__cause__ is None
