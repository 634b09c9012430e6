"""S3-compatible storage adapter (AWS S3, Cloudflare R2, MinIO) with size-based upload strategy."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from datetime import timedelta
from typing import Any, TypeVar

from botocore.exceptions import ClientError
from botocore.exceptions import ConnectionError as BotoConnectionError

from lifeline.core.constants import (
    CONTENT_TYPE_METADATA_KEY,
    DEFAULT_CONTENT_TYPE,
    MULTIPART_THRESHOLD_BYTES,
    UPLOAD_PART_SIZE_BYTES,
)
from lifeline.infrastructure.exceptions import (
    ObjectNotFoundError,
    StorageBackendError,
    StorageException,
)
from lifeline.infrastructure.external.storage.protocol import (
    WriteData,
    content_disposition,
    encode_payload,
    split_metadata,
)
from lifeline.infrastructure.external.storage.s3_client import S3BlobClient
from lifeline.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
_RETRYABLE_CODES = frozenset(
    {"RequestTimeout", "SlowDown", "InternalError", "ServiceUnavailable", "Throttling"}
)


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def _status_code(exc: ClientError) -> int | None:
    return exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def _is_not_found(exc: BaseException) -> bool:
    """True when exc means the object key is absent.

    A missing bucket also answers 404 but is a configuration failure,
    not an object miss.
    """
    if not isinstance(exc, ClientError):
        return False
    code = _error_code(exc)
    if code == "NoSuchBucket":
        return False
    return code in _NOT_FOUND_CODES or _status_code(exc) == 404


def _is_retryable(exc: BaseException) -> bool:
    """True for throttling, 5xx and connection-level failures."""
    if isinstance(exc, ClientError):
        status = _status_code(exc) or 0
        return _error_code(exc) in _RETRYABLE_CODES or status >= 500
    return isinstance(exc, (BotoConnectionError, ConnectionError, TimeoutError))


class S3StorageAdapter:
    """StorageAdapter over one S3-compatible bucket.

    Payloads above MULTIPART_THRESHOLD_BYTES go through an explicit multipart
    upload in UPLOAD_PART_SIZE_BYTES parts so no single request exceeds the
    part size; smaller payloads use a single PutObject. Blocking boto3 calls
    run via asyncio.to_thread.
    """

    backend_name = "s3"

    def __init__(self, client: S3BlobClient, bucket: str) -> None:
        self._client = client
        self.bucket = bucket

    async def _run(
        self,
        operation: str,
        path: str,
        func: Callable[..., T],
        *args: Any,
    ) -> T:
        """Run a blocking call in a thread and normalize its errors."""
        try:
            return await asyncio.to_thread(func, *args)
        except StorageException:
            raise
        except Exception as e:
            if _is_not_found(e):
                raise ObjectNotFoundError(path) from e
            logger.error(
                "S3 %s failed for %s: %s", operation, path, type(e).__name__
            )
            raise StorageBackendError(
                operation, path, e, retryable=_is_retryable(e)
            ) from e

    async def write(
        self,
        path: str,
        data: WriteData,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        """Single PutObject up to the threshold, multipart above it."""
        body = encode_payload(data)
        content_type, user_meta = split_metadata(
            metadata, CONTENT_TYPE_METADATA_KEY, DEFAULT_CONTENT_TYPE
        )
        if len(body) > MULTIPART_THRESHOLD_BYTES:
            await self._multipart_upload(path, body, content_type, user_meta)
        else:
            await self._run(
                "write",
                path,
                self._client.put_object,
                self.bucket,
                path,
                body,
                content_type,
                user_meta,
            )
        logger.debug("Wrote %s (%d bytes)", path, len(body))

    async def _multipart_upload(
        self,
        path: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        """Upload body in parts; abort the session if a backend call fails.

        Cancellation leaves the session open; bucket lifecycle rules reclaim
        incomplete multipart uploads.
        """
        upload_id = await self._run(
            "write",
            path,
            self._client.create_multipart_upload,
            self.bucket,
            path,
            content_type,
            metadata,
        )
        view = memoryview(body)
        parts: list[dict[str, Any]] = []
        try:
            for part_number, offset in enumerate(
                range(0, len(body), UPLOAD_PART_SIZE_BYTES), start=1
            ):
                chunk = bytes(view[offset : offset + UPLOAD_PART_SIZE_BYTES])
                etag = await self._run(
                    "write",
                    path,
                    self._client.upload_part,
                    self.bucket,
                    path,
                    upload_id,
                    part_number,
                    chunk,
                )
                parts.append({"ETag": etag, "PartNumber": part_number})
            await self._run(
                "write",
                path,
                self._client.complete_multipart_upload,
                self.bucket,
                path,
                upload_id,
                parts,
            )
        except StorageException:
            await self._abort_multipart(path, upload_id)
            raise
        logger.debug("Multipart upload of %s completed in %d parts", path, len(parts))

    async def _abort_multipart(self, path: str, upload_id: str) -> None:
        try:
            await self._run(
                "abort_multipart",
                path,
                self._client.abort_multipart_upload,
                self.bucket,
                path,
                upload_id,
            )
        except StorageException as e:
            logger.warning("Could not abort multipart upload for %s: %s", path, e.message)

    async def read(self, path: str) -> bytes:
        return await self._run(
            "read", path, self._client.get_object_bytes, self.bucket, path
        )

    async def list(self, prefix: str) -> list[str]:
        return await self._run(
            "list", prefix, self._client.list_keys, self.bucket, prefix
        )

    async def delete(self, path: str) -> None:
        """Delete path; an already-absent object is not an error."""
        try:
            await self._run(
                "delete", path, self._client.delete_object, self.bucket, path
            )
        except ObjectNotFoundError:
            logger.debug("Delete of absent object %s ignored", path)

    async def exists(self, path: str) -> bool:
        try:
            await self._run("exists", path, self._client.head_object, self.bucket, path)
        except ObjectNotFoundError:
            return False
        return True

    async def get_metadata(self, path: str) -> dict[str, str] | None:
        """User metadata plus content-type, or None if the object is absent."""
        try:
            head = await self._run(
                "get_metadata", path, self._client.head_object, self.bucket, path
            )
        except ObjectNotFoundError:
            return None
        result = {k.lower(): str(v) for k, v in (head.get("Metadata") or {}).items()}
        if head.get("ContentType"):
            result[CONTENT_TYPE_METADATA_KEY] = head["ContentType"]
        return result

    async def copy(self, src_path: str, dest_path: str) -> None:
        """Server-side CopyObject; a missing source raises ObjectNotFoundError(src_path)."""
        await self._run(
            "copy",
            src_path,
            self._client.copy_object,
            self.bucket,
            src_path,
            dest_path,
        )

    async def signed_read_url(
        self,
        path: str,
        *,
        expires_in: timedelta,
        download_filename: str,
    ) -> str:
        """Presigned GetObject URL with an attachment Content-Disposition override."""
        return await self._run(
            "signed_read_url",
            path,
            self._client.presign_get,
            self.bucket,
            path,
            int(expires_in.total_seconds()),
            content_disposition(download_filename),
        )
