"""Google Cloud Storage adapter with single-request and resumable uploads."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from datetime import timedelta
from typing import Any, TypeVar

from google.api_core import exceptions as gcs_exceptions
from google.auth.exceptions import TransportError

from lifeline.core.constants import (
    CONTENT_TYPE_METADATA_KEY,
    DEFAULT_CONTENT_TYPE,
    MULTIPART_THRESHOLD_BYTES,
    UPLOAD_PART_SIZE_BYTES,
)
from lifeline.infrastructure.exceptions import (
    NotSupportedByBackendError,
    ObjectNotFoundError,
    StorageBackendError,
    StorageException,
)
from lifeline.infrastructure.external.storage.gcs_client import GCSBlobClient
from lifeline.infrastructure.external.storage.protocol import (
    WriteData,
    content_disposition,
    encode_payload,
    split_metadata,
)
from lifeline.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_RETRYABLE_ERRORS = (
    gcs_exceptions.TooManyRequests,
    gcs_exceptions.InternalServerError,
    gcs_exceptions.BadGateway,
    gcs_exceptions.ServiceUnavailable,
    gcs_exceptions.GatewayTimeout,
    TransportError,
    ConnectionError,
    TimeoutError,
)


# Operations addressing one existing object; a 404 anywhere else is not a miss.
_OBJECT_OPERATIONS = frozenset({"read", "exists", "get_metadata", "copy", "delete"})


def _is_not_found(exc: BaseException, operation: str) -> bool:
    """True when exc means the object is absent.

    A missing bucket also answers 404 but is a configuration failure,
    not an object miss.
    """
    if operation not in _OBJECT_OPERATIONS:
        return False
    if not isinstance(exc, gcs_exceptions.GoogleAPICallError) or exc.code != 404:
        return False
    return "bucket does not exist" not in str(exc.message).lower()


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, _RETRYABLE_ERRORS)


def _cannot_sign(exc: BaseException | None) -> bool:
    """True when the credentials are token-only (e.g. ADC on Cloud Run) and cannot sign URLs."""
    return isinstance(exc, AttributeError) and "private key" in str(exc)


class GCSStorageAdapter:
    """StorageAdapter over one GCS bucket.

    Payloads above MULTIPART_THRESHOLD_BYTES use a resumable upload sent in
    UPLOAD_PART_SIZE_BYTES chunks (a multiple of GCS's 256 KiB unit); smaller
    payloads go in one request. Blocking client calls run via asyncio.to_thread.
    """

    backend_name = "gcs"

    def __init__(self, client: GCSBlobClient, bucket: str) -> None:
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
            if _is_not_found(e, operation):
                raise ObjectNotFoundError(path) from e
            logger.error(
                "GCS %s failed for %s: %s", operation, path, type(e).__name__
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
        """Single-request upload up to the threshold, resumable above it."""
        body = encode_payload(data)
        content_type, user_meta = split_metadata(
            metadata, CONTENT_TYPE_METADATA_KEY, DEFAULT_CONTENT_TYPE
        )
        if len(body) > MULTIPART_THRESHOLD_BYTES:
            await self._run(
                "write",
                path,
                self._client.upload_resumable,
                self.bucket,
                path,
                body,
                content_type,
                user_meta,
                UPLOAD_PART_SIZE_BYTES,
            )
        else:
            await self._run(
                "write",
                path,
                self._client.upload_bytes,
                self.bucket,
                path,
                body,
                content_type,
                user_meta,
            )
        logger.debug("Wrote %s (%d bytes)", path, len(body))

    async def read(self, path: str) -> bytes:
        return await self._run(
            "read", path, self._client.download_bytes, self.bucket, path
        )

    async def list(self, prefix: str) -> list[str]:
        return await self._run(
            "list", prefix, self._client.list_names, self.bucket, prefix
        )

    async def delete(self, path: str) -> None:
        """Delete path; GCS answers 404 for absent objects, which is swallowed."""
        try:
            await self._run("delete", path, self._client.delete, self.bucket, path)
        except ObjectNotFoundError:
            logger.debug("Delete of absent object %s ignored", path)

    async def exists(self, path: str) -> bool:
        return await self._run("exists", path, self._client.exists, self.bucket, path)

    async def get_metadata(self, path: str) -> dict[str, str] | None:
        """User metadata plus content-type, or None if the object is absent."""
        try:
            user_meta, content_type = await self._run(
                "get_metadata", path, self._client.reload, self.bucket, path
            )
        except ObjectNotFoundError:
            return None
        result = {k.lower(): str(v) for k, v in user_meta.items()}
        if content_type:
            result[CONTENT_TYPE_METADATA_KEY] = content_type
        return result

    async def copy(self, src_path: str, dest_path: str) -> None:
        """Server-side rewrite within the bucket; missing source raises ObjectNotFoundError."""
        await self._run(
            "copy", src_path, self._client.copy, self.bucket, src_path, dest_path
        )

    async def signed_read_url(
        self,
        path: str,
        *,
        expires_in: timedelta,
        download_filename: str,
    ) -> str:
        """V4 signed GET URL with response-content-disposition set to attachment.

        Raises:
            NotSupportedByBackendError: Credentials cannot sign (token-only ADC).
        """
        try:
            return await self._run(
                "signed_read_url",
                path,
                self._client.signed_get_url,
                self.bucket,
                path,
                expires_in,
                content_disposition(download_filename),
            )
        except StorageBackendError as e:
            if _cannot_sign(e.cause):
                raise NotSupportedByBackendError(
                    "signed_read_url", self.backend_name
                ) from e.cause
            raise
