"""Storage adapter protocol (DIP). Implementations: S3StorageAdapter, GCSStorageAdapter, RedundantStorageAdapter."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Protocol

# Accepted write payloads; str is encoded as UTF-8.
WriteData = bytes | bytearray | memoryview | str


class StorageAdapter(Protocol):
    """One contract over every blob backend.

    Errors: absent objects raise ObjectNotFoundError, everything else
    StorageBackendError (or NotSupportedByBackendError). Callers never see
    backend SDK exceptions.
    """

    async def write(
        self,
        path: str,
        data: WriteData,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        """Store data at path. Payloads over 5 MiB use multipart/resumable upload."""
        ...

    async def read(self, path: str) -> bytes:
        """Return the full object content. Raises ObjectNotFoundError if absent."""
        ...

    async def list(self, prefix: str) -> list[str]:
        """Return object paths under prefix. Order is backend-defined."""
        ...

    async def delete(self, path: str) -> None:
        """Delete path. Deleting an absent object is not an error."""
        ...

    async def exists(self, path: str) -> bool:
        """Metadata-only existence probe."""
        ...

    async def get_metadata(self, path: str) -> dict[str, str] | None:
        """Return object metadata, or None when the object is absent."""
        ...

    async def copy(self, src_path: str, dest_path: str) -> None:
        """Server-side copy. Raises ObjectNotFoundError if src_path is absent."""
        ...

    async def signed_read_url(
        self,
        path: str,
        *,
        expires_in: timedelta,
        download_filename: str,
    ) -> str:
        """Return a pre-signed, read-only GET URL that downloads as an attachment."""
        ...


def encode_payload(data: WriteData) -> bytes:
    """Normalize a write payload to bytes."""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def split_metadata(
    metadata: Mapping[str, str] | None,
    content_type_key: str,
    default_content_type: str,
) -> tuple[str, dict[str, str]]:
    """Split caller metadata into (content type, user metadata).

    User metadata keys are lowercased with underscores as dashes, matching
    what S3 returns on read, so both backends report identical keys.
    """
    content_type = default_content_type
    user_meta: dict[str, str] = {}
    for key, value in (metadata or {}).items():
        normalized = key.lower().replace("_", "-")
        if normalized == content_type_key:
            content_type = str(value)
        else:
            user_meta[normalized] = str(value)
    return content_type, user_meta


def content_disposition(filename: str) -> str:
    """Attachment Content-Disposition header value for a download filename."""
    safe = filename.replace("\\", "").replace('"', "")
    return f'attachment; filename="{safe}"'
