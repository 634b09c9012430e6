"""Google Cloud Storage blob client.

Owns one lazily-built google.cloud.storage.Client and the raw calls the
adapter needs. Errors are left as google.api_core exceptions; the adapter
classifies them. All methods are blocking and meant to run via
asyncio.to_thread.
"""

from __future__ import annotations

import io
import json
import threading
from datetime import timedelta
from typing import Any

from google.cloud import storage


class GCSBlobClient:
    """Thin wrapper over a google-cloud-storage client.

    Credentials: a service account key (JSON string) when given, otherwise
    Application Default Credentials (Workload Identity, gcloud auth, or
    GOOGLE_APPLICATION_CREDENTIALS).
    """

    def __init__(
        self,
        *,
        project: str | None = None,
        service_account_json: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.project = project
        self._service_account_json = service_account_json
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> Any:
        """The storage client, built once (thread-safe)."""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = self._build_client()
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def _build_client(self) -> Any:
        kwargs: dict[str, Any] = {}
        if self.project:
            kwargs["project"] = self.project
        if self._service_account_json:
            try:
                info = json.loads(self._service_account_json)
            except json.JSONDecodeError:
                # JSONDecodeError.doc holds the key material; do not chain it.
                raise ValueError("Invalid service account key JSON") from None
            return storage.Client.from_service_account_info(info, **kwargs)
        return storage.Client(**kwargs)

    def _blob(self, bucket: str, name: str, chunk_size: int | None = None) -> Any:
        return self.client.bucket(bucket).blob(name, chunk_size=chunk_size)

    def upload_bytes(
        self,
        bucket: str,
        name: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        """Single-request upload."""
        blob = self._blob(bucket, name)
        blob.metadata = metadata or None
        blob.upload_from_string(data, content_type=content_type)

    def upload_resumable(
        self,
        bucket: str,
        name: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str],
        chunk_size: int,
    ) -> None:
        """Resumable upload sent in chunk_size requests.

        No size is passed: the library sends any upload with a known size up to
        8 MiB as one multipart request, whatever chunk_size says.
        """
        blob = self._blob(bucket, name, chunk_size=chunk_size)
        blob.metadata = metadata or None
        blob.upload_from_file(io.BytesIO(data), content_type=content_type)

    def download_bytes(self, bucket: str, name: str) -> bytes:
        return self._blob(bucket, name).download_as_bytes()

    def reload(self, bucket: str, name: str) -> tuple[dict[str, str], str | None]:
        """Fetch object metadata only. Returns (user metadata, content type)."""
        blob = self._blob(bucket, name)
        blob.reload()
        return dict(blob.metadata or {}), blob.content_type

    def exists(self, bucket: str, name: str) -> bool:
        return bool(self._blob(bucket, name).exists())

    def list_names(self, bucket: str, prefix: str) -> list[str]:
        """All object names under prefix; the iterator follows page tokens."""
        return [blob.name for blob in self.client.list_blobs(bucket, prefix=prefix)]

    def delete(self, bucket: str, name: str) -> None:
        self._blob(bucket, name).delete()

    def copy(self, bucket: str, src_name: str, dest_name: str) -> None:
        source_bucket = self.client.bucket(bucket)
        source_bucket.copy_blob(
            source_bucket.blob(src_name),
            source_bucket,
            new_name=dest_name,
        )

    def signed_get_url(
        self,
        bucket: str,
        name: str,
        expires_in: timedelta,
        response_disposition: str,
    ) -> str:
        """V4 signed GET URL. Needs credentials with a private key or signBlob access."""
        return self._blob(bucket, name).generate_signed_url(
            version="v4",
            expiration=expires_in,
            method="GET",
            response_disposition=response_disposition,
        )
