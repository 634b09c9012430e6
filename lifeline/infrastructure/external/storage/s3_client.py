"""S3-compatible blob client (AWS S3, Cloudflare R2, MinIO).

Owns one lazily-built boto3 client and the raw calls the adapter needs.
No error translation happens here; S3StorageAdapter classifies botocore
errors. All methods are blocking and meant to run via asyncio.to_thread.
"""

from __future__ import annotations

import threading
from typing import Any

import boto3
from botocore.config import Config


class S3BlobClient:
    """Thin wrapper over a boto3 S3 client.

    Overrides (region, endpoint, path style, credentials) are passed to boto3
    only when explicitly set, so boto3's own resolution (env, profile, IAM
    role, default signing) applies otherwise.
    """

    def __init__(
        self,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        force_path_style: bool | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Store connection settings; the boto3 client is built on first use.

        Args:
            region: Region name; boto3 default resolution when None.
            endpoint_url: Custom endpoint (R2, MinIO); AWS when None.
            force_path_style: True for path-style, False for virtual-hosted;
                boto3 auto when None.
            access_key_id: Access key; env/IAM when not set.
            secret_access_key: Secret key.
            client: Pre-built client (tests, shared sessions).
        """
        self.region = region
        self.endpoint_url = endpoint_url
        self.force_path_style = force_path_style
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> Any:
        """The boto3 client, built once (thread-safe)."""
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
        if self.region:
            kwargs["region_name"] = self.region
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if self._access_key_id and self._secret_access_key:
            kwargs["aws_access_key_id"] = self._access_key_id
            kwargs["aws_secret_access_key"] = self._secret_access_key
        if self.force_path_style is not None:
            style = "path" if self.force_path_style else "virtual"
            kwargs["config"] = Config(s3={"addressing_style": style})
        return boto3.client("s3", **kwargs)

    def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
        metadata: dict[str, str],
    ) -> None:
        self.client.put_object(
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            Metadata=metadata,
        )

    def get_object_bytes(self, bucket: str, key: str) -> bytes:
        response = self.client.get_object(Bucket=bucket, Key=key)
        body = response["Body"]
        try:
            return body.read()
        finally:
            body.close()

    def head_object(self, bucket: str, key: str) -> dict[str, Any]:
        return self.client.head_object(Bucket=bucket, Key=key)

    def list_keys(self, bucket: str, prefix: str) -> list[str]:
        """All keys under prefix, following continuation tokens to the end."""
        keys: list[str] = []
        params: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}
        while True:
            response = self.client.list_objects_v2(**params)
            keys.extend(obj["Key"] for obj in response.get("Contents", []) if obj.get("Key"))
            if not response.get("IsTruncated"):
                return keys
            params["ContinuationToken"] = response["NextContinuationToken"]

    def delete_object(self, bucket: str, key: str) -> None:
        self.client.delete_object(Bucket=bucket, Key=key)

    def copy_object(self, bucket: str, src_key: str, dest_key: str) -> None:
        self.client.copy_object(
            Bucket=bucket,
            Key=dest_key,
            CopySource={"Bucket": bucket, "Key": src_key},
        )

    def create_multipart_upload(
        self,
        bucket: str,
        key: str,
        content_type: str,
        metadata: dict[str, str],
    ) -> str:
        response = self.client.create_multipart_upload(
            Bucket=bucket,
            Key=key,
            ContentType=content_type,
            Metadata=metadata,
        )
        return response["UploadId"]

    def upload_part(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        body: bytes,
    ) -> str:
        response = self.client.upload_part(
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            PartNumber=part_number,
            Body=body,
        )
        return response["ETag"]

    def complete_multipart_upload(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        parts: list[dict[str, Any]],
    ) -> None:
        self.client.complete_multipart_upload(
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            MultipartUpload={"Parts": parts},
        )

    def abort_multipart_upload(self, bucket: str, key: str, upload_id: str) -> None:
        self.client.abort_multipart_upload(Bucket=bucket, Key=key, UploadId=upload_id)

    def presign_get(
        self,
        bucket: str,
        key: str,
        expires_in: int,
        response_content_disposition: str,
    ) -> str:
        return self.client.generate_presigned_url(
            ClientMethod="get_object",
            Params={
                "Bucket": bucket,
                "Key": key,
                "ResponseContentDisposition": response_content_disposition,
            },
            ExpiresIn=expires_in,
        )
