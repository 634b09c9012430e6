"""Storage adapter factory: builds the adapter for a provider config.

Dispatch is over the closed ProviderType set. Unknown types fail before any
client is constructed, so a future provider type can never fall back to a
wrong adapter. This module never decrypts: callers pass plaintext
ProviderCredentials (see application.services.adapter_resolver).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from lifeline.domain.entities.storage_provider import (
    ProviderCredentials,
    StorageProviderConfig,
)
from lifeline.domain.enums import ProviderType
from lifeline.domain.exceptions import ValidationException
from lifeline.infrastructure.exceptions import UnsupportedProviderTypeError
from lifeline.infrastructure.external.storage.client_cache import (
    ClientCache,
    ClientCacheKey,
)
from lifeline.infrastructure.external.storage.gcs_client import GCSBlobClient
from lifeline.infrastructure.external.storage.gcs_storage import GCSStorageAdapter
from lifeline.infrastructure.external.storage.protocol import StorageAdapter
from lifeline.infrastructure.external.storage.s3_client import S3BlobClient
from lifeline.infrastructure.external.storage.s3_storage import S3StorageAdapter
from lifeline.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _s3_client(
    config: StorageProviderConfig, credentials: ProviderCredentials | None
) -> S3BlobClient:
    creds = credentials or ProviderCredentials()
    return S3BlobClient(
        region=config.region,
        endpoint_url=config.endpoint,
        force_path_style=config.force_path_style,
        access_key_id=creds.access_key_id or None,
        secret_access_key=creds.secret_access_key or None,
    )


def _r2_client(
    config: StorageProviderConfig, credentials: ProviderCredentials | None
) -> S3BlobClient:
    """R2 speaks the S3 API; it only differs in needing an account endpoint."""
    if not config.endpoint:
        raise ValidationException(
            "endpoint is required for r2 storage providers", field="endpoint"
        )
    return _s3_client(config, credentials)


def _gcs_client(
    config: StorageProviderConfig, credentials: ProviderCredentials | None
) -> GCSBlobClient:
    creds = credentials or ProviderCredentials()
    return GCSBlobClient(
        project=creds.access_key_id or None,
        service_account_json=creds.secret_access_key or None,
    )


class StorageAdapterFactory:
    """Factory for storage adapters, owning the native client cache.

    Adapters are cheap and created per call (one per request/job); the
    native clients behind them are cached per provider config identity.
    """

    _backends: ClassVar[
        dict[
            ProviderType,
            tuple[
                Callable[[StorageProviderConfig, ProviderCredentials | None], Any],
                Callable[[Any, str], StorageAdapter],
            ],
        ]
    ] = {
        ProviderType.S3: (_s3_client, S3StorageAdapter),
        ProviderType.R2: (_r2_client, S3StorageAdapter),
        ProviderType.GCS: (_gcs_client, GCSStorageAdapter),
    }

    def __init__(self, cache: ClientCache | None = None) -> None:
        self.cache = cache if cache is not None else ClientCache()

    @classmethod
    def parse_provider_type(cls, raw_type: str) -> ProviderType:
        """Map a stored type string onto ProviderType.

        Raises:
            UnsupportedProviderTypeError: Value outside the closed set.
        """
        try:
            provider_type = ProviderType(str(raw_type).strip().lower())
        except ValueError:
            raise UnsupportedProviderTypeError(
                str(raw_type), cls.list_supported_types()
            ) from None
        if provider_type not in cls._backends:
            raise UnsupportedProviderTypeError(
                provider_type.value, cls.list_supported_types()
            )
        return provider_type

    def create_adapter(
        self,
        config: StorageProviderConfig,
        credentials: ProviderCredentials | None = None,
    ) -> StorageAdapter:
        """Create an adapter bound to config.bucket and the given credentials.

        Args:
            config: Provider config (type, bucket, region, endpoint, path style).
            credentials: Decrypted credentials; None uses ambient credentials.

        Returns:
            S3StorageAdapter (s3, r2) or GCSStorageAdapter (gcs).

        Raises:
            UnsupportedProviderTypeError: Unknown config.type; no client is built.
            ValidationException: Config missing a setting its type requires.
        """
        provider_type = self.parse_provider_type(config.type)
        build_client, adapter_cls = self._backends[provider_type]
        key = ClientCacheKey.for_config(config, provider_type, credentials)
        client = self.cache.get_or_create(
            key, lambda: build_client(config, credentials)
        )
        logger.debug(
            "Created %s adapter for provider config %s",
            provider_type.value,
            config.id,
        )
        return adapter_cls(client, config.bucket)

    def evict(self, provider_config_id: str) -> int:
        """Forget cached clients for a provider config (e.g. after disable)."""
        return self.cache.evict(provider_config_id)

    @classmethod
    def list_supported_types(cls) -> list[str]:
        """Return supported provider type values."""
        return [t.value for t in cls._backends]
