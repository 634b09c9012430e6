"""Resolve stored provider configs into ready-to-use storage adapters.

The only place where stored ciphertext meets the adapter factory: credentials
are decrypted here, handed to the factory, and never kept.
"""

from __future__ import annotations

from collections.abc import Iterable

from lifeline.domain.entities.storage_provider import StorageProviderConfig
from lifeline.domain.exceptions import LifelineException, StorageProviderDisabledError
from lifeline.infrastructure.external.storage.factory import StorageAdapterFactory
from lifeline.infrastructure.external.storage.protocol import StorageAdapter
from lifeline.infrastructure.external.storage.redundant_storage import (
    RedundantStorageAdapter,
    Replica,
)
from lifeline.infrastructure.security.encryption import CredentialEncryptor
from lifeline.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class StorageAdapterResolver:
    """Builds adapters for tenant provider configs."""

    def __init__(
        self,
        factory: StorageAdapterFactory,
        encryptor: CredentialEncryptor,
    ) -> None:
        self.factory = factory
        self.encryptor = encryptor

    def resolve(
        self,
        config: StorageProviderConfig,
        *,
        require_enabled: bool = True,
    ) -> StorageAdapter:
        """Decrypt the config's credentials and build its adapter.

        Args:
            config: Stored provider config.
            require_enabled: Reject disabled configs (validation runs pass False).

        Raises:
            StorageProviderDisabledError: Config disabled and require_enabled set.
            UnsupportedProviderTypeError: Unknown config type.
            CredentialException: Stored credentials cannot be decrypted.
        """
        if require_enabled and not config.is_enabled:
            raise StorageProviderDisabledError(config.id)
        # Fail on unknown types before touching credentials.
        self.factory.parse_provider_type(config.type)
        credentials = self.encryptor.decrypt_config_credentials(config)
        return self.factory.create_adapter(config, credentials)

    def resolve_replicated(
        self,
        primary: StorageAdapter,
        configs: Iterable[StorageProviderConfig],
    ) -> RedundantStorageAdapter:
        """Wrap primary with one replica per enabled tenant config.

        A config that cannot be resolved is skipped with a warning so one
        broken tenant bucket never blocks the primary store.
        """
        replicas: list[Replica] = []
        for config in configs:
            if not config.is_enabled:
                continue
            try:
                adapter = self.resolve(config)
            except LifelineException as e:
                logger.warning(
                    "Skipping replica for provider config %s: %s",
                    config.id,
                    e.error_code,
                )
                continue
            replicas.append(
                Replica(adapter=adapter, mode=config.replication_mode, name=config.id)
            )
        return RedundantStorageAdapter(primary, replicas)
