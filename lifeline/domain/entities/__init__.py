"""Domain entities."""

from lifeline.domain.entities.storage_provider import (
    ProviderCredentials,
    StorageProviderConfig,
)

__all__ = ["ProviderCredentials", "StorageProviderConfig"]
