"""Repository interfaces (ports) for the application layer.

Provider configs are persisted by the account store, which lives outside
this package; it implements this protocol.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from lifeline.domain.entities.storage_provider import StorageProviderConfig
from lifeline.domain.enums import ValidationStatus


class IStorageProviderConfigRepository(Protocol):
    """Protocol for storage provider config repository (DIP)."""

    async def get(self, owner_id: str, config_id: str) -> StorageProviderConfig | None:
        """Return the owner's config by id, or None."""

    async def list_for_owner(self, owner_id: str) -> list[StorageProviderConfig]:
        """Return every config of the owner, enabled or not."""

    async def update_validation(
        self,
        owner_id: str,
        config_id: str,
        *,
        status: ValidationStatus,
        error: str | None,
        validated_at: datetime,
    ) -> None:
        """Persist the outcome of a validation run."""
