"""Provider validation: prove a tenant bucket accepts writes, reads and deletes."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from lifeline.application.interfaces.repositories import (
    IStorageProviderConfigRepository,
)
from lifeline.application.services.adapter_resolver import StorageAdapterResolver
from lifeline.core.constants import VALIDATION_OBJECT_PREFIX, VALIDATION_PING_CONTENT
from lifeline.domain.entities.storage_provider import StorageProviderConfig
from lifeline.domain.enums import ValidationStatus
from lifeline.domain.exceptions import LifelineException, ResourceNotFoundException
from lifeline.infrastructure.exceptions import StorageException
from lifeline.infrastructure.external.storage.protocol import StorageAdapter
from lifeline.shared.telemetry.logging import get_logger
from lifeline.shared.utils.datetime import utc_now

logger = get_logger(__name__)

CONTENT_MISMATCH_MSG = "Content mismatch during validation read"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validation run; error is a user-safe message."""

    config_id: str
    status: ValidationStatus
    error: str | None = None


class ProviderValidationService:
    """Runs the write / read-back / delete probe against a provider config."""

    def __init__(
        self,
        repository: IStorageProviderConfigRepository,
        resolver: StorageAdapterResolver,
    ) -> None:
        self.repository = repository
        self.resolver = resolver

    async def validate(self, owner_id: str, config_id: str) -> ValidationResult:
        """Validate the owner's config and persist the result.

        Status goes to pending first, then success or error. Storage, type
        and credential failures are recorded, not raised.

        Raises:
            ResourceNotFoundException: No such config for the owner.
        """
        config = await self.repository.get(owner_id, config_id)
        if config is None:
            raise ResourceNotFoundException("storage_provider_config", config_id)

        config.record_validation(ValidationStatus.PENDING)
        await self._persist(owner_id, config_id, ValidationStatus.PENDING, None)

        error = await self._probe(config)
        status = ValidationStatus.ERROR if error else ValidationStatus.SUCCESS
        config.record_validation(status, error)
        await self._persist(owner_id, config_id, status, error)
        if error:
            logger.warning("Validation failed for provider config %s: %s", config_id, error)
        else:
            logger.info("Validation succeeded for provider config %s", config_id)
        return ValidationResult(config_id=config_id, status=status, error=error)

    async def _probe(self, config: StorageProviderConfig) -> str | None:
        """Return None on success, else the failure message."""
        key = f"{VALIDATION_OBJECT_PREFIX}{config.id}-{uuid.uuid4()}.txt"
        adapter: StorageAdapter | None = None
        left_behind = False
        try:
            adapter = self.resolver.resolve(config, require_enabled=False)
            await adapter.write(key, VALIDATION_PING_CONTENT, {"content-type": "text/plain"})
            left_behind = True
            content = await adapter.read(key)
            await adapter.delete(key)
            left_behind = False
        except LifelineException as e:
            return e.message
        finally:
            if left_behind and adapter is not None:
                await self._discard(adapter, key)
        if content != VALIDATION_PING_CONTENT:
            return CONTENT_MISMATCH_MSG
        return None

    async def _discard(self, adapter: StorageAdapter, key: str) -> None:
        """Best-effort removal of a ping object a failed run left behind."""
        try:
            await adapter.delete(key)
        except StorageException as e:
            logger.warning("Could not remove validation object %s: %s", key, e.error_code)

    async def _persist(
        self,
        owner_id: str,
        config_id: str,
        status: ValidationStatus,
        error: str | None,
    ) -> None:
        await self.repository.update_validation(
            owner_id,
            config_id,
            status=status,
            error=error,
            validated_at=utc_now(),
        )
