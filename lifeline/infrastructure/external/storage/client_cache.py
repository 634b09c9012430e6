"""Process-local cache of native blob clients, keyed by provider config identity.

One long-lived client per provider config avoids reconnect and credential
resolution overhead. The key always includes the provider config id, so two
tenants whose buckets happen to share a name never share a client.
"""

from __future__ import annotations

import hashlib
import threading
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from lifeline.domain.entities.storage_provider import (
    ProviderCredentials,
    StorageProviderConfig,
)
from lifeline.domain.enums import ProviderType
from lifeline.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def credential_fingerprint(credentials: ProviderCredentials | None) -> str:
    """Short one-way digest so rotated credentials map to a new client.

    Empty string when no explicit credentials (ambient/ADC) are used.
    """
    if credentials is None or credentials.is_empty:
        return ""
    digest = hashlib.sha256(
        f"{credentials.access_key_id}\0{credentials.secret_access_key}".encode()
    )
    return digest.hexdigest()[:16]


@dataclass(frozen=True)
class ClientCacheKey:
    """Full identity of a native client: config id plus every connection setting."""

    provider_config_id: str
    provider_type: ProviderType
    adapter_version: int
    bucket: str
    region: str | None
    endpoint: str | None
    force_path_style: bool | None
    credential_fingerprint: str

    @classmethod
    def for_config(
        cls,
        config: StorageProviderConfig,
        provider_type: ProviderType,
        credentials: ProviderCredentials | None,
    ) -> ClientCacheKey:
        return cls(
            provider_config_id=config.id,
            provider_type=provider_type,
            adapter_version=config.adapter_version,
            bucket=config.bucket,
            region=config.region,
            endpoint=config.endpoint,
            force_path_style=config.force_path_style,
            credential_fingerprint=credential_fingerprint(credentials),
        )


class ClientCache:
    """Thread-safe bounded LRU of blob clients.

    Read-mostly: lookups and inserts take a short lock; client construction
    itself is lazy inside the blob client, so holding the lock while calling
    the builder never performs network I/O.
    """

    def __init__(self, max_entries: int = 64) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._entries: OrderedDict[ClientCacheKey, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get_or_create(self, key: ClientCacheKey, builder: Callable[[], Any]) -> Any:
        """Return the cached client for key, building and storing it on a miss.

        A miss for a config id that already has entries (settings or
        credentials changed) drops the stale entries for that id.
        """
        with self._lock:
            client = self._entries.get(key)
            if client is not None:
                self._entries.move_to_end(key)
                return client
            stale = [
                k for k in self._entries if k.provider_config_id == key.provider_config_id
            ]
            for k in stale:
                del self._entries[k]
            client = builder()
            self._entries[key] = client
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted storage client for %s", evicted.provider_config_id)
        if stale:
            logger.info(
                "Replaced storage client for provider config %s", key.provider_config_id
            )
        return client

    def evict(self, provider_config_id: str) -> int:
        """Drop every client for a provider config. Returns how many were removed."""
        with self._lock:
            keys = [
                k for k in self._entries if k.provider_config_id == provider_config_id
            ]
            for k in keys:
                del self._entries[k]
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
