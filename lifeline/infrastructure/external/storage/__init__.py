"""Storage: S3-compatible (S3, R2) and Google Cloud Storage backends.

StorageAdapterFactory builds the adapter for a provider config and owns the
native client cache. Every implementation satisfies StorageAdapter (write,
read, list, delete, exists, get_metadata, copy, signed_read_url).
"""

from lifeline.infrastructure.external.storage.client_cache import (
    ClientCache,
    ClientCacheKey,
)
from lifeline.infrastructure.external.storage.factory import StorageAdapterFactory
from lifeline.infrastructure.external.storage.gcs_storage import GCSStorageAdapter
from lifeline.infrastructure.external.storage.protocol import StorageAdapter
from lifeline.infrastructure.external.storage.redundant_storage import (
    RedundantStorageAdapter,
    Replica,
)
from lifeline.infrastructure.external.storage.s3_storage import S3StorageAdapter

__all__ = [
    "ClientCache",
    "ClientCacheKey",
    "GCSStorageAdapter",
    "RedundantStorageAdapter",
    "Replica",
    "S3StorageAdapter",
    "StorageAdapter",
    "StorageAdapterFactory",
]
