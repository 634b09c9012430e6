"""Domain enumerations for storage provider configuration.

Enums represent closed sets of domain values. Persisted records store the
string value; parsing back goes through the enum so unknown values fail.
"""

from enum import Enum


class ProviderType(str, Enum):
    """Backend family of a storage provider config.

    Closed set: the adapter factory has one builder per member and rejects
    anything else, so a new backend is an explicit extension.
    """

    S3 = "s3"
    R2 = "r2"
    GCS = "gcs"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid provider type values as strings."""
        return [member.value for member in cls]


class ReplicationMode(str, Enum):
    """How a tenant bucket follows the primary snapshot store.

    MIRROR replicates writes and deletes; ARCHIVE replicates writes only and
    keeps objects the primary deletes.
    """

    MIRROR = "mirror"
    ARCHIVE = "archive"


class ValidationStatus(str, Enum):
    """Result of the last provider validation run."""

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"
