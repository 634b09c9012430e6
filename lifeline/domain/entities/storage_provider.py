"""Storage provider config domain entity.

A tenant-owned record describing which external bucket and credentials to
use. Persisted by the account store (outside this package); credentials
only ever live on the entity in encrypted form.
"""

from dataclasses import dataclass, field
from datetime import datetime

from lifeline.domain.enums import ReplicationMode, ValidationStatus
from lifeline.domain.exceptions import ValidationException
from lifeline.shared.utils.datetime import ensure_utc, utc_now


@dataclass
class StorageProviderConfig:
    """Domain entity for one tenant storage provider.

    `type` is kept as the raw stored string: the adapter factory owns the
    closed set of supported types and rejects anything outside it. Encrypted
    credential fields are excluded from repr so they never reach logs.
    """

    id: str
    owner_id: str
    type: str
    bucket: str
    encrypted_access_key_id: str = field(default="", repr=False)
    encrypted_secret_access_key: str = field(default="", repr=False)
    region: str | None = None
    endpoint: str | None = None
    force_path_style: bool | None = None
    is_enabled: bool = True
    replication_mode: ReplicationMode = ReplicationMode.MIRROR
    adapter_version: int = 1
    validation_status: ValidationStatus = ValidationStatus.PENDING
    validation_error: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    last_validated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate config business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Provider config ID is required", field="id")
        if not self.owner_id:
            raise ValidationException("Owner ID is required", field="owner_id")
        if not self.bucket or not self.bucket.strip():
            raise ValidationException("Bucket is required", field="bucket")
        if self.adapter_version < 1:
            raise ValidationException(
                "adapter_version must be at least 1", field="adapter_version"
            )

    def disable(self) -> None:
        """Stop using this provider. Configs are never deleted, only disabled."""
        self.is_enabled = False

    def enable(self) -> None:
        """Resume using this provider. Idempotent."""
        self.is_enabled = True

    def record_validation(
        self,
        status: ValidationStatus,
        error: str | None = None,
        at: datetime | None = None,
    ) -> None:
        """Record the outcome of a validation run.

        The error message is cleared unless status is ERROR.
        """
        self.validation_status = status
        self.validation_error = error if status == ValidationStatus.ERROR else None
        self.last_validated_at = ensure_utc(at) or utc_now()


@dataclass(frozen=True)
class ProviderCredentials:
    """Decrypted credential pair handed to the adapter factory.

    For S3 and R2 this is the access key id and secret. For GCS the pair is
    read as (project id, service account key JSON); both empty selects
    Application Default Credentials.
    """

    access_key_id: str = ""
    secret_access_key: str = field(default="", repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.access_key_id and not self.secret_access_key
