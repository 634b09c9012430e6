"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (SECRET_KEY, ENCRYPTION_SALT) are
validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    The snapshot storage block describes the application's own bucket
    (where snapshot artifacts land before any tenant replication). Tenant
    buckets are not configured here; they come from stored provider configs.
    """

    # App
    app_name: str = "lifeline"
    app_version: str = "1.0.0"
    debug: bool = False

    # Security
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    encryption_salt: SecretStr = SecretStr("")
    # Provider credential storage: use a separate secret so JWT key rotation does not break stored credentials.
    credential_encryption_secret: SecretStr | None = None

    # CORS
    allowed_origins: str = "http://localhost:3000"

    # Snapshot storage (application bucket)
    snapshot_storage_type: str = "gcs"
    snapshot_bucket: str | None = None
    snapshot_region: str | None = None
    snapshot_endpoint_url: str | None = None
    snapshot_force_path_style: bool | None = None
    snapshot_access_key_id: str | None = None
    snapshot_secret_access_key: SecretStr | None = None
    # GCS: project and optional service account key JSON; ADC when both unset.
    gcp_project_id: str | None = None
    gcp_service_account_key_json: SecretStr | None = None

    # Native client cache (one client per provider config identity)
    storage_client_cache_size: int = 64

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required_and_storage(self) -> "Settings":
        """Validate required secrets and the snapshot storage type."""
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if not self.encryption_salt.get_secret_value():
            raise ValueError(
                "ENCRYPTION_SALT is required. Generate with: openssl rand -hex 16."
            )
        if self.snapshot_storage_type.lower() not in ("s3", "r2", "gcs"):
            raise ValueError(
                f"Invalid snapshot_storage_type '{self.snapshot_storage_type}'. "
                "Must be one of: 's3', 'r2', 'gcs'"
            )
        if self.storage_client_cache_size < 1:
            raise ValueError("storage_client_cache_size must be at least 1")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
