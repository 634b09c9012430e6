"""Presentation-layer dependency injection (composition root).

Routes depend on these providers only; the snapshot adapter and gateway are
built here from settings and the factory stored on app.state by the lifespan.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from lifeline.application.services.signed_access import SignedAccessGateway
from lifeline.core.config import Settings, get_settings
from lifeline.domain.entities.storage_provider import (
    ProviderCredentials,
    StorageProviderConfig,
)
from lifeline.domain.enums import ProviderType
from lifeline.infrastructure.external.storage.factory import StorageAdapterFactory
from lifeline.infrastructure.external.storage.protocol import StorageAdapter
from lifeline.infrastructure.security.jwt import requester_from_token

SNAPSHOT_PROVIDER_CONFIG_ID = "system:snapshots"
SNAPSHOT_PROVIDER_OWNER_ID = "system"

_http_bearer = HTTPBearer(auto_error=False)


def snapshot_provider_config(settings: Settings) -> StorageProviderConfig:
    """Provider config for the application's own snapshot bucket.

    Raises:
        HTTPException: 503 when SNAPSHOT_BUCKET is not configured.
    """
    if not settings.snapshot_bucket:
        raise HTTPException(status_code=503, detail="Snapshot storage is not configured")
    return StorageProviderConfig(
        id=SNAPSHOT_PROVIDER_CONFIG_ID,
        owner_id=SNAPSHOT_PROVIDER_OWNER_ID,
        type=settings.snapshot_storage_type,
        bucket=settings.snapshot_bucket,
        region=settings.snapshot_region,
        endpoint=settings.snapshot_endpoint_url,
        force_path_style=settings.snapshot_force_path_style,
    )


def snapshot_credentials(settings: Settings) -> ProviderCredentials:
    """Plaintext credentials for the snapshot bucket (from env, not encrypted storage)."""
    if settings.snapshot_storage_type.lower() == ProviderType.GCS.value:
        key_json = settings.gcp_service_account_key_json
        return ProviderCredentials(
            access_key_id=settings.gcp_project_id or "",
            secret_access_key=key_json.get_secret_value() if key_json else "",
        )
    secret = settings.snapshot_secret_access_key
    return ProviderCredentials(
        access_key_id=settings.snapshot_access_key_id or "",
        secret_access_key=secret.get_secret_value() if secret else "",
    )


def get_storage_factory(request: Request) -> StorageAdapterFactory:
    """Process-wide adapter factory created by the lifespan."""
    factory = getattr(request.app.state, "storage_factory", None)
    if factory is None:
        raise HTTPException(status_code=503, detail="Storage is not initialized")
    return factory


def get_snapshot_adapter(
    factory: Annotated[StorageAdapterFactory, Depends(get_storage_factory)],
) -> StorageAdapter:
    """Adapter for the application snapshot bucket (composition root)."""
    settings = get_settings()
    return factory.create_adapter(
        snapshot_provider_config(settings), snapshot_credentials(settings)
    )


def get_signed_access_gateway(
    adapter: Annotated[StorageAdapter, Depends(get_snapshot_adapter)],
) -> SignedAccessGateway:
    """Signed download gateway over the snapshot bucket."""
    return SignedAccessGateway(adapter)


async def get_current_requester(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> str:
    """Return the requester id (JWT sub); raise 401 if missing or invalid."""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return requester_from_token(credentials.credentials)
    except ValueError:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
