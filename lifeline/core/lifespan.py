"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring. The storage adapter factory (and
the native client cache it owns) lives on app.state for the process lifetime.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from lifeline.core.config import get_settings
from lifeline.infrastructure.external.storage.client_cache import ClientCache
from lifeline.infrastructure.external.storage.factory import StorageAdapterFactory
from lifeline.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, storage adapter factory with a bounded client cache.
    Shutdown: drop every cached storage client.
    """
    settings = get_settings()

    # ---- Startup ----
    setup_logging()
    app.state.storage_factory = StorageAdapterFactory(
        ClientCache(max_entries=settings.storage_client_cache_size)
    )
    logger.info(
        "Storage adapter factory ready (snapshot backend: %s)",
        settings.snapshot_storage_type,
    )

    yield

    # ---- Shutdown ----
    factory = getattr(app.state, "storage_factory", None)
    if factory is not None:
        factory.cache.clear()
        app.state.storage_factory = None
        logger.info("Storage client cache cleared")
