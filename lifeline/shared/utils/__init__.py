"""Shared utility helpers (datetime, object paths)."""

from lifeline.shared.utils.datetime import ensure_utc, utc_now
from lifeline.shared.utils.paths import (
    object_basename,
    snapshot_object_path,
    tenant_prefix,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "object_basename",
    "snapshot_object_path",
    "tenant_prefix",
]
