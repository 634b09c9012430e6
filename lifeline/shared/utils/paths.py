"""Object path helpers for the "{tenant_id}/{object_id}.json.gz" convention.

Other systems issue paths in this shape; the signed-access gateway relies on
the tenant prefix as its authorization boundary.
"""

from lifeline.core.constants import PATH_SEPARATOR, SNAPSHOT_OBJECT_SUFFIX


def tenant_prefix(tenant_id: str) -> str:
    """Return the listing/ownership prefix for a tenant ("{tenant_id}/")."""
    if not tenant_id or PATH_SEPARATOR in tenant_id:
        raise ValueError("tenant_id must be non-empty and must not contain '/'")
    return f"{tenant_id}{PATH_SEPARATOR}"


def snapshot_object_path(tenant_id: str, object_id: str) -> str:
    """Build the storage path of one snapshot artifact.

    Raises:
        ValueError: If either id is empty or contains a path separator.
    """
    if not object_id or PATH_SEPARATOR in object_id:
        raise ValueError("object_id must be non-empty and must not contain '/'")
    return f"{tenant_prefix(tenant_id)}{object_id}{SNAPSHOT_OBJECT_SUFFIX}"


def object_basename(path: str) -> str:
    """Last path segment, used as the download filename."""
    return path.rsplit(PATH_SEPARATOR, 1)[-1]
