"""Signed download access to snapshot objects.

Authorization is purely path-based: a requester may only download objects
under its own "{requester_id}/" prefix. The check happens before any backend
call so a forbidden request never reveals whether the object exists.
"""

from __future__ import annotations

from datetime import timedelta

from lifeline.core.constants import PATH_SEPARATOR, SIGNED_URL_TTL
from lifeline.domain.exceptions import ForbiddenPathError
from lifeline.infrastructure.exceptions import ObjectNotFoundError
from lifeline.infrastructure.external.storage.protocol import StorageAdapter
from lifeline.shared.telemetry.logging import get_logger
from lifeline.shared.utils.paths import object_basename

logger = get_logger(__name__)

_FORBIDDEN_SEGMENTS = frozenset({"", ".", ".."})


def is_owned_path(requester_id: str, path: str) -> bool:
    """True when path lies strictly under the requester's prefix.

    Rejects empty requester ids, ids containing "/", and paths with empty,
    "." or ".." segments.
    """
    if not requester_id or PATH_SEPARATOR in requester_id:
        return False
    prefix = f"{requester_id}{PATH_SEPARATOR}"
    if not path.startswith(prefix):
        return False
    remainder = path[len(prefix) :]
    if not remainder:
        return False
    return all(
        segment not in _FORBIDDEN_SEGMENTS
        for segment in remainder.split(PATH_SEPARATOR)
    )


class SignedAccessGateway:
    """Issues short-lived download URLs for the requester's own objects."""

    def __init__(
        self,
        adapter: StorageAdapter,
        expires_in: timedelta = SIGNED_URL_TTL,
    ) -> None:
        self.adapter = adapter
        self.expires_in = expires_in

    async def issue_download_url(self, requester_id: str, path: str) -> str:
        """Return a signed GET URL that downloads path as an attachment.

        Raises:
            ForbiddenPathError: path is outside "{requester_id}/"; no backend call made.
            ObjectNotFoundError: path does not exist.
            StorageBackendError: Backend failure during the existence check or signing.
        """
        if not is_owned_path(requester_id, path):
            logger.warning("Rejected download outside requester prefix for %s", requester_id)
            raise ForbiddenPathError(requester_id)
        if not await self.adapter.exists(path):
            raise ObjectNotFoundError(path)
        url = await self.adapter.signed_read_url(
            path,
            expires_in=self.expires_in,
            download_filename=object_basename(path),
        )
        logger.info("Issued download URL for %s", path)
        return url
