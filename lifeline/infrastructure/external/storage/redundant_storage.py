"""Replicating storage adapter: one primary store plus tenant replica buckets."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import TypeVar

from lifeline.domain.enums import ReplicationMode
from lifeline.infrastructure.exceptions import (
    ObjectNotFoundError,
    StorageBackendError,
    StorageException,
)
from lifeline.infrastructure.external.storage.protocol import StorageAdapter, WriteData
from lifeline.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

RETRY_DELAY_SECONDS = 0.5


@dataclass(frozen=True)
class Replica:
    """A replica target and how it follows the primary."""

    adapter: StorageAdapter
    mode: ReplicationMode
    name: str


class RedundantStorageAdapter:
    """StorageAdapter fanning writes out to replicas and reading with fallback.

    - write: all targets concurrently; fails only if every target fails.
    - delete: primary and MIRROR replicas; ARCHIVE replicas keep the object.
    - read / exists / get_metadata / list: primary first, then replicas.
    - copy / signed_read_url: primary only (primary is the source of truth).

    Backend errors flagged retryable get one retry after RETRY_DELAY_SECONDS.
    """

    backend_name = "redundant"

    def __init__(
        self,
        primary: StorageAdapter,
        replicas: Sequence[Replica] = (),
        *,
        retry_attempts: int = 1,
        retry_delay: float = RETRY_DELAY_SECONDS,
    ) -> None:
        self.primary = primary
        self.replicas = list(replicas)
        self._retry_attempts = retry_attempts
        self._retry_delay = retry_delay

    def _targets(self) -> list[tuple[str, StorageAdapter]]:
        return [("primary", self.primary)] + [(r.name, r.adapter) for r in self.replicas]

    async def _with_retry(self, call: Callable[[], Awaitable[T]]) -> T:
        attempts_left = self._retry_attempts
        while True:
            try:
                return await call()
            except StorageBackendError as e:
                if attempts_left <= 0 or not e.retryable:
                    raise
                attempts_left -= 1
                logger.warning(
                    "Retrying %s on %s after transient error", e.operation, e.path
                )
                await asyncio.sleep(self._retry_delay)

    async def write(
        self,
        path: str,
        data: WriteData,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        targets = self._targets()
        results = await asyncio.gather(
            *(
                self._with_retry(lambda a=adapter: a.write(path, data, metadata))
                for _, adapter in targets
            ),
            return_exceptions=True,
        )
        failures = [
            (name, result)
            for (name, _), result in zip(targets, results)
            if isinstance(result, BaseException)
        ]
        for _, result in failures:
            if not isinstance(result, StorageException):
                raise result
        if len(failures) == len(targets):
            logger.error("Redundant write failed on all %d targets for %s", len(targets), path)
            raise StorageBackendError("write", path, failures[0][1])
        if failures:
            logger.warning(
                "Redundant write for %s succeeded on %d/%d targets; failed: %s",
                path,
                len(targets) - len(failures),
                len(targets),
                ", ".join(name for name, _ in failures),
            )

    async def read(self, path: str) -> bytes:
        return await self._first_success("read", path, lambda a: a.read(path))

    async def list(self, prefix: str) -> list[str]:
        return await self._first_success("list", prefix, lambda a: a.list(prefix))

    async def _first_success(
        self,
        operation: str,
        path: str,
        call: Callable[[StorageAdapter], Awaitable[T]],
    ) -> T:
        """Try targets in order; not-found or backend errors fall through to the next.

        Raises ObjectNotFoundError when every target reported the object absent,
        otherwise the first backend error.
        """
        errors: list[StorageException] = []
        for name, adapter in self._targets():
            try:
                return await self._with_retry(lambda a=adapter: call(a))
            except StorageException as e:
                logger.warning("%s of %s failed on %s: %s", operation, path, name, e.error_code)
                errors.append(e)
        if errors and all(isinstance(e, ObjectNotFoundError) for e in errors):
            raise ObjectNotFoundError(path)
        backend_errors = [e for e in errors if not isinstance(e, ObjectNotFoundError)]
        raise backend_errors[0]

    async def delete(self, path: str) -> None:
        targets = [("primary", self.primary)] + [
            (r.name, r.adapter) for r in self.replicas if r.mode == ReplicationMode.MIRROR
        ]
        results = await asyncio.gather(
            *(adapter.delete(path) for _, adapter in targets),
            return_exceptions=True,
        )
        failures = [
            (name, result)
            for (name, _), result in zip(targets, results)
            if isinstance(result, BaseException)
        ]
        for _, result in failures:
            if not isinstance(result, StorageException):
                raise result
        if len(failures) == len(targets):
            raise StorageBackendError("delete", path, failures[0][1])
        if failures:
            logger.warning(
                "Redundant delete for %s failed on: %s",
                path,
                ", ".join(name for name, _ in failures),
            )

    async def exists(self, path: str) -> bool:
        """True if any target has the object; errors on one target are skipped."""
        errors: list[StorageException] = []
        for name, adapter in self._targets():
            try:
                if await self._with_retry(lambda a=adapter: a.exists(path)):
                    return True
            except StorageException as e:
                logger.warning("exists of %s failed on %s: %s", path, name, e.error_code)
                errors.append(e)
        if errors and len(errors) == len(self._targets()):
            raise errors[0]
        return False

    async def get_metadata(self, path: str) -> dict[str, str] | None:
        """First metadata found across targets; None when no target has the object."""
        errors: list[StorageException] = []
        for name, adapter in self._targets():
            try:
                metadata = await self._with_retry(lambda a=adapter: a.get_metadata(path))
            except StorageException as e:
                logger.warning("get_metadata of %s failed on %s: %s", path, name, e.error_code)
                errors.append(e)
                continue
            if metadata is not None:
                return metadata
        if errors and len(errors) == len(self._targets()):
            raise errors[0]
        return None

    async def copy(self, src_path: str, dest_path: str) -> None:
        await self._with_retry(lambda: self.primary.copy(src_path, dest_path))

    async def signed_read_url(
        self,
        path: str,
        *,
        expires_in: timedelta,
        download_filename: str,
    ) -> str:
        return await self.primary.signed_read_url(
            path, expires_in=expires_in, download_filename=download_filename
        )
