"""Infrastructure exceptions for storage operations.

Storage errors extend LifelineException so presentation can map them
to HTTP responses consistently. Adapters raise only these: no backend SDK
exception type ever leaves an adapter. Messages and details never carry
bucket names, endpoints or credentials; the wrapped cause stays on the
exception for server-side logging.
"""

from lifeline.domain.exceptions import LifelineException


class StorageException(LifelineException):
    """Base exception for storage operations."""


class ObjectNotFoundError(StorageException):
    """Object absent on read, copy source, or signed-URL issuance."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Object not found: {path}",
            "STORAGE_OBJECT_NOT_FOUND",
            {"path": path},
        )
        self.path = path


class StorageBackendError(StorageException):
    """Any non-not-found backend failure, wrapping the original cause.

    Attributes:
        operation: Adapter operation that failed (e.g. 'write').
        cause: Original backend exception, for diagnostics only.
        retryable: True when the adapter classified the cause as transient.
    """

    def __init__(
        self,
        operation: str,
        path: str,
        cause: BaseException | None = None,
        *,
        retryable: bool = False,
    ) -> None:
        super().__init__(
            f"Storage backend error during {operation}",
            "STORAGE_BACKEND_ERROR",
            {"operation": operation, "path": path},
        )
        self.operation = operation
        self.path = path
        self.cause = cause
        self.retryable = retryable


class UnsupportedProviderTypeError(StorageException):
    """Provider config type outside the supported closed set."""

    def __init__(self, provider_type: str, supported: list[str]) -> None:
        super().__init__(
            f"Unsupported storage provider type: {provider_type}",
            "UNSUPPORTED_PROVIDER_TYPE",
            {"provider_type": provider_type, "supported": supported},
        )
        self.provider_type = provider_type


class NotSupportedByBackendError(StorageException):
    """Operation the backend (or its current credentials) cannot perform."""

    def __init__(self, operation: str, backend: str) -> None:
        super().__init__(
            f"Operation '{operation}' not supported by {backend} backend",
            "STORAGE_NOT_SUPPORTED",
            {"operation": operation, "backend": backend},
        )
        self.operation = operation
        self.backend = backend
