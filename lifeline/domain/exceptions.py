"""Domain exceptions for Lifeline.

Every error the storage layer lets escape derives from LifelineException,
so the API maps one type to a JSON body and an HTTP status by error_code.
Storage-specific errors live in lifeline.infrastructure.exceptions.
"""

from typing import Any


class LifelineException(Exception):
    """Root of the Lifeline error taxonomy.

    Attributes:
        message: User-safe description; never carries credentials,
            bucket names or endpoints.
        error_code: Stable machine-readable code (class name when omitted).
        details: JSON-serializable context such as the object path.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or type(self).__name__
        self.details = dict(details) if details else {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Body of the API error response."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LifelineException):
    """A provider config or request value breaks a rule (missing bucket, no R2 endpoint)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else None)


class AuthorizationException(LifelineException):
    """The requester may not perform action on resource."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        details = {
            key: value
            for key, value in (("resource", resource), ("action", action))
            if value
        }
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        super().__init__(message, "PERMISSION_DENIED", details)


class ForbiddenPathError(AuthorizationException):
    """Raised when a requester asks for an object outside its own path prefix.

    The path itself is not echoed back: it may name another tenant.
    """

    def __init__(self, requester_id: str) -> None:
        super().__init__(
            resource="storage_object",
            action="read",
            message="Forbidden: path does not belong to requester",
        )
        self.details["requester_id"] = requester_id


class ResourceNotFoundException(LifelineException):
    """A stored record (e.g. a provider config) does not exist for the owner."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class CredentialException(LifelineException):
    """Stored provider credentials could not be decrypted or are malformed."""

    def __init__(self, message: str = "Credential operation failed") -> None:
        super().__init__(message, "CREDENTIAL_ERROR")


class StorageProviderDisabledError(LifelineException):
    """Raised when an adapter is requested for a disabled provider config."""

    def __init__(self, provider_config_id: str) -> None:
        super().__init__(
            f"Storage provider is disabled: {provider_config_id}",
            "STORAGE_PROVIDER_DISABLED",
            {"provider_config_id": provider_config_id},
        )
