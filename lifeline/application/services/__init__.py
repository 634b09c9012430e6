"""Application services: adapter resolution, signed access, provider validation."""

from lifeline.application.services.adapter_resolver import StorageAdapterResolver
from lifeline.application.services.provider_validation import (
    ProviderValidationService,
    ValidationResult,
)
from lifeline.application.services.signed_access import (
    SignedAccessGateway,
    is_owned_path,
)

__all__ = [
    "ProviderValidationService",
    "SignedAccessGateway",
    "StorageAdapterResolver",
    "ValidationResult",
    "is_owned_path",
]
