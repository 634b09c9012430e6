"""Application interfaces (ports) implemented outside this layer."""

from lifeline.application.interfaces.repositories import (
    IStorageProviderConfigRepository,
)

__all__ = ["IStorageProviderConfigRepository"]
