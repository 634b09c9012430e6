"""Security: bearer token verification and provider credential encryption."""

from lifeline.infrastructure.security.encryption import CredentialEncryptor
from lifeline.infrastructure.security.jwt import requester_from_token

__all__ = [
    "CredentialEncryptor",
    "requester_from_token",
]
