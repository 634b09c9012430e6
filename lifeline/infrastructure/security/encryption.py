"""Credential encryption for storage provider credentials (Fernet)."""

import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from lifeline.core.config import Settings, get_settings
from lifeline.domain.entities.storage_provider import (
    ProviderCredentials,
    StorageProviderConfig,
)
from lifeline.domain.exceptions import CredentialException

DECRYPTION_ERROR_MSG = "Failed to decrypt credentials - invalid or corrupted data"

KDF_ITERATIONS = 100_000


class CredentialEncryptor:
    """Encrypt/decrypt provider credentials using Fernet.

    The key is derived from CREDENTIAL_ENCRYPTION_SECRET (falling back to
    SECRET_KEY) and ENCRYPTION_SALT via PBKDF2-HMAC-SHA256.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._fernet = Fernet(self._get_encryption_key(settings or get_settings()))

    @staticmethod
    def _get_encryption_key(settings: Settings) -> bytes:
        """Derive 32-byte urlsafe key from the configured secret and salt."""
        secret = settings.credential_encryption_secret or settings.secret_key
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=settings.encryption_salt.get_secret_value().encode(),
            iterations=KDF_ITERATIONS,
        )
        derived = kdf.derive(secret.get_secret_value().encode())
        return base64.urlsafe_b64encode(derived)

    def encrypt_string(self, plaintext: str) -> str:
        """Encrypt a single credential value to a string safe for storage."""
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt_string(self, ciphertext: str) -> str:
        """Decrypt a stored credential value. Empty input stays empty.

        Raises:
            CredentialException: If ciphertext is invalid or was encrypted
                with another key.
        """
        if not ciphertext:
            return ""
        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken:
            raise CredentialException(DECRYPTION_ERROR_MSG) from None

    def decrypt_config_credentials(
        self, config: StorageProviderConfig
    ) -> ProviderCredentials:
        """Decrypt the access key pair stored on a provider config."""
        return ProviderCredentials(
            access_key_id=self.decrypt_string(config.encrypted_access_key_id),
            secret_access_key=self.decrypt_string(config.encrypted_secret_access_key),
        )
