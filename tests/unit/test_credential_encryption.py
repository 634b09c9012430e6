"""CredentialEncryptor (Fernet with PBKDF2-derived key)."""

import pytest
from pydantic import SecretStr

from lifeline.core.config import Settings
from lifeline.domain.entities.storage_provider import StorageProviderConfig
from lifeline.domain.exceptions import CredentialException
from lifeline.infrastructure.security.encryption import CredentialEncryptor


def _settings(**overrides) -> Settings:
    values = {
        "secret_key": SecretStr("jwt-secret"),
        "encryption_salt": SecretStr("salt-1"),
    }
    values.update(overrides)
    return Settings(**values)


def test_encrypt_then_decrypt_returns_plaintext() -> None:
    encryptor = CredentialEncryptor(_settings())
    ciphertext = encryptor.encrypt_string("AKIA-EXAMPLE")
    assert ciphertext != "AKIA-EXAMPLE"
    assert encryptor.decrypt_string(ciphertext) == "AKIA-EXAMPLE"


def test_empty_ciphertext_decrypts_to_empty() -> None:
    assert CredentialEncryptor(_settings()).decrypt_string("") == ""


def test_wrong_key_raises_credential_exception() -> None:
    ciphertext = CredentialEncryptor(_settings()).encrypt_string("secret")
    other = CredentialEncryptor(_settings(encryption_salt=SecretStr("salt-2")))
    with pytest.raises(CredentialException) as exc_info:
        other.decrypt_string(ciphertext)
    assert exc_info.value.error_code == "CREDENTIAL_ERROR"
    assert exc_info.value.__cause__ is None


def test_garbage_ciphertext_raises_credential_exception() -> None:
    with pytest.raises(CredentialException):
        CredentialEncryptor(_settings()).decrypt_string("not-a-fernet-token")


def test_dedicated_secret_survives_jwt_key_rotation() -> None:
    before = _settings(credential_encryption_secret=SecretStr("creds-secret"))
    after = _settings(
        secret_key=SecretStr("rotated-jwt-secret"),
        credential_encryption_secret=SecretStr("creds-secret"),
    )
    ciphertext = CredentialEncryptor(before).encrypt_string("value")
    assert CredentialEncryptor(after).decrypt_string(ciphertext) == "value"


def test_decrypt_config_credentials() -> None:
    encryptor = CredentialEncryptor(_settings())
    config = StorageProviderConfig(
        id="cfg",
        owner_id="u",
        type="s3",
        bucket="b",
        encrypted_access_key_id=encryptor.encrypt_string("AKID"),
        encrypted_secret_access_key=encryptor.encrypt_string("SECRET"),
    )
    credentials = encryptor.decrypt_config_credentials(config)
    assert credentials.access_key_id == "AKID"
    assert credentials.secret_access_key == "SECRET"
    assert "SECRET" not in repr(credentials)
    assert config.encrypted_secret_access_key not in repr(config)
