"""
Cipher Configuration — Encryption key loading and validated settings.

Reads the process-wide credential key from the environment:
    TWIZZIT_ENCRYPTION_KEY = <64 hex characters, optional 0x prefix>

Only callers of the cipher read configuration; the functions in
``crypto`` always receive the key explicitly.

Security Note:
    Never log key material. Only log variable names and outcomes.
"""
import os
import logging

from pydantic import BaseModel, Field, SecretStr, field_validator

from .crypto import normalize_key, test_key

logger = logging.getLogger("credential_cipher")

ENCRYPTION_KEY_ENV = "TWIZZIT_ENCRYPTION_KEY"
# refresh an external API token that expires within 5 minutes
DEFAULT_TOKEN_EXPIRY_BUFFER = 300


def load_encryption_key(env_var: str = ENCRYPTION_KEY_ENV) -> str:
    """Read and validate the encryption key from the environment.

    Args:
        env_var: Name of the environment variable holding the key.

    Returns:
        The configured hex key, as set in the environment.

    Raises:
        RuntimeError: If the variable is not set or empty.
        InvalidKeyError: If the value is not a valid 32-byte hex key.
    """
    value = os.environ.get(env_var)
    if not value:
        raise RuntimeError(
            f"{env_var} environment variable is not configured. "
            "Generate one with: credential-cipher generate-key"
        )
    normalize_key(value)
    logger.debug("Loaded encryption key from %s", env_var)
    return value


class CipherConfig(BaseModel):
    """Validated credential cipher configuration."""

    encryption_key: SecretStr
    token_expiry_buffer: int = Field(default=DEFAULT_TOKEN_EXPIRY_BUFFER, ge=0)

    @field_validator("encryption_key")
    @classmethod
    def validate_key(cls, v: SecretStr) -> SecretStr:
        """Reject keys that cannot complete an encrypt/decrypt round trip."""
        if not test_key(v.get_secret_value()):
            raise ValueError(
                "encryption_key must be 32 bytes encoded as 64 hex characters"
            )
        return v

    @property
    def key(self) -> str:
        """Plain hex key, for passing to the cipher functions."""
        return self.encryption_key.get_secret_value()

    @classmethod
    def from_env(cls) -> "CipherConfig":
        """Create CipherConfig by loading values from environment.

        Returns:
            Populated CipherConfig instance.
        """
        return cls(encryption_key=load_encryption_key())
