"""
CredentialStore — Encrypted storage of external federation API credentials.

Provides the storage service that consumes the credential cipher:
- ``save_credentials(...)`` — encrypt the password and upsert the config row
- ``get_credentials(config_id)`` — load a row and decrypt its password
- ``get_config(organization_id)`` / ``list_configs()`` — non-sensitive columns
- ``delete_config(config_id)`` — remove a stored configuration

The password is stored as an ``iv:tag:ciphertext`` envelope in the
``api_password_encrypted`` text column; the username is stored in clear.

Security Note:
    Never log passwords, envelopes or the encryption key. Only log config
    ids, organization ids and operations.
"""
import time
import logging
from typing import Any, Optional

from pydantic import BaseModel, SecretStr

from .crypto import encrypt, decrypt, test_key
from .config import CipherConfig, DEFAULT_TOKEN_EXPIRY_BUFFER
from .exceptions import CipherError, CredentialNotFound

logger = logging.getLogger("credential_cipher")

SYNC_FREQUENCIES = ("manual", "hourly", "daily", "weekly")

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_UPSERT_CONFIG = """
INSERT INTO twizzit_config (
    organization_id, organization_name, api_username, api_password_encrypted,
    sync_enabled, auto_sync_frequency
)
VALUES ($1, $2, $3, $4, $5, $6)
ON CONFLICT (organization_id)
DO UPDATE SET organization_name = EXCLUDED.organization_name,
             api_username = EXCLUDED.api_username,
             api_password_encrypted = EXCLUDED.api_password_encrypted,
             sync_enabled = EXCLUDED.sync_enabled,
             auto_sync_frequency = EXCLUDED.auto_sync_frequency,
             updated_at = NOW()
RETURNING id
"""

_SELECT_CREDENTIALS = """
SELECT id, organization_id, api_username, api_password_encrypted
FROM twizzit_config
WHERE id = $1
"""

_PUBLIC_COLUMNS = """
SELECT id, organization_id, organization_name, api_username,
       sync_enabled, auto_sync_frequency, last_sync_at,
       sync_in_progress, created_at, updated_at
FROM twizzit_config
"""

_SELECT_CONFIG = _PUBLIC_COLUMNS + "WHERE organization_id = $1\n"

_SELECT_ALL_CONFIGS = _PUBLIC_COLUMNS + "ORDER BY organization_name, organization_id\n"

_DELETE_CONFIG = """
DELETE FROM twizzit_config WHERE id = $1
"""


class Credentials(BaseModel):
    """Decrypted credentials for one stored configuration."""

    config_id: int
    organization_id: int
    username: str
    password: SecretStr


def is_token_valid(
    token: Optional[str],
    valid_till: Optional[float],
    buffer: int = DEFAULT_TOKEN_EXPIRY_BUFFER,
) -> bool:
    """Check whether an external API token can still be used.

    Args:
        token: Bearer token returned by the external API.
        valid_till: Unix timestamp (seconds) when the token expires.
        buffer: Seconds before expiry at which the token is considered stale.

    Returns:
        True if the token exists and does not expire within ``buffer``.
    """
    if not token or not valid_till:
        return False
    return valid_till - time.time() > buffer


class CredentialStore:
    """Stores federation API credentials with the password encrypted at rest.

    The store holds the single process-wide encryption key. It is checked
    once at construction so that a misconfigured key fails at startup rather
    than on the first write.
    """

    def __init__(
        self,
        db_pool: Any,
        encryption_key: str,
        token_expiry_buffer: int = DEFAULT_TOKEN_EXPIRY_BUFFER,
    ):
        if not test_key(encryption_key):
            raise RuntimeError(
                "Encryption key is not usable: expected 32 bytes "
                "encoded as 64 hex characters"
            )
        self._db = db_pool
        self._key = encryption_key
        self._token_expiry_buffer = token_expiry_buffer

    @classmethod
    def from_config(cls, db_pool: Any, config: CipherConfig) -> "CredentialStore":
        """Build a store from a validated :class:`CipherConfig`."""
        return cls(
            db_pool, config.key,
            token_expiry_buffer=config.token_expiry_buffer,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def token_is_fresh(
        self, token: Optional[str], valid_till: Optional[float],
    ) -> bool:
        """Check a cached API token against the configured expiry buffer."""
        return is_token_valid(token, valid_till, self._token_expiry_buffer)

    async def save_credentials(
        self,
        organization_id: int,
        username: str,
        password: str,
        organization_name: Optional[str] = None,
        sync_enabled: bool = False,
        auto_sync_frequency: str = "manual",
    ) -> int:
        """Encrypt the password and create or update the configuration.

        Args:
            organization_id: External federation organization id.
            username: API username, stored in clear.
            password: API password, stored as an encrypted envelope.
            organization_name: Optional display name.
            sync_enabled: Enable automatic synchronization.
            auto_sync_frequency: One of manual, hourly, daily, weekly.

        Returns:
            Config id of the created or updated row.

        Raises:
            ValueError: If a required value is missing or the frequency is
                unknown.
        """
        if not organization_id or not username or not password:
            raise ValueError(
                "organization_id, username, and password are required"
            )
        if auto_sync_frequency not in SYNC_FREQUENCIES:
            raise ValueError(
                f"Unsupported sync frequency: {auto_sync_frequency}"
            )

        encrypted_password = encrypt(password, self._key)

        async with self._db.acquire() as conn:
            row = await conn.fetchrow(
                _UPSERT_CONFIG,
                organization_id, organization_name, username,
                encrypted_password, sync_enabled, auto_sync_frequency,
            )

        config_id = row["id"]
        logger.info(
            "Stored credentials for organization=%s config=%s",
            organization_id, config_id,
        )
        return config_id

    async def get_credentials(self, config_id: int) -> Credentials:
        """Load a configuration and decrypt its password.

        Args:
            config_id: Config id returned by :meth:`save_credentials`.

        Returns:
            Decrypted :class:`Credentials`.

        Raises:
            CredentialNotFound: If no configuration has this id.
            CipherError: If the stored envelope cannot be decrypted.
        """
        async with self._db.acquire() as conn:
            row = await conn.fetchrow(_SELECT_CREDENTIALS, config_id)

        if row is None:
            raise CredentialNotFound(f"Twizzit config not found: {config_id}")

        try:
            password = decrypt(row["api_password_encrypted"], self._key)
        except CipherError as err:
            logger.error(
                "Failed to decrypt password for config=%s: %s",
                config_id, type(err).__name__,
            )
            raise

        return Credentials(
            config_id=row["id"],
            organization_id=row["organization_id"],
            username=row["api_username"],
            password=password,
        )

    async def get_config(self, organization_id: int) -> Optional[dict]:
        """Return the non-sensitive configuration of an organization.

        Returns:
            Config columns as a dict, or None if not found.
        """
        async with self._db.acquire() as conn:
            row = await conn.fetchrow(_SELECT_CONFIG, organization_id)
        return dict(row) if row is not None else None

    async def list_configs(self) -> list[dict]:
        """Return every stored configuration without sensitive columns."""
        async with self._db.acquire() as conn:
            rows = await conn.fetch(_SELECT_ALL_CONFIGS)
        return [dict(row) for row in rows]

    async def delete_config(self, config_id: int) -> bool:
        """Delete a stored configuration.

        Returns:
            True if a row was deleted.
        """
        async with self._db.acquire() as conn:
            status = await conn.execute(_DELETE_CONFIG, config_id)
        # asyncpg returns the command tag, e.g. "DELETE 1"
        deleted = status.split()[-1] != "0"
        if deleted:
            logger.info("Deleted credentials config=%s", config_id)
        return deleted
