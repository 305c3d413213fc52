"""Credential Cipher — AES-256-GCM envelopes for stored credentials.

Security Note (Threat Model):
    An envelope does not record which key produced it. Replacing the
    encryption key without re-encrypting makes every stored envelope
    permanently unreadable; this surfaces only as AuthenticationError.
"""

from .crypto import (
    Envelope,
    generate_key,
    normalize_key,
    encrypt,
    decrypt,
    parse_envelope,
    test_key,
)
from .exceptions import (
    CipherError,
    InputError,
    InvalidKeyError,
    FormatError,
    AuthenticationError,
    CredentialNotFound,
)
from .config import CipherConfig, load_encryption_key
from .credential_store import CredentialStore, Credentials, is_token_valid

__all__ = [
    "Envelope",
    "generate_key",
    "normalize_key",
    "encrypt",
    "decrypt",
    "parse_envelope",
    "test_key",
    "CipherError",
    "InputError",
    "InvalidKeyError",
    "FormatError",
    "AuthenticationError",
    "CredentialNotFound",
    "CipherConfig",
    "load_encryption_key",
    "CredentialStore",
    "Credentials",
    "is_token_valid",
]
