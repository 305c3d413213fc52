"""Credential Cipher errors.

Format and length failures keep distinct identities because they are
detected before any key material is used. Everything that goes wrong at
the tag verification step is reported as a single AuthenticationError.
"""


class CipherError(ValueError):
    """Base class for every error raised by the credential cipher."""


class InputError(CipherError):
    """Plaintext or envelope argument is missing or has the wrong type."""


class InvalidKeyError(CipherError):
    """Encryption key is missing, not hexadecimal, or not 32 bytes long."""


class FormatError(CipherError):
    """Envelope is not a well-formed ``iv:tag:ciphertext`` string."""


class AuthenticationError(CipherError):
    """Authenticated decryption failed (wrong key or tampered envelope)."""


class CredentialNotFound(LookupError):
    """No stored credential configuration matches the requested id."""
