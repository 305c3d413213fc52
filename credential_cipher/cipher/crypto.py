"""
Credential Cipher Core — Key handling, envelope encryption and decryption.

Envelope format (all segments lowercase hex):
    [iv 16B]:[GCM tag 16B]:[ciphertext 0..nB]

The cipher is AES-256-GCM without associated data. Every call draws a fresh
random IV; tag verification is left to the AEAD implementation.

Security Note:
    Never log plaintext, key or envelope values. The functions in this module
    do not log at all and never read configuration; the key is always passed
    in by the caller.
"""
import os
import re
import secrets
from typing import Any, NamedTuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import (
    AuthenticationError,
    CipherError,
    FormatError,
    InputError,
    InvalidKeyError,
)

IV_SIZE = 16  # 128-bit IV
TAG_SIZE = 16  # 128-bit GCM tag
KEY_LENGTH = 32  # AES-256

SEPARATOR = ":"

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]+")
_SEGMENT_PATTERN = re.compile(r"[0-9a-f]+")
_KEY_PROBE = "test-encryption-key-validation"


class Envelope(NamedTuple):
    """Decoded parts of an ``iv:tag:ciphertext`` envelope."""

    iv: bytes
    tag: bytes
    ciphertext: bytes

    def __str__(self) -> str:
        return SEPARATOR.join(
            (self.iv.hex(), self.tag.hex(), self.ciphertext.hex())
        )


# ---------------------------------------------------------------------------
# Key handling
# ---------------------------------------------------------------------------

def generate_key() -> str:
    """Generate a random 32-byte encryption key.

    Returns:
        64-character lowercase hex string.
    """
    return secrets.token_bytes(KEY_LENGTH).hex()


def normalize_key(key: Any) -> bytes:
    """Validate a hex-encoded key and return its raw bytes.

    An optional ``0x`` prefix is stripped; hex digits are case-insensitive.

    Args:
        key: Hex-encoded 32-byte key.

    Returns:
        Raw 32-byte key.

    Raises:
        InvalidKeyError: If the key is missing, not hex, or not 32 bytes.
    """
    if key is None or key == "":
        raise InvalidKeyError("Encryption key is required")
    if not isinstance(key, str):
        raise InvalidKeyError("Encryption key must be a string")
    clean = key[2:] if key[:2] in ("0x", "0X") else key
    if not _HEX_PATTERN.fullmatch(clean):
        raise InvalidKeyError("Encryption key must be a valid hex string")
    if len(clean) != KEY_LENGTH * 2:
        raise InvalidKeyError(
            f"Encryption key must be {KEY_LENGTH} bytes "
            f"({KEY_LENGTH * 2} hex characters), got {len(clean) // 2} bytes"
        )
    return bytes.fromhex(clean)


def test_key(candidate: Any) -> bool:
    """Check that a key is well-formed and usable for a round trip.

    Never raises.

    Args:
        candidate: Hex-encoded key to check.

    Returns:
        True if the key can encrypt and decrypt, False otherwise.
    """
    try:
        return decrypt(encrypt(_KEY_PROBE, candidate), candidate) == _KEY_PROBE
    except CipherError:
        return False


# ---------------------------------------------------------------------------
# Envelope encryption
# ---------------------------------------------------------------------------

def encrypt(plaintext: Any, key: Any) -> str:
    """Encrypt a text value into an ``iv:tag:ciphertext`` envelope.

    Args:
        plaintext: Text to encrypt; the empty string is allowed.
        key: Hex-encoded 32-byte key.

    Returns:
        Envelope string, every segment lowercase hex.

    Raises:
        InputError: If plaintext is None, not a string, or not encodable
            as UTF-8.
        InvalidKeyError: If the key is invalid.
    """
    if plaintext is None:
        raise InputError("Plaintext is required")
    if not isinstance(plaintext, str):
        raise InputError("Plaintext must be a string")
    try:
        data = plaintext.encode("utf-8")
    except UnicodeEncodeError:
        raise InputError("Plaintext must be valid UTF-8 text") from None
    raw_key = normalize_key(key)
    iv = os.urandom(IV_SIZE)
    sealed = AESGCM(raw_key).encrypt(iv, data, None)
    # AESGCM appends the tag to the ciphertext
    return str(
        Envelope(iv=iv, tag=sealed[-TAG_SIZE:], ciphertext=sealed[:-TAG_SIZE])
    )


def _unhex(segment: str) -> bytes | None:
    # lowercase only; bytes.fromhex would also accept uppercase and whitespace
    if segment and not _SEGMENT_PATTERN.fullmatch(segment):
        return None
    try:
        return bytes.fromhex(segment)
    except ValueError:
        return None


def parse_envelope(envelope: Any) -> Envelope:
    """Split and decode an envelope without touching any key material.

    Args:
        envelope: Envelope string produced by :func:`encrypt`.

    Returns:
        Decoded :class:`Envelope`.

    Raises:
        InputError: If envelope is missing or not a string.
        FormatError: If the envelope shape or segment lengths are wrong.
    """
    if envelope is None or envelope == "":
        raise InputError("Encrypted data is required")
    if not isinstance(envelope, str):
        raise InputError("Encrypted data must be a string")

    parts = envelope.split(SEPARATOR)
    if len(parts) != 3:
        raise FormatError(
            "Invalid encrypted data format. Expected: iv:authTag:ciphertext"
        )
    iv_hex, tag_hex, ct_hex = parts

    iv = _unhex(iv_hex)
    if iv is None or len(iv) != IV_SIZE:
        got = len(iv) if iv is not None else "undecodable"
        raise FormatError(
            f"Invalid IV length: expected {IV_SIZE} bytes, got {got}"
        )
    tag = _unhex(tag_hex)
    if tag is None or len(tag) != TAG_SIZE:
        got = len(tag) if tag is not None else "undecodable"
        raise FormatError(
            f"Invalid auth tag length: expected {TAG_SIZE} bytes, got {got}"
        )
    ciphertext = _unhex(ct_hex)
    if ciphertext is None:
        raise FormatError("Invalid ciphertext encoding")
    return Envelope(iv=iv, tag=tag, ciphertext=ciphertext)


def decrypt(envelope: Any, key: Any) -> str:
    """Decrypt an envelope back to its original text.

    Args:
        envelope: Envelope string produced by :func:`encrypt`.
        key: Hex-encoded 32-byte key used for encryption.

    Returns:
        Decrypted plaintext.

    Raises:
        InputError: If envelope is missing or not a string.
        FormatError: If the envelope is malformed.
        InvalidKeyError: If the key is invalid.
        AuthenticationError: If the tag does not verify.
    """
    parsed = parse_envelope(envelope)
    raw_key = normalize_key(key)
    try:
        data = AESGCM(raw_key).decrypt(
            parsed.iv, parsed.ciphertext + parsed.tag, None,
        )
    except InvalidTag:
        raise AuthenticationError(
            "Decryption failed: Authentication failed. "
            "Data may be corrupted or key is incorrect."
        ) from None
    return data.decode("utf-8")
