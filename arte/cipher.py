"""AES-256-GCM layer for gated (encrypted) tokens."""

from __future__ import annotations

import hashlib
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from arte.errors import AuthenticationError

IV_LEN = 12
TAG_LEN = 16


def derive_key(passphrase: str) -> bytes:
    """SHA-256 of the UTF-8 passphrase, used directly as the AES-256 key."""
    return hashlib.sha256(passphrase.encode("utf-8")).digest()


def encrypt(data: bytes, passphrase: str) -> bytes:
    """Return ``IV || ciphertext || tag``.

    The IV is drawn fresh from the OS CSPRNG on every call; an IV must never
    repeat under the same key.
    """
    iv = secrets.token_bytes(IV_LEN)
    return iv + AESGCM(derive_key(passphrase)).encrypt(iv, data, None)


def decrypt(blob: bytes, passphrase: str) -> bytes:
    if len(blob) < IV_LEN + TAG_LEN:
        raise AuthenticationError("encrypted payload is truncated")
    iv, sealed = blob[:IV_LEN], blob[IV_LEN:]
    try:
        return AESGCM(derive_key(passphrase)).decrypt(iv, sealed, None)
    except InvalidTag as exc:
        raise AuthenticationError("encrypted payload failed authentication") from exc
