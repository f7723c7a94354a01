"""Artwork parameter tokens.

Format: ``fx-<type>-v2[e].<hash>.<payload>``

Plain tokens carry the fingerprint of the canonical JSON and the LZ-String
compressed JSON. Encrypted (``v2e``) tokens carry a placeholder hash and
``IV || ciphertext || tag`` of the compressed JSON; AES-GCM provides their
integrity.
"""

from __future__ import annotations

import binascii
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from arte import cipher
from arte.compression import b64url_decode, b64url_encode, compress, decompress
from arte.errors import AuthenticationError, DecompressionError, FormatError, IntegrityError, SerializationError
from arte.fingerprint import fingerprint

log = logging.getLogger(__name__)

ARTWORK_TYPES = ("flow", "grid", "mosaic", "rotated", "tree", "text")
VERSION = "v2"
ENCRYPTED_HASH_PLACEHOLDER = "0" * 16

_TOKEN_RE = re.compile(r"^fx-(flow|grid|mosaic|rotated|tree|text)-v2(e)?\.([a-f0-9]+)\.(.+)$")
_TYPE_RE = re.compile(r"^fx-(\w+)-v2")


@dataclass(frozen=True)
class ParsedToken:
    type: str
    encrypted: bool
    hash: str
    payload: str


@dataclass(frozen=True)
class DecodedToken:
    type: str
    params: Dict[str, Any]
    encrypted: bool = False


def canonicalize(params: Dict[str, Any]) -> str:
    """Compact JSON in the caller's key order.

    Keys are never sorted: the fingerprint is taken over this exact string.
    Non-serializable values raise ``TypeError``.
    """
    return json.dumps(params, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def assemble(artwork_type: str, encrypted: bool, payload: str, hash: Optional[str] = None) -> str:
    if artwork_type not in ARTWORK_TYPES:
        raise ValueError(f"unknown artwork type: {artwork_type!r}")
    if hash is None:
        if not encrypted:
            raise ValueError("plain tokens require a fingerprint")
        hash = ENCRYPTED_HASH_PLACEHOLDER
    suffix = "e" if encrypted else ""
    return f"fx-{artwork_type}-{VERSION}{suffix}.{hash}.{payload}"


def parse(token: str) -> ParsedToken:
    """Split a token into its parts; any deviation from the grammar is a ``FormatError``."""
    if not isinstance(token, str):
        raise FormatError("token must be a string")
    m = _TOKEN_RE.fullmatch(token)
    if not m:
        raise FormatError("token does not match fx-<type>-v2[e].<hash>.<payload>")
    artwork_type, enc, digest, payload = m.groups()
    return ParsedToken(type=artwork_type, encrypted=enc == "e", hash=digest, payload=payload)


def is_valid_format(token: str) -> bool:
    try:
        parse(token)
    except FormatError:
        return False
    return True


def get_token_type(token: str) -> Optional[str]:
    m = _TYPE_RE.match(token or "")
    return m.group(1) if m else None


def is_encrypted_token(token: str) -> bool:
    """True only for well-formed ``v2e`` tokens."""
    try:
        return parse(token).encrypted
    except FormatError:
        return False


def encode_params(artwork_type: str, params: Dict[str, Any], passphrase: Optional[str] = None) -> str:
    """Encode ``params`` into a token; encrypted when a passphrase is given."""
    canonical = canonicalize(params)
    compressed = compress(canonical)
    if passphrase is None:
        return assemble(artwork_type, False, compressed, fingerprint(canonical))
    log.debug("tokens.encode: type=%s encrypted=True canonical_len=%d", artwork_type, len(canonical))
    sealed = cipher.encrypt(compressed.encode("ascii"), passphrase)
    return assemble(artwork_type, True, b64url_encode(sealed))


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON; canonicalize never emits them
    raise ValueError(f"non-standard JSON constant {name}")


def _open_encrypted(parsed: ParsedToken, passphrase: Optional[str]) -> str:
    if not passphrase:
        raise AuthenticationError("encrypted token requires a passphrase")
    try:
        blob = b64url_decode(parsed.payload)
    except (binascii.Error, ValueError) as exc:
        raise FormatError("encrypted payload is not base64url") from exc
    compressed = cipher.decrypt(blob, passphrase)
    try:
        return compressed.decode("ascii")
    except UnicodeDecodeError as exc:
        raise DecompressionError("decrypted payload is not a compressed stream") from exc


def decode_params(token: str, passphrase: Optional[str] = None) -> DecodedToken:
    """Recover the parameter object from a token.

    Raises a :class:`arte.errors.TokenError` subclass on any failure.
    """
    parsed = parse(token)
    compressed = _open_encrypted(parsed, passphrase) if parsed.encrypted else parsed.payload

    canonical = decompress(compressed)
    if not canonical:
        raise DecompressionError("token payload failed to decompress")

    if not parsed.encrypted and fingerprint(canonical) != parsed.hash:
        raise IntegrityError("token fingerprint mismatch")

    try:
        params = json.loads(canonical, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise SerializationError("token payload is not valid JSON") from exc
    if not isinstance(params, dict):
        raise SerializationError("token payload is not a JSON object")
    return DecodedToken(type=parsed.type, params=params, encrypted=parsed.encrypted)
