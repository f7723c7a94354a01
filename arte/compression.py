"""LZ-String compression with a URL-safe Base64 alphabet."""

from __future__ import annotations

import base64
import logging
from typing import Optional

from lzstring import LZString

from arte.utf16 import from_surrogates, to_surrogates

log = logging.getLogger(__name__)

_lz = LZString()

_TO_URLSAFE = str.maketrans("+/", "-_")
_FROM_URLSAFE = str.maketrans("-_", "+/")


def to_urlsafe(b64: str) -> str:
    return b64.translate(_TO_URLSAFE).rstrip("=")


def from_urlsafe(code: str) -> str:
    """Restore the standard alphabet and pad to a multiple of four."""
    b64 = code.translate(_FROM_URLSAFE)
    return b64 + "=" * (-len(b64) % 4)


def b64url_encode(data: bytes) -> str:
    return to_urlsafe(base64.b64encode(data).decode("ascii"))


def b64url_decode(code: str) -> bytes:
    """Strict decode; raises ``binascii.Error`` on characters outside the alphabet."""
    return base64.b64decode(from_urlsafe(code), validate=True)


def compress(text: str) -> str:
    # lzstring works per code point; feed it UTF-16 code units like the browser does
    return to_urlsafe(_lz.compressToBase64(to_surrogates(text)))


def decompress(code: str) -> Optional[str]:
    """Return the original text, or ``None`` when ``code`` is not a valid stream."""
    if not code:
        return None
    try:
        out = _lz.decompressFromBase64(from_urlsafe(code))
    except Exception as exc:
        # lzstring surfaces corrupt input as whatever its decoder trips over
        # (KeyError, IndexError, UnboundLocalError, ...)
        log.debug("compression.decompress: malformed stream err=%r", exc)
        return None
    if not out:
        return None
    try:
        return from_surrogates(out)
    except UnicodeDecodeError:
        return None
