"""Helpers for reproducing JavaScript string and integer semantics.

Tokens are produced and consumed by browser code too, so hashing has to walk
UTF-16 code units (``charCodeAt``) and wrap like 32-bit signed integers.
"""

from __future__ import annotations

from typing import List

UINT32_MASK = 0xFFFFFFFF


def int32(value: int) -> int:
    """Truncate to a signed 32-bit two's-complement integer."""
    value &= UINT32_MASK
    if value & 0x80000000:
        return value - 0x100000000
    return value


def uint32(value: int) -> int:
    return value & UINT32_MASK


def code_units(text: str) -> List[int]:
    """Return the UTF-16 code units of ``text`` (astral chars become surrogate pairs)."""
    raw = text.encode("utf-16-le", "surrogatepass")
    return [raw[i] | (raw[i + 1] << 8) for i in range(0, len(raw), 2)]


def to_surrogates(text: str) -> str:
    """Spell astral characters as two surrogate code points."""
    if all(ord(ch) <= 0xFFFF for ch in text):
        return text
    return "".join(chr(u) for u in code_units(text))


def from_surrogates(text: str) -> str:
    """Inverse of :func:`to_surrogates`; raises ``UnicodeDecodeError`` on lone surrogates."""
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
