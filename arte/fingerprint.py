"""Short non-cryptographic fingerprint over canonical token text.

Catches corruption and truncation of plain tokens. It is unkeyed and anyone
can recompute it, so it is no defense against deliberate edits. Changing the
algorithm changes the wire format and invalidates issued tokens.
"""

from __future__ import annotations

from arte.utf16 import code_units, int32, uint32

FINGERPRINT_LEN = 16


def _djb2_xor(units) -> int:
    h = 5381
    for c in units:
        h = int32((h << 5) + h) ^ c
    return uint32(h)


def _sdbm(units) -> int:
    h = 0
    for c in units:
        h = uint32(c + (h << 6) + (h << 16) - h)
    return h


def fingerprint(text: str) -> str:
    """16 lowercase hex chars: unpadded hex of both hashes, left-padded, cut to 16."""
    units = code_units(text)
    joined = format(_djb2_xor(units), "x") + format(_sdbm(units), "x")
    return joined.rjust(FINGERPRINT_LEN, "0")[:FINGERPRINT_LEN]
