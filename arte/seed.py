"""Token seeding: token strings to reproducible integers and random streams."""

from __future__ import annotations

import secrets
from typing import Callable, List

from arte.utf16 import code_units, int32, uint32

TOKEN_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
RANDOM_PART_LEN = 48
LEGACY_TOKEN_LEN = 3 + RANDOM_PART_LEN + 2


def token_to_seed(token: str) -> int:
    """Map a token to a non-negative 32-bit seed.

    ``seed = seed * 31 + c`` over UTF-16 code units, wrapped to int32 on
    every step, so the browser produces the same number bit for bit.
    """
    seed = 0
    for c in code_units(token):
        seed = int32((seed << 5) - seed + c)
    return abs(seed)


def _checksum(random_part: str) -> str:
    return format(sum(ord(ch) for ch in random_part) % 256, "02x")


def generate_token() -> str:
    """Fresh ``fx-`` token: 48 random alphabet chars plus a 2-hex checksum."""
    random_part = "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(RANDOM_PART_LEN))
    return f"fx-{random_part}{_checksum(random_part)}"


def validate_token(token: str) -> bool:
    if not token.startswith("fx-") or len(token) != LEGACY_TOKEN_LEN:
        return False
    random_part = token[3:3 + RANDOM_PART_LEN]
    return token[3 + RANDOM_PART_LEN:] == _checksum(random_part)


def lane_hashes(token: str) -> List[int]:
    """Four interleaved seed accumulators (char ``i`` feeds lane ``i % 4``)."""
    lanes = [0, 0, 0, 0]
    for i, c in enumerate(code_units(token)):
        h = lanes[i % 4]
        lanes[i % 4] = int32((h << 5) - h + c)
    return [abs(h) for h in lanes]


def sfc32(a: int, b: int, c: int, d: int) -> Callable[[], float]:
    """Small Fast Chaotic PRNG, matching the browser implementation exactly."""
    state = [uint32(a), uint32(b), uint32(c), uint32(d)]

    def next_float() -> float:
        a, b, c, d = state
        t = uint32(a + b)
        a = b ^ (b >> 9)
        b = uint32(c + (c << 3))
        c = uint32((c << 21) | (c >> 11))
        d = uint32(d + 1)
        t = uint32(t + d)
        c = uint32(c + t)
        state[:] = [a, b, c, d]
        return t / 4294967296

    return next_float


def create_seeded_random(token: str) -> Callable[[], float]:
    """Deterministic ``[0, 1)`` generator for artwork parameters."""
    return sfc32(*lane_hashes(token))
