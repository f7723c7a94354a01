"""Token decode failures.

Every failure is terminal for a single decode call. The HTTP layer shows one
generic message to the user and logs ``kind`` for diagnostics.
"""

from __future__ import annotations


class TokenError(ValueError):
    """Base class for anything that makes a token unusable."""

    kind = "token_error"


class FormatError(TokenError):
    """Token does not match the ``fx-<type>-v2[e].<hash>.<payload>`` grammar."""

    kind = "format"


class DecompressionError(TokenError):
    """Payload decompressed to nothing (corrupt or truncated)."""

    kind = "decompression"


class IntegrityError(TokenError):
    """Fingerprint of the decompressed text does not match the token hash."""

    kind = "integrity"


class AuthenticationError(TokenError):
    """Encrypted payload failed tag verification (wrong key or tampered)."""

    kind = "authentication"


class SerializationError(TokenError):
    """Decompressed text is not a JSON object."""

    kind = "serialization"
