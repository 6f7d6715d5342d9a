"""Constants for Medallion."""

__all__ = [
    "ENV_PREFIX",
    "RSA_KEY_SIZE",
    "RSA_PUBLIC_EXPONENT",
    "SEGMENT_SEPARATOR",
    "TOKEN_SEGMENTS",
]

ENV_PREFIX = "MEDALLION_"
"""Prefix for all environment variables that override configuration."""

RSA_KEY_SIZE = 2048
"""Size in bits of newly-generated RSA keys."""

RSA_PUBLIC_EXPONENT = 65537
"""Public exponent of newly-generated RSA keys."""

SEGMENT_SEPARATOR = "."
"""Separator between the segments of an encoded token."""

TOKEN_SEGMENTS = 3
"""Number of segments in an encoded token (header, payload, signature)."""
