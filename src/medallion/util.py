"""General utility functions."""

from __future__ import annotations

__all__ = [
    "add_padding",
    "as_bytes",
]


def add_padding(encoded: str) -> str:
    """Add padding to base64 encoded bytes.

    Parameters
    ----------
    encoded
        A base64-encoded string, possibly with the padding removed.

    Returns
    -------
    str
        A correctly-padded version of the encoded string.
    """
    underflow = len(encoded) % 4
    if underflow:
        return encoded + ("=" * (4 - underflow))
    else:
        return encoded


def as_bytes(data: bytes | str) -> bytes:
    """Convert key material or other input to bytes.

    Parameters
    ----------
    data
        Raw bytes, or a string that will be encoded in UTF-8.

    Returns
    -------
    bytes
        The input as bytes.
    """
    if isinstance(data, str):
        return data.encode()
    return data
