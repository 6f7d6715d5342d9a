"""Encoding and decoding of token segments.

Each of the header and payload segments of a token is the canonical JSON
serialization of an object, encoded in the URL-safe base64 alphabet of RFC
4648 section 5. The signature segment uses the same base64 encoding applied
directly to the signature bytes.

The encoding must be byte-for-byte reproducible, since any difference in the
signing input invalidates the signature, and decoding is strict so that any
change to a segment changes the decoded bytes.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from .exceptions import Base64DecodeError, EncodeError, JsonDecodeError
from .util import add_padding

_UNPADDED_REGEX = re.compile(r"[A-Za-z0-9_-]*")
_PADDED_REGEX = re.compile(r"[A-Za-z0-9_-]*={0,2}")

__all__ = [
    "DEFAULT_CODEC",
    "Base64Variant",
    "SegmentCodec",
    "canonical_json",
    "decode_segment",
    "encode_segment",
]


def _reject_constant(name: str) -> Any:
    raise json.JSONDecodeError(f"Invalid constant {name}", name, 0)


class Base64Variant(StrEnum):
    """Padding convention for base64url-encoded segments.

    The padding convention is pinned configuration and must match between the
    party that signs a token and the party that verifies it. It is never
    auto-detected.
    """

    unpadded = "unpadded"
    """Trailing ``=`` padding omitted. The canonical wire form."""

    padded = "padded"
    """Trailing ``=`` padding included. Kept for compatibility only."""


def canonical_json(value: Mapping[str, Any]) -> bytes:
    """Serialize an object to its canonical JSON form.

    Keys are sorted, no insignificant whitespace is emitted, and non-ASCII
    characters are written as UTF-8 rather than escaped.

    Parameters
    ----------
    value
        Object to serialize. Must contain only JSON-compatible values.

    Returns
    -------
    bytes
        UTF-8 encoded canonical JSON.

    Raises
    ------
    medallion.exceptions.EncodeError
        Raised if the object contains values with no JSON representation,
        including NaN and infinite floats.
    """
    try:
        encoded = json.dumps(
            value,
            allow_nan=False,
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=True,
        )
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Cannot encode as JSON: {e}") from e
    return encoded.encode()


class SegmentCodec:
    """Converts between token segments and bytes or JSON objects.

    Parameters
    ----------
    variant
        Padding convention to use for both encoding and decoding.
    """

    def __init__(
        self, variant: Base64Variant = Base64Variant.unpadded
    ) -> None:
        self._variant = variant

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SegmentCodec):
            return NotImplemented
        return self._variant == other._variant

    def __hash__(self) -> int:
        return hash(self._variant)

    def __repr__(self) -> str:
        return f"SegmentCodec({self._variant.value!r})"

    @property
    def variant(self) -> Base64Variant:
        """Padding convention used by this codec."""
        return self._variant

    def encode_bytes(self, data: bytes) -> str:
        """Encode bytes in base64url.

        Parameters
        ----------
        data
            Bytes to encode.

        Returns
        -------
        str
            Encoded form, with or without padding depending on the variant.
        """
        encoded = base64.urlsafe_b64encode(data).decode()
        if self._variant == Base64Variant.unpadded:
            return encoded.rstrip("=")
        return encoded

    def decode_bytes(self, segment: str) -> bytes:
        """Decode a base64url segment to bytes.

        Parameters
        ----------
        segment
            Encoded segment.

        Returns
        -------
        bytes
            Decoded bytes.

        Raises
        ------
        medallion.exceptions.Base64DecodeError
            Raised if the segment contains characters outside the URL-safe
            alphabet, does not follow the padding convention of this codec,
            has an impossible length, or is not the canonical encoding of the
            bytes it decodes to.
        """
        if self._variant == Base64Variant.unpadded:
            if not _UNPADDED_REGEX.fullmatch(segment):
                msg = "Segment contains characters outside base64url alphabet"
                raise Base64DecodeError(msg)
            padded = add_padding(segment)
        else:
            if not _PADDED_REGEX.fullmatch(segment):
                msg = "Segment contains characters outside base64url alphabet"
                raise Base64DecodeError(msg)
            if len(segment) % 4:
                raise Base64DecodeError("Segment is not correctly padded")
            padded = segment
        try:
            data = base64.urlsafe_b64decode(padded)
        except (binascii.Error, ValueError) as e:
            raise Base64DecodeError(f"Invalid base64url segment: {e}") from e
        if self.encode_bytes(data) != segment:
            raise Base64DecodeError("Segment is not canonically encoded")
        return data

    def encode(self, value: Mapping[str, Any]) -> str:
        """Encode an object as a segment.

        Parameters
        ----------
        value
            Object to encode. Must contain only JSON-compatible values.

        Returns
        -------
        str
            Base64url encoding of the canonical JSON form of the object.

        Raises
        ------
        medallion.exceptions.EncodeError
            Raised if the object has no canonical JSON form.
        """
        return self.encode_bytes(canonical_json(value))

    def decode(self, segment: str) -> dict[str, Any]:
        """Decode a segment into an object.

        Parameters
        ----------
        segment
            Encoded segment.

        Returns
        -------
        dict of Any
            Decoded JSON object.

        Raises
        ------
        medallion.exceptions.Base64DecodeError
            Raised if the segment is not valid base64url.
        medallion.exceptions.JsonDecodeError
            Raised if the decoded bytes are not UTF-8 JSON or the JSON value
            is not an object.
        """
        data = self.decode_bytes(segment)
        try:
            value = json.loads(data.decode(), parse_constant=_reject_constant)
        except UnicodeDecodeError as e:
            raise JsonDecodeError(f"Segment is not valid UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise JsonDecodeError(f"Segment is not valid JSON: {e}") from e
        if not isinstance(value, dict):
            msg = f"Segment is a JSON {type(value).__name__}, not an object"
            raise JsonDecodeError(msg)
        return value


DEFAULT_CODEC = SegmentCodec(Base64Variant.unpadded)
"""Codec using the canonical unpadded wire form."""


def encode_segment(value: Mapping[str, Any]) -> str:
    """Encode an object as a segment using the default codec.

    Parameters
    ----------
    value
        Object to encode.

    Returns
    -------
    str
        Encoded segment.
    """
    return DEFAULT_CODEC.encode(value)


def decode_segment(segment: str) -> dict[str, Any]:
    """Decode a segment into an object using the default codec.

    Parameters
    ----------
    segment
        Encoded segment.

    Returns
    -------
    dict of Any
        Decoded JSON object.
    """
    return DEFAULT_CODEC.decode(segment)
