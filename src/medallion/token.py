"""Signed tokens."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Self, TypeVar

import structlog

from . import signature
from .codec import DEFAULT_CODEC, SegmentCodec
from .constants import SEGMENT_SEPARATOR, TOKEN_SEGMENTS
from .exceptions import ParseError
from .header import Header
from .payload import Payload

H = TypeVar("H")
C = TypeVar("C")

__all__ = ["Token"]


class Token(Generic[H, C]):
    """A token composed of a header and a payload.

    A token created from a header and payload can be signed but has nothing
    to verify. A token returned by `parse` remembers the string it was parsed
    from, and verification always uses the exact bytes of that string rather
    than a re-encoding of the header and payload.

    Two tokens are equal if their headers and payloads are equal, regardless
    of the string they were parsed from.

    Parameters
    ----------
    header
        Token header. Defaults to an HS256 header with no extensions.
    payload
        Token payload. Defaults to a payload with no claims.
    codec
        Codec used to encode segments when signing and to decode the
        signature when verifying.
    """

    def __init__(
        self,
        header: Header[H] | None = None,
        payload: Payload[C] | None = None,
        *,
        codec: SegmentCodec = DEFAULT_CODEC,
    ) -> None:
        self._header: Header[H] = header if header is not None else Header()
        self._payload: Payload[C] = (
            payload if payload is not None else Payload()
        )
        self._codec = codec
        self._raw: str | None = None

    @classmethod
    def new(cls, header: Header[H], payload: Payload[C]) -> Self:
        """Create a new unsigned token.

        Parameters
        ----------
        header
            Token header.
        payload
            Token payload.

        Returns
        -------
        Token
            Token that can be signed.
        """
        return cls(header, payload)

    @classmethod
    def parse(
        cls,
        raw: str,
        *,
        header_extensions: type[H] | None = None,
        custom_claims: type[C] | None = None,
        codec: SegmentCodec = DEFAULT_CODEC,
    ) -> Self:
        """Parse an encoded token.

        The signature is not checked. Call `verify` on the result to do that.

        Parameters
        ----------
        raw
            Encoded token.
        header_extensions
            Type of the header extension fields, if any.
        custom_claims
            Type of the custom claims, if any.
        codec
            Codec used to decode the header and payload. The same codec is
            used by `verify` and `sign` on the resulting token.

        Returns
        -------
        Token
            The parsed token.

        Raises
        ------
        medallion.exceptions.DecodeError
            Raised if the header or payload cannot be decoded.
        medallion.exceptions.ParseError
            Raised if the token does not have three non-empty segments.
        """
        segments = raw.split(SEGMENT_SEPARATOR)
        if len(segments) != TOKEN_SEGMENTS:
            msg = f"Token has {len(segments)} segments, not {TOKEN_SEGMENTS}"
            raise ParseError(msg)
        if not all(segments):
            raise ParseError("Token has an empty segment")
        header: Header[H] = Header.from_segment(
            segments[0], header_extensions, codec=codec
        )
        payload: Payload[C] = Payload.from_segment(
            segments[1], custom_claims, codec=codec
        )
        token = cls(header, payload, codec=codec)
        token._raw = raw
        return token

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.header == other.header and self.payload == other.payload

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(header={self._header!r},"
            f" payload={self._payload!r})"
        )

    @property
    def codec(self) -> SegmentCodec:
        """Codec used to encode and decode segments."""
        return self._codec

    @property
    def header(self) -> Header[H]:
        """Token header."""
        return self._header

    @property
    def payload(self) -> Payload[C]:
        """Token payload."""
        return self._payload

    @property
    def raw(self) -> str | None:
        """String the token was parsed from, or `None` if not parsed."""
        return self._raw

    @property
    def signing_input(self) -> str | None:
        """Header and payload segments exactly as parsed, or `None`."""
        if self._raw is None:
            return None
        return self._raw.rsplit(SEGMENT_SEPARATOR, 1)[0]

    @property
    def signature(self) -> bytes | None:
        """Decoded signature of a parsed token, or `None` if not parsed.

        Raises
        ------
        medallion.exceptions.Base64DecodeError
            Raised if the signature segment is not valid base64url.
        """
        if self._raw is None:
            return None
        encoded = self._raw.rsplit(SEGMENT_SEPARATOR, 1)[1]
        return self._codec.decode_bytes(encoded)

    def sign(self, key: bytes | str) -> str:
        """Sign and encode the token.

        The result is deterministic for all supported algorithms.

        Parameters
        ----------
        key
            Shared secret for HMAC algorithms, or PEM or DER encoded private
            key for RSA algorithms.

        Returns
        -------
        str
            The encoded, signed token.

        Raises
        ------
        medallion.exceptions.EncodeError
            Raised if the header or payload cannot be encoded.
        medallion.exceptions.SigningError
            Raised if the key cannot be used with the header's algorithm.
        """
        header = self._header.to_segment(codec=self._codec)
        payload = self._payload.to_segment(codec=self._codec)
        data = f"{header}{SEGMENT_SEPARATOR}{payload}"
        sig = signature.sign(data.encode(), key, self._header.alg)
        return f"{data}{SEGMENT_SEPARATOR}{self._codec.encode_bytes(sig)}"

    def verify(self, key: bytes | str, now: datetime | None = None) -> bool:
        """Verify the token's signature and temporal claims.

        Parameters
        ----------
        key
            Shared secret for HMAC algorithms, or PEM or DER encoded public
            key for RSA algorithms.
        now
            Time at which to check ``nbf`` and ``exp``. Defaults to the
            current time. Naive times are taken to be in UTC.

        Returns
        -------
        bool
            `True` if the token was parsed, its signature matches according
            to the header's algorithm, and its claims are currently valid.
            `False` otherwise, including for tokens that were never parsed.

        Raises
        ------
        medallion.exceptions.Base64DecodeError
            Raised if the signature segment is not valid base64url.
        medallion.exceptions.SigningError
            Raised if the key cannot be used with the header's algorithm.
        """
        logger = structlog.get_logger("medallion")
        if self._raw is None:
            logger.debug("Token was not parsed, nothing to verify")
            return False
        alg = self._header.alg
        sig = self.signature
        data = self.signing_input
        assert sig is not None
        assert data is not None
        if not signature.verify(sig, data.encode(), key, alg):
            logger.debug("Token signature is invalid", alg=alg.value)
            return False
        if not self._payload.is_currently_valid(now):
            logger.debug(
                "Token claims are not currently valid",
                alg=alg.value,
                **self._claims_context(),
            )
            return False
        return True

    def _claims_context(self) -> dict[str, Any]:
        """Return the temporal claims as a logging context."""
        registered = self._payload.registered
        context: dict[str, Any] = {}
        if registered.nbf:
            context["nbf"] = registered.nbf.isoformat()
        if registered.exp:
            context["exp"] = registered.exp.isoformat()
        return context
