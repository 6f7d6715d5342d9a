"""Token payload (claims)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from safir.datetime import current_datetime
from safir.pydantic import normalize_datetime

from .codec import DEFAULT_CODEC, SegmentCodec
from .exceptions import JsonDecodeError
from .fields import merge_fields, validate_fields
from .types import Timestamp

C = TypeVar("C")

__all__ = ["REGISTERED_CLAIMS", "Payload", "RegisteredClaims"]


class RegisteredClaims(BaseModel):
    """The registered claims of a token.

    All claims are optional and omitted from the encoded payload if not set.
    Only ``nbf`` and ``exp`` affect validity.
    """

    model_config = ConfigDict(frozen=True)

    iss: str | None = Field(None, title="Issuer")

    sub: str | None = Field(None, title="Subject")

    aud: str | list[str] | None = Field(None, title="Audience")

    exp: Timestamp | None = Field(
        None,
        title="Expiration time",
        description="The token is not valid at or after this time",
    )

    nbf: Timestamp | None = Field(
        None,
        title="Not before",
        description="The token is not valid before this time",
    )

    iat: Timestamp | None = Field(None, title="Issued at")

    jti: str | None = Field(None, title="Token ID")


REGISTERED_CLAIMS = frozenset(RegisteredClaims.model_fields)
"""Names of the registered claims, which custom claims must not reuse."""


def _resolve_now(now: datetime | None) -> datetime:
    """Return the time to check validity against, in UTC.

    Naive times are assumed to be in UTC.
    """
    if now is None:
        return current_datetime()
    normalized = normalize_datetime(now)
    assert normalized is not None
    return normalized


class Payload(BaseModel, Generic[C]):
    """Payload of a token.

    The payload carries the registered claims plus optional custom claims
    defined by the caller. It is serialized as a single flat JSON object
    containing the registered claims that are set and all fields of the
    custom claims. Custom claims may not use the name of a registered claim.
    """

    model_config = ConfigDict(frozen=True)

    registered: RegisteredClaims = Field(
        default_factory=RegisteredClaims, title="Registered claims"
    )

    custom: C | None = Field(
        None,
        title="Custom claims",
        description="Caller-defined claims merged into the payload",
    )

    @classmethod
    def from_segment(
        cls,
        segment: str,
        custom_type: type[C] | None = None,
        *,
        codec: SegmentCodec = DEFAULT_CODEC,
    ) -> Self:
        """Decode a payload from its encoded segment.

        Parameters
        ----------
        segment
            Encoded payload segment.
        custom_type
            Type of the custom claims. If not given, or if the decoded
            payload does not validate against this type, ``custom`` will be
            `None`.
        codec
            Codec used to decode the segment.

        Returns
        -------
        Payload
            The decoded payload.

        Raises
        ------
        medallion.exceptions.Base64DecodeError
            Raised if the segment is not valid base64url.
        medallion.exceptions.JsonDecodeError
            Raised if the segment is not a JSON object or one of the
            registered claims is present but invalid.
        """
        data = codec.decode(segment)
        try:
            registered = RegisteredClaims.model_validate(data)
        except ValidationError as e:
            raise JsonDecodeError(f"Invalid registered claims: {e}") from e
        custom = None
        if custom_type is not None:
            custom = validate_fields(data, custom_type)
        return cls(registered=registered, custom=custom)

    def to_fields(self) -> dict[str, Any]:
        """Return the flat JSON object representing this payload.

        Returns
        -------
        dict of Any
            The registered claims that are set merged with the custom claims.

        Raises
        ------
        medallion.exceptions.EncodeError
            Raised if the custom claims do not serialize to a JSON object or
            use the name of a registered claim.
        """
        return merge_fields(
            self.registered.model_dump(mode="json", exclude_none=True),
            self.custom,
            reserved=REGISTERED_CLAIMS,
            kind="custom claims",
        )

    def to_segment(self, *, codec: SegmentCodec = DEFAULT_CODEC) -> str:
        """Encode the payload as a token segment.

        Parameters
        ----------
        codec
            Codec used to encode the segment.

        Returns
        -------
        str
            Encoded payload segment.

        Raises
        ------
        medallion.exceptions.EncodeError
            Raised if the custom claims cannot be merged into the payload.
        """
        return codec.encode(self.to_fields())

    def expired(self, now: datetime | None = None) -> bool:
        """Whether the expiration time has been reached.

        Parameters
        ----------
        now
            Time to check against. Defaults to the current time. Naive
            times are taken to be in UTC.
        """
        now = _resolve_now(now)
        exp = self.registered.exp
        return exp is not None and exp <= now

    def not_yet_valid(self, now: datetime | None = None) -> bool:
        """Whether the not-before time is still in the future.

        Parameters
        ----------
        now
            Time to check against. Defaults to the current time. Naive
            times are taken to be in UTC.
        """
        now = _resolve_now(now)
        nbf = self.registered.nbf
        return nbf is not None and nbf > now

    def is_currently_valid(self, now: datetime | None = None) -> bool:
        """Check the temporal validity of the claims.

        The token is valid from ``nbf``, inclusive, until ``exp``, exclusive.
        A missing bound imposes no constraint.

        Parameters
        ----------
        now
            Time to check against. Defaults to the current time. Naive
            times are taken to be in UTC. The same time is used for both
            bounds.

        Returns
        -------
        bool
            `True` if the claims are valid at that time, `False` otherwise.
        """
        now = _resolve_now(now)
        return not (self.not_yet_valid(now) or self.expired(now))
