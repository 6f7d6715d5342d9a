"""Token header."""

from __future__ import annotations

from typing import Any, Generic, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .algorithm import Algorithm
from .codec import DEFAULT_CODEC, SegmentCodec
from .exceptions import JsonDecodeError
from .fields import merge_fields, validate_fields

E = TypeVar("E")

_ALGORITHM_ADAPTER = TypeAdapter(Algorithm)

__all__ = ["HEADER_FIELDS", "Header"]

HEADER_FIELDS = frozenset({"alg"})
"""Names of the fixed header fields, which extensions must not reuse."""


class Header(BaseModel, Generic[E]):
    """Header of a token.

    The header carries the signature algorithm plus optional extension fields
    defined by the caller, such as ``kid`` or ``typ``. It is serialized as a
    single flat JSON object containing ``alg`` and all fields of the
    extensions. Extensions may not define a field named ``alg``.

    Unlike the payload, there is no default extension type, since the
    extensions used in headers vary greatly between applications.
    """

    model_config = ConfigDict(frozen=True)

    alg: Algorithm = Field(
        Algorithm.HS256,
        title="Algorithm",
        description="Algorithm used to sign and verify the token",
    )

    extensions: E | None = Field(
        None,
        title="Extension fields",
        description="Caller-defined fields merged into the header",
    )

    @classmethod
    def from_segment(
        cls,
        segment: str,
        extensions_type: type[E] | None = None,
        *,
        codec: SegmentCodec = DEFAULT_CODEC,
    ) -> Self:
        """Decode a header from its encoded segment.

        Parameters
        ----------
        segment
            Encoded header segment.
        extensions_type
            Type of the extension fields. If not given, or if the decoded
            header does not validate against this type, ``extensions`` will
            be `None`.
        codec
            Codec used to decode the segment.

        Returns
        -------
        Header
            The decoded header.

        Raises
        ------
        medallion.exceptions.Base64DecodeError
            Raised if the segment is not valid base64url.
        medallion.exceptions.JsonDecodeError
            Raised if the segment is not a JSON object or does not contain a
            supported ``alg`` field.
        """
        data = codec.decode(segment)
        if "alg" not in data:
            raise JsonDecodeError("Header has no alg field")
        try:
            alg = _ALGORITHM_ADAPTER.validate_python(data["alg"])
        except ValidationError as e:
            msg = f"Unsupported algorithm in header: {data['alg']!r}"
            raise JsonDecodeError(msg) from e
        extensions = None
        if extensions_type is not None:
            extensions = validate_fields(data, extensions_type)
        return cls(alg=alg, extensions=extensions)

    def to_fields(self) -> dict[str, Any]:
        """Return the flat JSON object representing this header.

        Returns
        -------
        dict of Any
            The ``alg`` field merged with all extension fields.

        Raises
        ------
        medallion.exceptions.EncodeError
            Raised if the extensions do not serialize to a JSON object or
            define an ``alg`` field.
        """
        return merge_fields(
            {"alg": self.alg.value},
            self.extensions,
            reserved=HEADER_FIELDS,
            kind="header extensions",
        )

    def to_segment(self, *, codec: SegmentCodec = DEFAULT_CODEC) -> str:
        """Encode the header as a token segment.

        Parameters
        ----------
        codec
            Codec used to encode the segment.

        Returns
        -------
        str
            Encoded header segment.

        Raises
        ------
        medallion.exceptions.EncodeError
            Raised if the extensions cannot be merged into the header.
        """
        return codec.encode(self.to_fields())
