"""Exceptions for Medallion."""

from __future__ import annotations

__all__ = [
    "Base64DecodeError",
    "CryptoError",
    "DecodeError",
    "EncodeError",
    "InvalidKeyError",
    "JsonDecodeError",
    "MedallionError",
    "ParseError",
    "SigningError",
]


class MedallionError(Exception):
    """Base class for all Medallion exceptions."""


class DecodeError(MedallionError):
    """A token segment could not be decoded."""


class Base64DecodeError(DecodeError):
    """A token segment is not valid base64url in the configured variant."""


class JsonDecodeError(DecodeError):
    """A token segment is not a JSON object of the expected shape.

    Raised for invalid UTF-8, invalid JSON, JSON that is not an object, and
    objects whose required fields are missing or invalid.
    """


class EncodeError(MedallionError):
    """A header or payload could not be serialized.

    Raised if extension fields or custom claims don't serialize to a JSON
    object, or if one of their field names collides with a fixed field.
    """


class ParseError(MedallionError):
    """An encoded token does not have three non-empty segments."""


class SigningError(MedallionError):
    """Signing or verification could not be performed with the given key.

    This is distinct from a verification that ran and returned `False`. It
    indicates caller misconfiguration rather than a forged or expired token.
    """


class InvalidKeyError(SigningError):
    """The key is in an unsupported encoding or of the wrong type.

    A public key passed for signing, a private key passed for verification,
    and a non-RSA key passed for an RSA algorithm all raise this exception.
    """


class CryptoError(SigningError):
    """The underlying cryptographic primitive failed.

    Usually this means the key material was recognized but is malformed.
    """
