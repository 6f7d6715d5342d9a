"""Construction, encoding, and verification of signed tokens."""

from .algorithm import Algorithm, AlgorithmFamily
from .codec import DEFAULT_CODEC, Base64Variant, SegmentCodec
from .exceptions import (
    Base64DecodeError,
    CryptoError,
    DecodeError,
    EncodeError,
    InvalidKeyError,
    JsonDecodeError,
    MedallionError,
    ParseError,
    SigningError,
)
from .header import Header
from .keypair import RSAKeyPair
from .payload import Payload, RegisteredClaims
from .signature import sign, verify
from .token import Token

__all__ = [
    "DEFAULT_CODEC",
    "Algorithm",
    "AlgorithmFamily",
    "Base64DecodeError",
    "Base64Variant",
    "CryptoError",
    "DecodeError",
    "EncodeError",
    "Header",
    "InvalidKeyError",
    "JsonDecodeError",
    "MedallionError",
    "ParseError",
    "Payload",
    "RSAKeyPair",
    "RegisteredClaims",
    "SegmentCodec",
    "SigningError",
    "Token",
    "sign",
    "verify",
]
