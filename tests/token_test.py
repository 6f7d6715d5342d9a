"""Tests for parsing, signing, and verifying tokens."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import BaseModel
from safir.datetime import current_datetime

from medallion import (
    Algorithm,
    Base64DecodeError,
    Base64Variant,
    DecodeError,
    EncodeError,
    Header,
    InvalidKeyError,
    MedallionError,
    ParseError,
    Payload,
    RegisteredClaims,
    RSAKeyPair,
    SegmentCodec,
    Token,
    sign,
)
from medallion.codec import encode_segment

from .support.constants import HMAC_SECRET, JWT_IO_TOKEN, OTHER_KEYPAIR
from .support.tokens import create_token, signing_key, verifying_key


class TypeHeader(BaseModel):
    typ: str


class AppClaims(BaseModel):
    name: str
    admin: bool


def test_raw_data() -> None:
    token = Token.parse(JWT_IO_TOKEN)

    assert token.header.alg == Algorithm.HS256
    assert token.raw == JWT_IO_TOKEN
    assert token.verify(HMAC_SECRET)
    assert token.verify("secret")
    assert not token.verify(b"other")


def test_raw_data_typed() -> None:
    token = Token.parse(
        JWT_IO_TOKEN, header_extensions=TypeHeader, custom_claims=AppClaims
    )
    assert token.header.extensions == TypeHeader(typ="JWT")
    assert token.payload.registered.sub == "1234567890"
    assert token.payload.custom == AppClaims(name="John Doe", admin=True)

    # Equal to a token built from the same content even though the encoded
    # form differs in key order.
    same = Token.new(
        Header[TypeHeader](extensions=TypeHeader(typ="JWT")),
        Payload[AppClaims](
            registered=RegisteredClaims(sub="1234567890"),
            custom=AppClaims(name="John Doe", admin=True),
        ),
    )
    assert token == same
    encoded = same.sign(HMAC_SECRET)
    assert encoded != JWT_IO_TOKEN
    assert Token.parse(encoded).verify(HMAC_SECRET)


def test_signing_input() -> None:
    token = Token.parse(JWT_IO_TOKEN)
    header, payload, signature = JWT_IO_TOKEN.split(".")
    assert token.signing_input == f"{header}.{payload}"
    assert token.signature == SegmentCodec().decode_bytes(signature)

    unparsed = Token()
    assert unparsed.raw is None
    assert unparsed.signing_input is None
    assert unparsed.signature is None


def test_roundtrip_hmac() -> None:
    now = current_datetime()
    token = create_token(nbf=now, exp=now + timedelta(minutes=5))
    raw = token.sign(HMAC_SECRET)
    same = Token.parse(raw)

    assert token == same
    assert same.verify(HMAC_SECRET)
    assert not same.verify(b"wrong")


def test_roundtrip_expired() -> None:
    now = current_datetime()
    token = create_token(nbf=now, exp=now - timedelta(minutes=5))
    raw = token.sign(HMAC_SECRET)
    same = Token.parse(raw)

    assert token == same
    assert not same.verify(HMAC_SECRET)


def test_roundtrip_not_yet_valid() -> None:
    now = current_datetime()
    token = create_token(
        nbf=now + timedelta(minutes=5), exp=now + timedelta(minutes=10)
    )
    raw = token.sign(HMAC_SECRET)
    same = Token.parse(raw)

    assert token == same
    assert not same.verify(HMAC_SECRET)
    assert same.verify(HMAC_SECRET, now + timedelta(minutes=5))
    assert not same.verify(HMAC_SECRET, now + timedelta(minutes=10))


def test_roundtrip_rsa(keypair: RSAKeyPair) -> None:
    token = Token.new(Header(alg=Algorithm.RS512), Payload())
    raw = token.sign(keypair.private_key_as_pem())
    same = Token.parse(raw)

    assert token == same
    assert same.verify(keypair.public_key_as_pem())
    assert not same.verify(OTHER_KEYPAIR.public_key_as_pem())


@pytest.mark.parametrize("alg", list(Algorithm))
def test_all_algorithms(alg: Algorithm) -> None:
    now = current_datetime()
    token = Token.new(
        Header[TypeHeader](alg=alg, extensions=TypeHeader(typ="JWT")),
        Payload[AppClaims](
            registered=RegisteredClaims(
                sub="some-user", nbf=now, exp=now + timedelta(minutes=5)
            ),
            custom=AppClaims(name="Some User", admin=False),
        ),
    )
    raw = token.sign(signing_key(alg))
    assert token.sign(signing_key(alg)) == raw

    same = Token.parse(
        raw, header_extensions=TypeHeader, custom_claims=AppClaims
    )
    assert same.header == token.header
    assert same.payload == token.payload
    assert same.verify(verifying_key(alg))

    expired = create_token(alg, exp=now - timedelta(minutes=5))
    parsed = Token.parse(expired.sign(signing_key(alg)))
    assert not parsed.verify(verifying_key(alg))


def test_key_mismatch(keypair: RSAKeyPair) -> None:
    token = Token.parse(create_token().sign(HMAC_SECRET))
    assert not token.verify(b"not-the-secret")

    keypair_pem = keypair.private_key_as_pem()
    token = Token.parse(create_token(Algorithm.RS256).sign(keypair_pem))
    assert not token.verify(OTHER_KEYPAIR.public_key_as_pem())
    with pytest.raises(InvalidKeyError):
        token.verify(HMAC_SECRET)
    with pytest.raises(InvalidKeyError):
        token.verify(keypair.private_key_as_pem())


def test_unparsed() -> None:
    token = create_token()
    assert not token.verify(HMAC_SECRET)
    assert not token.verify(b"")

    token = create_token(Algorithm.RS256)
    assert not token.verify(b"not a key")


def test_corruption() -> None:
    now = current_datetime()
    token = create_token(nbf=now, exp=now + timedelta(minutes=5))
    raw = token.sign(HMAC_SECRET)
    assert Token.parse(raw).verify(HMAC_SECRET)

    for i, char in enumerate(raw):
        if char == ".":
            continue
        replacement = "A" if char != "A" else "B"
        corrupted = raw[:i] + replacement + raw[i + 1 :]
        try:
            valid = Token.parse(corrupted).verify(HMAC_SECRET)
        except MedallionError:
            continue
        assert not valid, f"Corruption at position {i} not detected"


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "abc",
        "eyJhbGciOiJIUzI1NiJ9.e30",
        "eyJhbGciOiJIUzI1NiJ9.e30.sig.extra",
        "eyJhbGciOiJIUzI1NiJ9..c2ln",
        ".e30.c2ln",
        "eyJhbGciOiJIUzI1NiJ9.e30.",
    ],
)
def test_parse_invalid(raw: str) -> None:
    with pytest.raises(ParseError):
        Token.parse(raw)


def test_parse_decode_error() -> None:
    with pytest.raises(DecodeError):
        Token.parse("eyJhbGciOiJub25lIn0.e30.c2ln")
    with pytest.raises(DecodeError):
        Token.parse("not!base64.e30.c2ln")
    with pytest.raises(DecodeError):
        Token.parse("eyJhbGciOiJIUzI1NiJ9.W10.c2ln")


def test_padded() -> None:
    codec = SegmentCodec(Base64Variant.padded)
    token = Token.new(Header(), Payload(registered=RegisteredClaims(sub="a")))
    raw = Token(token.header, token.payload, codec=codec).sign(HMAC_SECRET)
    assert raw.endswith("=")

    same = Token.parse(raw, codec=codec)
    assert same == token
    assert same.codec == codec
    assert same.verify(HMAC_SECRET)
    assert Token.parse(same.sign(HMAC_SECRET), codec=codec) == token

    with pytest.raises(Base64DecodeError):
        Token.parse(raw).verify(HMAC_SECRET)


def test_equality() -> None:
    now = current_datetime()
    token = create_token(exp=now)
    assert token == create_token(exp=now)
    assert token != create_token(exp=now + timedelta(seconds=1))
    assert token != create_token(Algorithm.HS512, exp=now)
    assert token != "token"


def test_far_future_expiration() -> None:
    header = encode_segment({"alg": "HS256"})
    payload = encode_segment({"exp": 30000000000, "sub": "some-user"})
    data = f"{header}.{payload}"
    sig = sign(data.encode(), HMAC_SECRET, Algorithm.HS256)
    raw = f"{data}.{SegmentCodec().encode_bytes(sig)}"

    token = Token.parse(raw)
    exp = token.payload.registered.exp
    assert exp == datetime.fromtimestamp(30000000000, tz=UTC)
    assert token.verify(HMAC_SECRET)


def test_sign_unserializable_claims() -> None:
    class OpaqueClaims:
        pass

    token = Token.new(Header(), Payload(custom=OpaqueClaims()))
    with pytest.raises(EncodeError):
        token.sign(HMAC_SECRET)


def test_verify_naive_now() -> None:
    start = datetime(2024, 1, 1, tzinfo=UTC)
    token = create_token(nbf=start, exp=start + timedelta(hours=1))
    parsed = Token.parse(token.sign(HMAC_SECRET))
    assert parsed.verify(HMAC_SECRET, datetime(2024, 1, 1, 0, 30))
    assert not parsed.verify(HMAC_SECRET, datetime(2024, 1, 1, 2, 0))
