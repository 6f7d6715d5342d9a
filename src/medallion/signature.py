"""Creation and verification of token signatures.

Dispatch is strictly on the algorithm. HMAC algorithms treat the key as a
shared secret. RSA algorithms treat the key as a PEM or DER encoded private
key when signing and a public key when verifying. Key material that cannot
be used raises a `~medallion.exceptions.SigningError`; a signature that
simply doesn't match returns `False`.
"""

from __future__ import annotations

import re

import structlog
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.serialization import (
    load_der_private_key,
    load_der_public_key,
    load_pem_private_key,
    load_pem_public_key,
)

from .algorithm import Algorithm, AlgorithmFamily
from .exceptions import CryptoError, InvalidKeyError
from .util import as_bytes

_PEM_LABEL_REGEX = re.compile(rb"-----BEGIN ([A-Z0-9 ]+)-----")

__all__ = [
    "load_private_key",
    "load_public_key",
    "sign",
    "verify",
]


def _pem_label(key: bytes) -> str | None:
    """Return the label of the first PEM block, or `None` if not PEM."""
    match = _PEM_LABEL_REGEX.search(key)
    return match.group(1).decode() if match else None


def load_private_key(key: bytes | str) -> rsa.RSAPrivateKey:
    """Load an RSA private key for signing.

    Parameters
    ----------
    key
        Unencrypted private key in PEM or DER encoding.

    Returns
    -------
    cryptography.hazmat.primitives.asymmetric.rsa.RSAPrivateKey
        The loaded private key.

    Raises
    ------
    medallion.exceptions.CryptoError
        Raised if the key is PEM-encoded but malformed.
    medallion.exceptions.InvalidKeyError
        Raised if the key is not PEM or DER, is encrypted, or is not an RSA
        private key.
    """
    key = as_bytes(key)
    label = _pem_label(key)
    if label is not None and "PRIVATE KEY" not in label:
        raise InvalidKeyError(f"Expected an RSA private key, got {label}")
    try:
        if label is not None:
            private_key = load_pem_private_key(key, password=None)
        else:
            private_key = load_der_private_key(key, password=None)
    except TypeError as e:
        msg = "Encrypted private keys are not supported"
        raise InvalidKeyError(msg) from e
    except UnsupportedAlgorithm as e:
        raise InvalidKeyError(f"Unsupported private key type: {e}") from e
    except ValueError as e:
        if label is None:
            raise InvalidKeyError("Key is not in PEM or DER encoding") from e
        raise CryptoError(f"Cannot load private key: {e}") from e
    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise InvalidKeyError("Key is not an RSA private key")
    return private_key


def load_public_key(key: bytes | str) -> rsa.RSAPublicKey:
    """Load an RSA public key for verification.

    Parameters
    ----------
    key
        Public key in PEM or DER encoding, in either SubjectPublicKeyInfo or
        PKCS#1 format.

    Returns
    -------
    cryptography.hazmat.primitives.asymmetric.rsa.RSAPublicKey
        The loaded public key.

    Raises
    ------
    medallion.exceptions.CryptoError
        Raised if the key is PEM-encoded but malformed.
    medallion.exceptions.InvalidKeyError
        Raised if the key is not PEM or DER or is not an RSA public key.
    """
    key = as_bytes(key)
    label = _pem_label(key)
    if label is not None and "PUBLIC KEY" not in label:
        raise InvalidKeyError(f"Expected an RSA public key, got {label}")
    try:
        if label is not None:
            public_key = load_pem_public_key(key)
        else:
            public_key = load_der_public_key(key)
    except UnsupportedAlgorithm as e:
        raise InvalidKeyError(f"Unsupported public key type: {e}") from e
    except ValueError as e:
        if label is None:
            raise InvalidKeyError("Key is not in PEM or DER encoding") from e
        raise CryptoError(f"Cannot load public key: {e}") from e
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise InvalidKeyError("Key is not an RSA public key")
    return public_key


def sign(message: bytes, key: bytes | str, alg: Algorithm) -> bytes:
    """Sign a message.

    Parameters
    ----------
    message
        Message to sign, normally the signing input of a token.
    key
        Shared secret for HMAC algorithms, or private key for RSA algorithms.
    alg
        Algorithm to use.

    Returns
    -------
    bytes
        Raw signature.

    Raises
    ------
    medallion.exceptions.SigningError
        Raised if the key cannot be used with this algorithm.
    """
    digest = alg.hash_algorithm()
    match alg.family:
        case AlgorithmFamily.hmac:
            h = hmac.HMAC(as_bytes(key), digest)
            h.update(message)
            return h.finalize()
        case AlgorithmFamily.rsa:
            private_key = load_private_key(key)
            try:
                return private_key.sign(message, padding.PKCS1v15(), digest)
            except ValueError as e:
                raise CryptoError(f"Cannot sign with {alg.value}: {e}") from e


def verify(
    signature: bytes, message: bytes, key: bytes | str, alg: Algorithm
) -> bool:
    """Verify the signature of a message.

    HMAC signatures are compared in constant time.

    Parameters
    ----------
    signature
        Raw signature to check.
    message
        Message that was signed, normally the signing input of a token.
    key
        Shared secret for HMAC algorithms, or public key for RSA algorithms.
    alg
        Algorithm to use.

    Returns
    -------
    bool
        `True` if the signature is valid, `False` otherwise.

    Raises
    ------
    medallion.exceptions.SigningError
        Raised if the key cannot be used with this algorithm.
    """
    logger = structlog.get_logger("medallion")
    digest = alg.hash_algorithm()
    try:
        match alg.family:
            case AlgorithmFamily.hmac:
                h = hmac.HMAC(as_bytes(key), digest)
                h.update(message)
                h.verify(signature)
            case AlgorithmFamily.rsa:
                public_key = load_public_key(key)
                public_key.verify(
                    signature, message, padding.PKCS1v15(), digest
                )
    except InvalidSignature:
        logger.debug("Signature does not match", alg=alg.value)
        return False
    return True
