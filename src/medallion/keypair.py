"""RSA key pair handling."""

from __future__ import annotations

from typing import Self

from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from .constants import RSA_KEY_SIZE, RSA_PUBLIC_EXPONENT
from .signature import load_private_key

__all__ = ["RSAKeyPair"]


class RSAKeyPair:
    """An RSA key pair for signing and verifying RS* tokens.

    Token signing and verification take serialized keys, so this class is
    mostly a way to generate keys and serialize both halves of the pair in
    any of the encodings accepted by `medallion.signature`.

    Parameters
    ----------
    private_key
        Private key of the pair. Normally obtained from `generate` or
        `load` rather than passed directly.
    """

    @classmethod
    def load(cls, data: bytes | str) -> Self:
        """Import an RSA key pair from a serialized private key.

        Parameters
        ----------
        data
            Unencrypted private key in PEM or DER encoding.

        Returns
        -------
        RSAKeyPair
            The corresponding key pair.

        Raises
        ------
        medallion.exceptions.InvalidKeyError
            Raised if the provided key is not an RSA private key.
        medallion.exceptions.CryptoError
            Raised if the provided key is malformed.
        """
        return cls(load_private_key(data))

    from_pem = load
    """Alias of `load`, for keys read from PEM files."""

    @classmethod
    def generate(cls, key_size: int = RSA_KEY_SIZE) -> Self:
        """Generate a new RSA key pair.

        Parameters
        ----------
        key_size
            Size of the modulus in bits.
        """
        return cls(
            rsa.generate_private_key(
                public_exponent=RSA_PUBLIC_EXPONENT, key_size=key_size
            )
        )

    def __init__(self, private_key: rsa.RSAPrivateKey) -> None:
        self.private_key = private_key
        self.public_key = private_key.public_key()

    @property
    def key_size(self) -> int:
        """Size of the modulus in bits."""
        return self.private_key.key_size

    def export_private_key(self, encoding: Encoding = Encoding.PEM) -> bytes:
        """Serialize the private key as unencrypted PKCS#8.

        Parameters
        ----------
        encoding
            Either PEM or DER.

        Returns
        -------
        bytes
            Serialized private key, suitable as a signing key.
        """
        return self.private_key.private_bytes(
            encoding, PrivateFormat.PKCS8, NoEncryption()
        )

    def export_public_key(
        self,
        encoding: Encoding = Encoding.PEM,
        key_format: PublicFormat = PublicFormat.SubjectPublicKeyInfo,
    ) -> bytes:
        """Serialize the public key.

        Parameters
        ----------
        encoding
            Either PEM or DER.
        key_format
            Either SubjectPublicKeyInfo or PKCS#1.

        Returns
        -------
        bytes
            Serialized public key, suitable as a verification key.
        """
        return self.public_key.public_bytes(encoding, key_format)

    def private_key_as_pem(self) -> bytes:
        """Return the private key in PEM encoding and PKCS#8 format."""
        return self.export_private_key()

    def public_key_as_pem(self) -> bytes:
        """Return the public key in PEM encoding and SPKI format."""
        return self.export_public_key()

    def public_numbers(self) -> rsa.RSAPublicNumbers:
        """Return the public modulus and exponent of the key pair."""
        return self.public_key.public_numbers()
