"""Supported signature algorithms."""

from __future__ import annotations

from enum import StrEnum

from cryptography.hazmat.primitives import hashes

__all__ = [
    "Algorithm",
    "AlgorithmFamily",
]


class AlgorithmFamily(StrEnum):
    """Family of signature primitive used by an algorithm."""

    hmac = "hmac"
    """Symmetric keyed hash with a shared secret."""

    rsa = "rsa"
    """RSASSA-PKCS1-v1_5 with a private signing key and public verifying key.
    """


class Algorithm(StrEnum):
    """A supported signature algorithm.

    Each value is the string used in the ``alg`` header field and represents a
    valid combination of signature primitive and digest. The algorithm named
    in the header is the only thing that selects the primitive used to sign
    or verify a token. It is never inferred from the key.
    """

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"

    @property
    def family(self) -> AlgorithmFamily:
        """Signature primitive family of this algorithm."""
        if self.value.startswith("HS"):
            return AlgorithmFamily.hmac
        return AlgorithmFamily.rsa

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        """Return the digest used by this algorithm.

        Returns
        -------
        cryptography.hazmat.primitives.hashes.HashAlgorithm
            New instance of the corresponding SHA-2 hash.
        """
        match self.value[2:]:
            case "256":
                return hashes.SHA256()
            case "384":
                return hashes.SHA384()
            case _:
                return hashes.SHA512()
