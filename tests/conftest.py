"""Test fixtures."""

from __future__ import annotations

import pytest

from medallion import RSAKeyPair

from .support.constants import TEST_KEYPAIR


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear environment variables that would change the configuration."""
    for name in (
        "MEDALLION_ALGORITHM",
        "MEDALLION_BASE64_VARIANT",
        "MEDALLION_CONFIG_PATH",
        "MEDALLION_LOG_LEVEL",
        "MEDALLION_PROFILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def keypair() -> RSAKeyPair:
    """Return the RSA key pair used for signing test tokens."""
    return TEST_KEYPAIR

