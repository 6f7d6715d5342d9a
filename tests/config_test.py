"""Test configuration parsing."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError
from safir.logging import LogLevel, Profile

from medallion import Algorithm, Base64Variant, SegmentCodec
from medallion.config import Config


def write_config(tmp_path: Path, settings: dict[str, str]) -> Path:
    """Write a configuration file and return its path."""
    path = tmp_path / "medallion.yaml"
    path.write_text(yaml.safe_dump(settings))
    return path


def test_defaults() -> None:
    config = Config()
    assert config.log_level == LogLevel.INFO
    assert config.profile == Profile.development
    assert config.base64_variant == Base64Variant.unpadded
    assert config.algorithm == Algorithm.HS256
    assert config.codec() == SegmentCodec()


def test_from_file(tmp_path: Path) -> None:
    path = write_config(
        tmp_path,
        {
            "logLevel": "DEBUG",
            "profile": "production",
            "base64Variant": "padded",
            "algorithm": "RS256",
        },
    )
    config = Config.from_file(path)
    assert config.log_level == LogLevel.DEBUG
    assert config.profile == Profile.production
    assert config.base64_variant == Base64Variant.padded
    assert config.algorithm == Algorithm.RS256
    assert config.codec() == SegmentCodec(Base64Variant.padded)


def test_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "medallion.yaml"
    path.write_text("")
    assert Config.from_file(path) == Config()


def test_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("MEDALLION_ALGORITHM", "HS512")
    monkeypatch.setenv("MEDALLION_BASE64_VARIANT", "padded")
    config = Config()
    assert config.algorithm == Algorithm.HS512
    assert config.base64_variant == Base64Variant.padded

    # Environment variables override the configuration file.
    path = write_config(tmp_path, {"algorithm": "RS384", "logLevel": "ERROR"})
    config = Config.from_file(path)
    assert config.algorithm == Algorithm.HS512
    assert config.log_level == LogLevel.ERROR


def test_invalid(tmp_path: Path) -> None:
    path = write_config(tmp_path, {"unknownSetting": "foo"})
    with pytest.raises(ValidationError):
        Config.from_file(path)

    path = write_config(tmp_path, {"algorithm": "none"})
    with pytest.raises(ValidationError):
        Config.from_file(path)

    path = write_config(tmp_path, {"base64Variant": "standard"})
    with pytest.raises(ValidationError):
        Config.from_file(path)
