"""Configuration for Medallion.

Only the command-line interface reads configuration. The library itself takes
all of its inputs as explicit arguments. Settings may come from a YAML file,
whose keys are camel-case versions of the setting names, or from environment
variables with the ``MEDALLION_`` prefix, which take precedence.
"""

from __future__ import annotations

from pathlib import Path
from typing import Self, override

import yaml
from pydantic import AliasChoices, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from safir.logging import LogLevel, Profile, configure_logging

from .algorithm import Algorithm
from .codec import Base64Variant, SegmentCodec
from .constants import ENV_PREFIX

__all__ = ["Config"]


class Config(BaseSettings):
    """Configuration for the Medallion command-line interface."""

    model_config = SettingsConfigDict(
        alias_generator=to_camel,
        env_prefix=ENV_PREFIX,
        extra="forbid",
        populate_by_name=True,
    )

    log_level: LogLevel = Field(
        LogLevel.INFO,
        title="Log level",
        validation_alias=AliasChoices("MEDALLION_LOG_LEVEL", "logLevel"),
    )

    profile: Profile = Field(
        Profile.development,
        title="Logging profile",
        description="Use development for human-readable logs",
        validation_alias=AliasChoices("MEDALLION_PROFILE", "profile"),
    )

    base64_variant: Base64Variant = Field(
        Base64Variant.unpadded,
        title="Base64 variant",
        description=(
            "Padding convention for token segments. Must match on the signing"
            " and verifying sides."
        ),
        validation_alias=AliasChoices(
            "MEDALLION_BASE64_VARIANT", "base64Variant"
        ),
    )

    algorithm: Algorithm = Field(
        Algorithm.HS256,
        title="Default algorithm",
        description="Algorithm used for new tokens if none is specified",
        validation_alias=AliasChoices("MEDALLION_ALGORITHM", "algorithm"),
    )

    @override
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Override the sources of settings.

        Environment variables take precedence over the configuration file,
        which is passed in as the arguments to the constructor.
        """
        return (env_settings, init_settings)

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Construct a Config object from a configuration file.

        Parameters
        ----------
        path
            Path to the configuration file in YAML.

        Returns
        -------
        Config
            The corresponding `Config` object.
        """
        with path.open("r") as f:
            return cls.model_validate(yaml.safe_load(f) or {})

    def codec(self) -> SegmentCodec:
        """Return the segment codec selected by the configuration."""
        return SegmentCodec(self.base64_variant)

    def configure_logging(self) -> None:
        """Configure logging based on the Medallion configuration."""
        configure_logging(
            name="medallion", profile=self.profile, log_level=self.log_level
        )
