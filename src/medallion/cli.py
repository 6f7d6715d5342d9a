"""Command-line interface for Medallion."""

from __future__ import annotations

import json
import sys
from datetime import timedelta
from pathlib import Path
from typing import Any

import click
import structlog
from safir.click import display_help
from safir.datetime import current_datetime

from .algorithm import Algorithm
from .config import Config
from .constants import ENV_PREFIX, RSA_KEY_SIZE
from .exceptions import MedallionError
from .header import Header
from .keypair import RSAKeyPair
from .payload import REGISTERED_CLAIMS, Payload, RegisteredClaims
from .token import Token

__all__ = [
    "decode",
    "generate_key",
    "help",
    "main",
    "sign",
    "verify",
]

_config_path_option = click.option(
    "--config-path",
    envvar=f"{ENV_PREFIX}CONFIG_PATH",
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    default=None,
    help="Configuration file.",
)


def _load_config(config_path: Path | None) -> Config:
    """Load the configuration and set up logging."""
    config = Config.from_file(config_path) if config_path else Config()
    config.configure_logging()
    return config


def _parse_json_object(value: str | None, option: str) -> dict[str, Any]:
    """Parse a JSON object given on the command line."""
    if not value:
        return {}
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON: {e}"
        raise click.BadParameter(msg, param_hint=option) from e
    if not isinstance(data, dict):
        msg = "Must be a JSON object"
        raise click.BadParameter(msg, param_hint=option)
    return data


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
def main() -> None:
    """Command-line interface for Medallion signed tokens."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic)


@main.command()
@click.option(
    "--key",
    "key_path",
    required=True,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="File containing the shared secret or private key, used verbatim.",
)
@click.option(
    "--algorithm",
    type=click.Choice([a.value for a in Algorithm]),
    default=None,
    help="Signature algorithm (default from configuration).",
)
@click.option(
    "--header", default=None, help="Extra header fields as a JSON object."
)
@click.option("--claims", default=None, help="Claims as a JSON object.")
@click.option(
    "--expires-in",
    type=int,
    default=None,
    help="Set exp this many seconds from now.",
)
@click.option(
    "--not-before",
    type=int,
    default=None,
    help="Set nbf this many seconds from now.",
)
@_config_path_option
def sign(
    *,
    key_path: Path,
    algorithm: str | None,
    header: str | None,
    claims: str | None,
    expires_in: int | None,
    not_before: int | None,
    config_path: Path | None,
) -> None:
    """Create a signed token.

    Registered claims (such as ``sub`` or ``exp``) given in the claims JSON
    are used as registered claims. All other fields become custom claims.
    """
    config = _load_config(config_path)
    logger = structlog.get_logger("medallion")
    extensions = _parse_json_object(header, "--header")
    data = _parse_json_object(claims, "--claims")

    now = current_datetime()
    registered = {k: v for k, v in data.items() if k in REGISTERED_CLAIMS}
    custom = {k: v for k, v in data.items() if k not in REGISTERED_CLAIMS}
    if expires_in is not None:
        registered["exp"] = now + timedelta(seconds=expires_in)
    if not_before is not None:
        registered["nbf"] = now + timedelta(seconds=not_before)

    try:
        token: Token[dict[str, Any], dict[str, Any]] = Token(
            Header(
                alg=Algorithm(algorithm) if algorithm else config.algorithm,
                extensions=extensions or None,
            ),
            Payload(
                registered=RegisteredClaims.model_validate(registered),
                custom=custom or None,
            ),
            codec=config.codec(),
        )
        encoded = token.sign(key_path.read_bytes())
    except (MedallionError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    logger.debug("Signed token", alg=token.header.alg.value)
    sys.stdout.write(encoded + "\n")


@main.command()
@click.option(
    "--key",
    "key_path",
    required=True,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="File containing the shared secret or public key, used verbatim.",
)
@click.argument("token")
@_config_path_option
@click.pass_context
def verify(
    ctx: click.Context, *, key_path: Path, token: str, config_path: Path | None
) -> None:
    """Verify the signature and validity period of a token.

    Prints ``valid`` or ``invalid``. Exits with status 1 if the token is
    invalid.
    """
    config = _load_config(config_path)
    try:
        parsed = Token.parse(token.strip(), codec=config.codec())
        valid = parsed.verify(key_path.read_bytes())
    except MedallionError as e:
        raise click.ClickException(str(e)) from e
    if valid:
        sys.stdout.write("valid\n")
    else:
        sys.stdout.write("invalid\n")
        ctx.exit(1)


@main.command()
@click.argument("token")
@_config_path_option
def decode(*, token: str, config_path: Path | None) -> None:
    """Show the header and payload of a token without verifying it."""
    config = _load_config(config_path)
    codec = config.codec()
    token = token.strip()
    try:
        Token.parse(token, codec=codec)
        header, payload, _ = token.split(".")
        result = {
            "header": codec.decode(header),
            "payload": codec.decode(payload),
        }
    except MedallionError as e:
        raise click.ClickException(str(e)) from e
    sys.stdout.write(json.dumps(result, indent=2, sort_keys=True) + "\n")


@main.command()
@click.option(
    "--size",
    type=int,
    default=RSA_KEY_SIZE,
    show_default=True,
    help="Key size in bits.",
)
def generate_key(*, size: int) -> None:
    """Generate a new RSA key pair.

    The output will be the private key of the newly-generated key pair, from
    which the public key can be recovered.
    """
    keypair = RSAKeyPair.generate(key_size=size)
    sys.stdout.write(keypair.private_key_as_pem().decode())
