"""Unified CLI for keyden using Click."""

import json
import sys
from pathlib import Path
from typing import List

import click
from loguru import logger

from keyden.config import get_config
from keyden.models import Algorithm, AccountDescriptor, Token


def _stderr_sink(message) -> None:
    sys.stderr.write(message)


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(_stderr_sink, level=level.upper())


def _read_uris(uris, file) -> List[str]:
    collected = list(uris)
    if file:
        for line in Path(file).read_text().splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                collected.append(line)
    return collected


def _load_descriptors(uris: List[str]) -> List[AccountDescriptor]:
    from keyden.migration import parse_import_uri

    descriptors: List[AccountDescriptor] = []
    for uri in uris:
        found = parse_import_uri(uri)
        if found:
            descriptors.extend(found)
    return descriptors


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Log level (default: from config, INFO).",
)
def cli(log_level):
    """Keyden: TOTP codes and authenticator migration import."""
    _configure_logging(log_level or get_config().log_level)


# =============================================================================
# Import Commands
# =============================================================================


@cli.command()
@click.argument("url")
@click.option("--json", "as_json", is_flag=True, help="Print accounts as JSON.")
def decode(url, as_json):
    """Decode an otpauth-migration:// export URL.

    Prints one standard otpauth:// URI per recovered account. Counter-based
    accounts are skipped.

    Example:
        keyden decode "otpauth-migration://offline?data=..."
    """
    from keyden.migration import parse_migration_url

    descriptors = parse_migration_url(url)
    if not descriptors:
        logger.error("No accounts found in migration URL")
        sys.exit(1)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "issuer": d.issuer,
                        "account": d.account,
                        "secret": d.secret,
                        "digits": d.digits,
                        "algorithm": d.algorithm.value,
                        "period": d.period,
                    }
                    for d in descriptors
                ],
                indent=2,
            )
        )
        return

    for descriptor in descriptors:
        click.echo(descriptor.to_uri())


# =============================================================================
# Code Commands
# =============================================================================


@cli.command()
@click.argument("secret")
@click.option("--digits", "-d", default=6, show_default=True, help="Code length.")
@click.option(
    "--period", "-p", default=30, show_default=True, help="Rotation interval in seconds."
)
@click.option(
    "--algorithm",
    "-a",
    type=click.Choice([a.value for a in Algorithm], case_sensitive=False),
    default=Algorithm.SHA1.value,
    show_default=True,
    help="HMAC digest algorithm.",
)
def code(secret, digits, period, algorithm):
    """Print the current code for a Base32 SECRET.

    Example:
        keyden code JBSWY3DPEHPK3PXP
    """
    import time

    from keyden.otp.generator import CodeGenerator, remaining_seconds

    if digits <= 0 or period <= 0:
        raise click.BadParameter("digits and period must be positive")

    now = time.time()
    result = CodeGenerator().generate(
        secret, digits, period, Algorithm.parse(algorithm), now
    )
    if result is None:
        logger.error("Invalid secret: expected Base32 text")
        sys.exit(1)

    click.echo(f"{result}  ({remaining_seconds(int(now), period)}s left)")


@cli.command()
@click.argument("uris", nargs=-1)
@click.option(
    "--file",
    "-f",
    type=click.Path(exists=True, dir_okay=False),
    help="File with one otpauth:// or otpauth-migration:// URI per line.",
)
@click.option("--search", "-s", default="", help="Only show matching accounts.")
def watch(uris, file, search):
    """Show live codes for imported accounts in a terminal UI.

    Example:
        keyden watch "otpauth-migration://offline?data=..."
        keyden watch --file exports.txt --search github
    """
    descriptors = _load_descriptors(_read_uris(uris, file))
    if not descriptors:
        logger.error("No accounts found")
        sys.exit(1)

    tokens = [Token.from_descriptor(d) for d in descriptors]

    from keyden.tui.app import run_tui

    run_tui(tokens, search=search)


@cli.command(name="list")
@click.argument("uris", nargs=-1)
@click.option(
    "--file",
    "-f",
    type=click.Path(exists=True, dir_okay=False),
    help="File with one otpauth:// or otpauth-migration:// URI per line.",
)
@click.option("--search", "-s", default="", help="Only show matching accounts.")
def list_accounts(uris, file, search):
    """List imported accounts without showing codes."""
    descriptors = _load_descriptors(_read_uris(uris, file))
    if not descriptors:
        logger.error("No accounts found")
        sys.exit(1)

    tokens = [Token.from_descriptor(d) for d in descriptors]
    matched = [t for t in tokens if t.matches(search)]
    if not matched:
        click.echo("No matching accounts")
        return

    for token in matched:
        issuer = token.issuer or "-"
        click.echo(
            f"{issuer:<20} {token.account:<30} "
            f"{token.digits} digits / {token.period}s / {token.algorithm.value}"
        )


if __name__ == "__main__":
    cli()
