"""CLI for the credential cipher."""
import click
import orjson

from .cipher.config import ENCRYPTION_KEY_ENV
from .cipher.crypto import (
    decrypt,
    encrypt,
    generate_key,
    parse_envelope,
    test_key,
)
from .cipher.exceptions import CipherError


def _key_option(func):
    return click.option(
        "--key",
        envvar=ENCRYPTION_KEY_ENV,
        show_envvar=True,
        help="Hex-encoded 32-byte encryption key",
    )(func)


@click.group()
def cli():
    """Credential cipher utilities."""


@cli.command("generate-key")
def generate_key_cmd():
    """Print a new random encryption key."""
    click.echo(generate_key())


@cli.command("check-key")
@_key_option
def check_key_cmd(key):
    """Check that an encryption key is usable."""
    if not test_key(key):
        click.echo("✗ Encryption key is invalid", err=True)
        raise SystemExit(1)
    click.echo("✓ Encryption key is valid")


@cli.command("encrypt")
@_key_option
@click.option(
    "--secret", prompt=True, hide_input=True,
    help="Secret to encrypt (prompted when omitted)",
)
def encrypt_cmd(key, secret):
    """Encrypt a secret and print its envelope."""
    try:
        click.echo(encrypt(secret, key))
    except CipherError as err:
        click.echo(f"Error: {err}", err=True)
        raise SystemExit(1)


@cli.command("decrypt")
@_key_option
@click.argument("envelope")
def decrypt_cmd(key, envelope):
    """Decrypt an envelope and print the secret."""
    try:
        click.echo(decrypt(envelope, key))
    except CipherError as err:
        click.echo(f"Error: {err}", err=True)
        raise SystemExit(1)


@cli.command("inspect")
@click.argument("envelope")
def inspect_cmd(envelope):
    """Show the segment sizes of an envelope (no key needed)."""
    try:
        parsed = parse_envelope(envelope)
    except CipherError as err:
        click.echo(f"Error: {err}", err=True)
        raise SystemExit(1)
    summary = {
        "iv_bytes": len(parsed.iv),
        "tag_bytes": len(parsed.tag),
        "ciphertext_bytes": len(parsed.ciphertext),
    }
    click.echo(orjson.dumps(summary, option=orjson.OPT_INDENT_2).decode())


if __name__ == "__main__":
    cli()
