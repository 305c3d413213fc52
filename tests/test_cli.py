"""Tests for the credential-cipher command line."""
import re
import orjson
import pytest
from click.testing import CliRunner

from credential_cipher.cli import cli
from credential_cipher.cipher.config import ENCRYPTION_KEY_ENV
from credential_cipher.cipher.crypto import decrypt, encrypt, generate_key


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def key():
    return generate_key()


def test_generate_key(runner):
    result = runner.invoke(cli, ["generate-key"])
    assert result.exit_code == 0
    assert re.fullmatch(r"[0-9a-f]{64}", result.output.strip())


def test_check_key_valid(runner, key):
    result = runner.invoke(cli, ["check-key", "--key", key])
    assert result.exit_code == 0


def test_check_key_from_env(runner, key):
    result = runner.invoke(cli, ["check-key"], env={ENCRYPTION_KEY_ENV: key})
    assert result.exit_code == 0


def test_check_key_invalid(runner):
    result = runner.invoke(cli, ["check-key", "--key", "a" * 30])
    assert result.exit_code == 1


def test_check_key_missing(runner):
    result = runner.invoke(cli, ["check-key"], env={ENCRYPTION_KEY_ENV: None})
    assert result.exit_code == 1


def test_encrypt(runner, key):
    result = runner.invoke(cli, ["encrypt", "--key", key, "--secret", "hunter2"])
    assert result.exit_code == 0
    assert decrypt(result.output.strip(), key) == "hunter2"


def test_encrypt_prompts_for_secret(runner, key):
    result = runner.invoke(cli, ["encrypt", "--key", key], input="hunter2\n")
    assert result.exit_code == 0
    envelope = result.output.strip().splitlines()[-1]
    assert decrypt(envelope, key) == "hunter2"
    assert "hunter2" not in result.output


def test_encrypt_invalid_key(runner):
    result = runner.invoke(cli, ["encrypt", "--key", "zz", "--secret", "x"])
    assert result.exit_code == 1
    assert "valid hex string" in result.output


def test_decrypt(runner, key):
    envelope = encrypt("hunter2", key)
    result = runner.invoke(cli, ["decrypt", "--key", key, envelope])
    assert result.exit_code == 0
    assert result.output.strip() == "hunter2"


def test_decrypt_wrong_key(runner, key):
    envelope = encrypt("hunter2", key)
    result = runner.invoke(cli, ["decrypt", "--key", generate_key(), envelope])
    assert result.exit_code == 1
    assert "Authentication failed" in result.output


def test_inspect(runner, key):
    envelope = encrypt("hunter2", key)
    result = runner.invoke(cli, ["inspect", envelope])
    assert result.exit_code == 0
    assert orjson.loads(result.output) == {
        "iv_bytes": 16,
        "tag_bytes": 16,
        "ciphertext_bytes": 7,
    }


def test_inspect_malformed(runner):
    result = runner.invoke(cli, ["inspect", "a:b"])
    assert result.exit_code == 1
    assert "Invalid encrypted data format" in result.output
