"""Tests for the development CLI commands."""

from authlib.jose import jwt
from typer.testing import CliRunner

from src.fitness.cli import app
from src.fitness.runtime.config.config_data import ConfigData, JWTConfig
from src.fitness.runtime.context import get_config, with_context

runner = CliRunner()


def test_mint_token_signs_with_shared_secret():
    result = runner.invoke(
        app, ["dev", "mint-token", "--sub", "kc-7", "--email", "Ana@Example.com"]
    )

    assert result.exit_code == 0, result.output
    token = result.output.strip().splitlines()[-1]
    claims = jwt.decode(token, get_config().jwt.shared_secret)
    assert claims["sub"] == "kc-7"
    assert claims["iss"] == get_config().jwt.dev_issuer
    assert claims["email"] == "Ana@Example.com"
    assert "given_name" not in claims


def test_mint_token_without_secret_fails():
    with with_context(ConfigData(jwt=JWTConfig(shared_secret=None))):
        result = runner.invoke(app, ["dev", "mint-token", "--sub", "kc-7"])

    assert result.exit_code == 1
    assert "Failed to mint token" in result.output
