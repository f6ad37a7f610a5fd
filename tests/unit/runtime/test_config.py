"""Tests for configuration loading and context overrides."""

import pytest

from src.fitness.runtime.config.config_data import ConfigData, IdentityConfig
from src.fitness.runtime.config.config_template import (
    load_templated_yaml,
    substitute_env_vars,
)
from src.fitness.runtime.context import get_config, with_context


class TestSubstituteEnvVars:
    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("FITNESS_TEST_VAR", raising=False)
        assert substitute_env_vars("url: ${FITNESS_TEST_VAR:-http://localhost}") == (
            "url: http://localhost"
        )

    def test_environment_wins_over_default(self, monkeypatch):
        monkeypatch.setenv("FITNESS_TEST_VAR", "http://users:8081")
        assert substitute_env_vars("${FITNESS_TEST_VAR:-http://localhost}") == "http://users:8081"

    def test_required_variable_missing(self, monkeypatch):
        monkeypatch.delenv("FITNESS_TEST_VAR", raising=False)
        with pytest.raises(ValueError, match="must be set"):
            substitute_env_vars("${FITNESS_TEST_VAR:?must be set}")


class TestLoadTemplatedYaml:
    def test_disabled_providers_are_dropped(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
config:
  oidc:
    providers:
      keycloak:
        issuer: https://kc.test/realms/fitness
        jwks_uri: https://kc.test/realms/fitness/certs
      legacy:
        issuer: https://legacy.test
        jwks_uri: https://legacy.test/certs
        enabled: false
"""
        )

        config = load_templated_yaml(config_file)

        assert list(config.oidc.providers) == ["keycloak"]

    def test_invalid_configuration(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("config:\n  gateway:\n    provisioning_timeout_seconds: soon\n")

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_templated_yaml(config_file)


class TestWithContext:
    def test_override_keeps_unset_fields(self):
        before = get_config()

        with with_context(ConfigData(identity=IdentityConfig(trusted_header="X-Subject"))):
            inside = get_config()
            assert inside.identity.trusted_header == "X-Subject"
            assert (
                inside.identity.placeholder_email_domain
                == before.identity.placeholder_email_domain
            )
            assert inside.jwt.allowed_algorithms == before.jwt.allowed_algorithms

        assert get_config().identity.trusted_header == before.identity.trusted_header
