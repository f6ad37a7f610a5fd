"""config.yaml loading with environment variable substitution."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from src.fitness.runtime.config.config_data import ConfigData

# ${NAME}, ${NAME:-default} or ${NAME:?message}
_PLACEHOLDER = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<op>[-?])(?P<arg>[^}]*))?\}")


def _resolve(match: re.Match) -> str:
    name, op, arg = match.group("name"), match.group("op"), match.group("arg")
    value = os.getenv(name)
    if value is not None:
        return value
    if op == "-":
        return arg
    if op == "?":
        raise ValueError(f"Required environment variable {name}: {arg}")
    raise ValueError(f"Required environment variable {name} not set")


def substitute_env_vars(text: str) -> str:
    """Replace ``${NAME}``, ``${NAME:-default}`` and ``${NAME:?message}`` placeholders.

    Raises:
        ValueError: a placeholder without a default names an unset variable.
    """
    return _PLACEHOLDER.sub(_resolve, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``<ENV>_``-prefixed variables to their unprefixed names.

    ``PRODUCTION_DATABASE_URL`` becomes ``DATABASE_URL`` when running in
    production, so one environment file can carry settings for every stage.
    """
    prefix = f"{env_mode.upper()}_"
    env_variables = [
        (var, value) for var, value in os.environ.items() if var.startswith(prefix)
    ]
    if env_variables:
        logger.info(
            "Applying environment-specific overrides: {}",
            [name for name, _ in env_variables],
        )

    for var_name, var_value in env_variables:
        new_var_name = var_name[len(prefix):]
        os.environ[new_var_name] = var_value
        logger.debug(f"Set environment variable {new_var_name} from {var_name}")


def _enabled_providers_only(config: ConfigData) -> None:
    for name, provider in list(config.oidc.providers.items()):
        if not provider.enabled:
            logger.info(f"Skipping disabled OIDC provider '{name}'")
            del config.oidc.providers[name]
    if not config.oidc.providers:
        logger.warning("No OIDC providers enabled; only development tokens can be verified")


def load_templated_yaml(file_path: Path, env_mode: str = "development") -> ConfigData:
    """Read ``file_path``, substitute environment variables and validate the ``config:`` section.

    Raises:
        ValueError: missing required variables, unparsable YAML or invalid values.
        FileNotFoundError: ``file_path`` does not exist.
    """
    logger.info(f"Loading configuration from {file_path} for environment: {env_mode}")
    apply_environment_overrides(env_mode)
    text = substitute_env_vars(Path(file_path).read_text())

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not isinstance(loaded, dict):
        raise ValueError(f"{file_path} does not contain a mapping")

    try:
        config = ConfigData(**(loaded.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    _enabled_providers_only(config)
    return config
