"""Process configuration held in a ContextVar so tests can override it locally."""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel

from src.fitness.runtime.config.config_data import ConfigData
from src.fitness.runtime.config.config_template import load_templated_yaml
from src.fitness.runtime.settings import EnvironmentVariables


@dataclass
class AppContext:
    """Application-wide state visible to every request handler."""

    config: ConfigData


def _load_default_config() -> ConfigData:
    env = EnvironmentVariables()
    path = Path(env.config_file)
    if not path.exists():
        logger.warning(f"Configuration file {path} not found; using built-in defaults")
        config = ConfigData()
        config.app.environment = env.app_environment
        return config
    return load_templated_yaml(path, env_mode=env.app_environment)


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=_load_default_config())
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    return _app_context.set(context)


def _overlay(base: dict[str, Any], override: BaseModel) -> dict[str, Any]:
    """Copy ``base`` with every field explicitly set on ``override`` applied.

    Nested models are overlaid field by field, so setting
    ``identity.trusted_header`` leaves ``identity.placeholder_email_domain``
    alone. Dicts and scalars are replaced whole.
    """
    merged = dict(base)
    for name in type(override).model_fields:
        value = getattr(override, name)
        if isinstance(value, BaseModel):
            nested = _overlay(merged.get(name) or {}, value)
            if nested != merged.get(name) or name in override.model_fields_set:
                merged[name] = nested
        elif name in override.model_fields_set:
            if isinstance(value, dict):
                value = {
                    key: item.model_dump() if isinstance(item, BaseModel) else item
                    for key, item in value.items()
                }
            merged[name] = value
    return merged


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Temporarily overlay ``config_override`` on the current configuration.

    Example:
        with with_context(ConfigData(identity=IdentityConfig(trusted_header="X-Subject"))):
            assert get_config().identity.trusted_header == "X-Subject"
    """
    if config_override is None:
        yield
        return
    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    current = get_context()
    merged = ConfigData.model_validate(
        _overlay(current.config.model_dump(), config_override)
    )
    token = set_context(replace(current, config=merged))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the entire current configuration."""
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    return get_context().config
