"""Process-wide application context.

The active ``ConfigData`` lives in a ``ContextVar`` so tests and request
handlers can swap it for the duration of a block without touching globals.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path

from loguru import logger
from pydantic import BaseModel

from src.shop.runtime.config.config_data import ConfigData
from src.shop.runtime.config.config_template import load_templated_yaml
from src.shop.runtime.config.settings import EnvironmentVariables


@dataclass
class AppContext:
    """Application context containing configuration and other app-wide state."""

    config: ConfigData


def _load_default_config() -> ConfigData:
    env = EnvironmentVariables()
    config_path = Path(env.app_config_file)
    if not config_path.exists():
        logger.warning("Configuration file {} not found; using defaults", config_path)
        return ConfigData()
    return load_templated_yaml(config_path, env_mode=env.app_environment)


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=_load_default_config())
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    """Make ``context`` current; pass the returned token to ``ContextVar.reset``."""
    return _app_context.set(context)


def _explicit_fields(model: BaseModel) -> dict:
    """Dump only the fields that were set explicitly, at any depth.

    A nested section is dumped in full once anything inside it was set; the
    merge below then lays it over the current values key by key.
    """
    explicit = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            if name in model.model_fields_set or _explicit_fields(value):
                explicit[name] = value.model_dump()
        elif name in model.model_fields_set:
            explicit[name] = value
    return explicit


def _deep_merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _merge_configs(base_config: ConfigData, override_config: ConfigData) -> ConfigData:
    merged = _deep_merge(base_config.model_dump(), _explicit_fields(override_config))
    return ConfigData.model_validate(merged)


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Temporarily override parts of the current configuration.

    Only the fields set on ``config_override`` change; everything else is
    inherited from the enclosing context.

    Example:
        override = ConfigData()
        override.assets.root = str(tmp_path)
        with with_context(override):
            FileSystemAssetStorage(get_config().assets)  # writes under tmp_path
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    merged = _merge_configs(get_config(), config_override)
    token = set_context(replace(get_context(), config=merged))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the entire current configuration with the provided one."""
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    return get_context().config
