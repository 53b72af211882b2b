"""Load ``config.yaml`` with environment variable placeholders resolved."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.shop.runtime.config.config_data import ConfigData

PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def _resolve(expression: str) -> str:
    if ":-" in expression:
        name, default = expression.split(":-", 1)
        return os.getenv(name, default)

    if ":?" in expression:
        name, message = expression.split(":?", 1)
        value = os.getenv(name)
        if value is None:
            raise ValueError(f"Required environment variable {name}: {message}")
        return value

    value = os.getenv(expression)
    if value is None:
        raise ValueError(f"Required environment variable {expression} not set")
    return value


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    return PLACEHOLDER.sub(lambda match: _resolve(match.group(1)), text)


def apply_environment_overrides(env_mode: str) -> list[str]:
    """Copy ``<ENV>_``-prefixed variables onto their unprefixed names.

    ``PRODUCTION_DATABASE_URL`` becomes ``DATABASE_URL`` when running in
    production. Returns the names of the variables that were set.
    """
    prefix = f"{env_mode.upper()}_"
    overrides = {
        name[len(prefix):]: value
        for name, value in os.environ.items()
        if name.startswith(prefix)
    }
    for name, value in overrides.items():
        os.environ[name] = value
        logger.debug("Set {} from {}{}", name, prefix, name)
    return list(overrides)


def _parse(text: str) -> dict:
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not loaded:
        raise ValueError("Failed to parse YAML")
    return loaded


def load_templated_yaml(file_path: Path, env_mode: str | None = None) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file
        env_mode: Environment whose prefixed variables override the plain ones,
            defaults to APP_ENVIRONMENT

    Returns:
        The validated ``config`` section of the file

    Raises:
        ValueError: If required environment variables are missing, or the
            file is not valid YAML or not a valid configuration
        FileNotFoundError: If the YAML file doesn't exist
    """
    content = Path(file_path).read_text()

    env_mode = env_mode or os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration from {} for environment: {}", file_path, env_mode)

    applied = apply_environment_overrides(env_mode)
    if applied:
        logger.info("Applied environment-specific overrides: {}", applied)

    loaded = _parse(substitute_env_vars(content))

    try:
        return ConfigData(**loaded.get("config", {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
