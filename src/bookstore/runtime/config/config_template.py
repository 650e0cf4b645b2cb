"""Configuration template substitution utilities."""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.bookstore.runtime.config.config_data import ConfigData
from src.bookstore.runtime.config.settings import EnvironmentVariables

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def environment_overrides(env_mode: str) -> dict[str, str]:
    """Return the process environment with ``<ENV>_``-prefixed variables applied.

    ``PRODUCTION_DATABASE_URL`` overrides ``DATABASE_URL`` when the active
    environment is ``production``.
    """
    prefix = f"{env_mode.upper()}_"
    variables = dict(os.environ)
    overrides = {
        name[len(prefix):]: value
        for name, value in os.environ.items()
        if name.startswith(prefix) and len(name) > len(prefix)
    }
    if overrides:
        logger.info(
            "Applying {} environment-specific overrides: {}",
            env_mode,
            sorted(overrides),
        )
    variables.update(overrides)
    return variables


def substitute_env_vars(text: str, env: Mapping[str, str] | None = None) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    variables = os.environ if env is None else env

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return variables.get(var_name, default)

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = variables.get(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        value = variables.get(var_expr)
        if value is None:
            raise ValueError(f"Required environment variable {var_expr} not set")
        return value

    return _PLACEHOLDER.sub(replacer, text)


def load_yaml_document(file_path: Path, env: Mapping[str, str] | None = None) -> Any:
    """Read a YAML file, substitute placeholders and parse it.

    Raises:
        ValueError: If the file cannot be parsed or a required variable is missing
        FileNotFoundError: If the YAML file doesn't exist
    """
    content = file_path.read_text(encoding="utf-8")
    substituted = substitute_env_vars(content, env)
    try:
        return yaml.safe_load(substituted)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML in {file_path}: {e}") from e


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load the application configuration with environment variable substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Validated configuration

    Raises:
        ValueError: If required environment variables are missing or the
            configuration is invalid
        FileNotFoundError: If the YAML file doesn't exist
    """
    env_mode = EnvironmentVariables().app_environment
    logger.info("Loading configuration for environment: {}", env_mode)

    loaded = load_yaml_document(file_path, environment_overrides(env_mode))
    if not loaded:
        raise ValueError(f"Configuration file {file_path} is empty")

    try:
        config = ConfigData(**(loaded.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    # The environment variable wins over whatever the file declares
    config.app.environment = env_mode
    return config


def load_default_config() -> ConfigData:
    """Load the configuration file named by ``BOOKSTORE_CONFIG``, or defaults."""
    env_vars = EnvironmentVariables()
    path = Path(env_vars.config_file)
    if not path.exists():
        logger.warning("Configuration file {} not found; using defaults", path)
        return ConfigData(app={"environment": env_vars.app_environment})
    return load_templated_yaml(path)
