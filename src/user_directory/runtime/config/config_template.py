"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.user_directory.runtime.config.config_data import ConfigData
from src.user_directory.runtime.settings import EnvironmentVariables


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    def replacer(match):
        var_expr = match.group(1)

        # Handle default values: ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        # Handle error messages: ${VAR:?message}
        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        # Handle required variables: ${VAR}
        else:
            var_name = var_expr
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name} not set")
            return value

    pattern = r"\$\{([^}]+)\}"
    return re.sub(pattern, replacer, strip_comment_lines(text))


def strip_comment_lines(text: str) -> str:
    """Drop full-line YAML comments so placeholders in them are never expanded."""
    return "\n".join(
        line for line in text.splitlines() if not line.lstrip().startswith("#")
    )


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``{ENV}_NAME`` variables to ``NAME`` for the active environment."""
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


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    A missing file yields the built-in defaults so the package stays importable
    outside of a deployment checkout.

    Args:
        file_path: Path to the YAML file

    Returns:
        Validated configuration

    Raises:
        ValueError: If required environment variables are missing or the YAML is invalid
    """
    env_mode = EnvironmentVariables().environment
    logger.info(f"Loading configuration for environment: {env_mode}")

    if not file_path.exists():
        logger.warning("Configuration file {} not found, using defaults", file_path)
        return ConfigData()

    with open(file_path) as f:
        content = f.read()

    apply_environment_overrides(env_mode)

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    try:
        # Extract the 'config' section from the YAML structure
        config_data = loaded.get('config', {})
        config = ConfigData(**config_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if config.app.environment == "production" and config.database.is_sqlite:
        logger.warning(
            "SQLite is not recommended for production use. "
            "Consider PostgreSQL or MySQL for a dataset of this size."
        )

    return config
