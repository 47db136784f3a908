"""Configuration loader for the ICB client."""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import Settings


ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def _substitute(match: re.Match) -> str:
    var_name, default_value = match.group(1), match.group(2)
    if default_value is not None:
        return os.environ.get(var_name, default_value)
    return os.environ.get(var_name, match.group(0))


def expand_env_vars(config: Any) -> Any:
    """Recursively expand environment variables in configuration.

    ``${VAR}`` and ``${VAR:default}`` references are replaced wherever they
    appear in a string. An unset variable without a default is left as is.
    """
    if isinstance(config, dict):
        return {key: expand_env_vars(value) for key, value in config.items()}
    if isinstance(config, list):
        return [expand_env_vars(item) for item in config]
    if isinstance(config, str):
        return ENV_VAR_PATTERN.sub(_substitute, config)
    return config


def load_config(config_path: Path) -> Settings:
    """Load settings from a YAML file with environment variable expansion.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file does not describe valid settings
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ValueError(f"Invalid configuration: expected a mapping in {config_path}")

    config = expand_env_vars(raw_config)

    try:
        return Settings(**config)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
