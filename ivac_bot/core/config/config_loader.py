"""Configuration loader with YAML and environment variable support."""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError
from .config_models import RunConfig

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

# Variables that must resolve; an unset one is a configuration error
REQUIRED_ENV_VARS: frozenset = frozenset({"IVAC_PASSWORD"})


def load_env_variables(env_path: Optional[Path] = None) -> None:
    """Load environment variables from a .env file if present."""
    path = env_path or Path.cwd() / ".env"
    if path.exists():
        load_dotenv(path)
        logger.debug(f"Loaded environment variables from {path}")


def substitute_env_vars(value: Any) -> Any:
    """
    Recursively substitute ${VAR_NAME} references with environment variables.

    Args:
        value: Configuration value (string, dict, list, etc.)

    Returns:
        Value with environment variables substituted

    Raises:
        ConfigurationError: If a required variable is not set
    """
    if isinstance(value, str):
        for name in _ENV_PATTERN.findall(value):
            env_value = os.getenv(name)
            if env_value is None:
                if name in REQUIRED_ENV_VARS:
                    raise ConfigurationError(
                        f"Environment variable '{name}' is required but not set",
                        details={"variable": name},
                    )
                logger.debug(f"Environment variable '{name}' not set, using empty string")
                env_value = ""
            value = value.replace(f"${{{name}}}", env_value)
        return value
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    return value


def load_config_dict(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file with environment variable substitution.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If the file is missing or not valid YAML
    """
    load_env_variables()

    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}", details={"path": str(config_path)}
        )

    logger.info(f"Loading config from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}")

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration root in {config_file} must be a mapping")

    return substitute_env_vars(config_data)


def load_config(
    config_path: Union[str, Path] = "config/config.yaml", base_url: Optional[str] = None
) -> RunConfig:
    """
    Load and validate a run configuration.

    Args:
        config_path: Path to YAML configuration file
        base_url: Optional override for the portal base URL

    Returns:
        Validated, immutable RunConfig

    Raises:
        ConfigurationError: If loading or validation fails
    """
    data = load_config_dict(config_path)
    if base_url:
        data["base_url"] = base_url

    try:
        return RunConfig.from_dict(data)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigurationError(
            f"Invalid configuration in {config_path}: {'; '.join(errors)}",
            details={"errors": errors},
        )
