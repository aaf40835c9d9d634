"""Configuration loader for the comment notification service."""

from pathlib import Path
from typing import Optional, Tuple

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import ServiceConfig

DEFAULT_CONFIG_LOCATIONS = (
    Path("config.yaml"),
    Path("config") / "config.yaml",
)


def load_config(config_path: Optional[Path] = None) -> Tuple[ServiceConfig, EnvironmentConfig]:
    """
    Load service configuration from an optional YAML file and the environment.

    File lookup:
    1. Use config_path if given (it must exist)
    2. Try config.yaml in the current directory
    3. Try ./config/config.yaml
    4. Fall back to built-in defaults

    Args:
        config_path: Optional explicit path to a configuration file

    Returns:
        Tuple of (ServiceConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If the file is unreadable or invalid, or the
            environment holds invalid values
    """
    config_file = _find_config_file(config_path)

    config_dict = {}
    if config_file is not None:
        config_dict = _read_yaml(config_file)

    try:
        service_config = ServiceConfig.model_validate(config_dict)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            if error["type"] == "extra_forbidden":
                errors.append(f"Unknown field: {field_path}")
            elif error["type"].endswith("_type") or error["type"].endswith("_parsing"):
                errors.append(
                    f"Invalid type for '{field_path}': {error['msg']} (got {error.get('input')!r})"
                )
            else:
                errors.append(f"{field_path}: {error['msg']}")

        raise ConfigurationError(
            "Configuration validation failed",
            errors=errors,
            suggestions=[
                "Review config.example.yaml for the expected format",
                "Remove sections you do not need; every section has defaults",
            ],
            source=config_file,
        )

    env_config = load_environment_config()

    return service_config, env_config


def _read_yaml(config_file: Path) -> dict:
    """Parse a YAML file into a mapping; an empty file yields {}."""
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
            source=config_file,
        )
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=["Check file permissions"],
            source=config_file,
        )

    if config_dict is None:
        return {}

    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping at the top level",
            source=config_file,
        )

    return config_dict


def _find_config_file(config_path: Optional[Path] = None) -> Optional[Path]:
    """
    Locate the configuration file.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Path to the configuration file, or None when no default location exists

    Raises:
        ConfigurationError: If an explicit path does not exist
    """
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[
                    f"Ensure {config_path} exists",
                    "Omit --config to run with built-in defaults",
                ],
            )
        return config_path

    for candidate in DEFAULT_CONFIG_LOCATIONS:
        if candidate.exists():
            return candidate

    return None
