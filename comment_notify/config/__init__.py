"""Configuration management for the comment notification service."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config
from .models import (
    AdvancedConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    ServerConfig,
    ServiceConfig,
)
from .validators import check_for_warnings, emit_warnings

__all__ = [
    # Loader functions
    "load_config",
    "load_environment_config",
    # Configuration models
    "ServiceConfig",
    "LoggingConfig",
    "ServerConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Per-request settings checks
    "check_for_warnings",
    "emit_warnings",
    # Exceptions
    "ConfigurationError",
]
