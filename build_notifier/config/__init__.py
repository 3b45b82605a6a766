"""Configuration management for the build notifier."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_config, validate_config_file
from .models import (
    AdvancedConfig,
    EndpointConfig,
    Format,
    LogFormat,
    LogLevel,
    LoggingConfig,
    NotifierConfig,
    Protocol,
)
from .registry import ConfigEndpointRegistry

__all__ = [
    # Loader functions
    "load_config",
    "parse_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "NotifierConfig",
    "EndpointConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    "ConfigEndpointRegistry",
    # Enums
    "Protocol",
    "Format",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
