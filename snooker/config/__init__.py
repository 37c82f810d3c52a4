"""Configuration module for the snooker trainer."""

from .loader.file import ConfigurationError, FileLoadError, FormatError
from .manager import ConfigurationModule, ConfigValidationError
from .models.schemas import (
    ApiConfig,
    LoggingConfig,
    RulesConfig,
    SnookerConfig,
    TableConfig,
    create_default_config,
)

__all__ = [
    "ApiConfig",
    "ConfigurationError",
    "ConfigurationModule",
    "ConfigValidationError",
    "FileLoadError",
    "FormatError",
    "LoggingConfig",
    "RulesConfig",
    "SnookerConfig",
    "TableConfig",
    "create_default_config",
]
