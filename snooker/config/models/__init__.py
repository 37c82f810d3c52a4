"""Configuration models and schemas."""

from .schemas import (
    ApiConfig,
    ConfigSource,
    LoggingConfig,
    LogLevel,
    RulesConfig,
    SnookerConfig,
    TableConfig,
    create_default_config,
)

__all__ = [
    "ApiConfig",
    "ConfigSource",
    "LoggingConfig",
    "LogLevel",
    "RulesConfig",
    "SnookerConfig",
    "TableConfig",
    "create_default_config",
]
