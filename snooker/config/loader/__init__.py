"""Configuration loader package.

Loaders for the configuration sources that sit above the built-in
defaults: YAML/JSON files and ``SNOOKER_`` environment variables.
"""

from .env import EnvironmentLoader
from .file import (
    ConfigFormat,
    ConfigurationError,
    FileLoader,
    FileLoadError,
    FormatError,
)

__all__ = [
    "ConfigFormat",
    "ConfigurationError",
    "EnvironmentLoader",
    "FileLoader",
    "FileLoadError",
    "FormatError",
]
