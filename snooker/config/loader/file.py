"""File-based configuration loader.

Supports loading configuration from YAML and JSON files.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import yaml

logger = logging.getLogger(__name__)


class ConfigFormat(Enum):
    """Supported configuration file formats."""

    JSON = "json"
    YAML = "yaml"
    YML = "yml"


class ConfigurationError(Exception):
    """Base exception for configuration errors."""

    pass


class FileLoadError(ConfigurationError):
    """Exception raised when file loading fails."""

    pass


class FormatError(ConfigurationError):
    """Exception raised when file format is unsupported or invalid."""

    pass


class FileLoader:
    """Configuration file loader for YAML and JSON files.

    A missing file is not an error: the loader logs a warning and returns an
    empty mapping so defaults apply.
    """

    def __init__(self, encoding: str = "utf-8"):
        """Initialize the file loader.

        Args:
            encoding: File encoding to use
        """
        self.encoding = encoding

    def load_file(
        self, file_path: Union[str, Path], format: Optional[ConfigFormat] = None
    ) -> dict[str, Any]:
        """Load configuration from a single file.

        Args:
            file_path: Path to configuration file
            format: File format (auto-detected if None)

        Returns:
            Configuration dictionary

        Raises:
            FileLoadError: If the file cannot be read or parsed
            FormatError: If the file format is unsupported
        """
        path = Path(file_path)

        if not path.exists():
            logger.warning(f"Configuration file not found: {path}")
            return {}

        if not path.is_file():
            raise FileLoadError(f"Path is not a file: {path}")

        if format is None:
            format = self._detect_format(path)

        try:
            with open(path, encoding=self.encoding) as f:
                content = f.read()
        except OSError as e:
            raise FileLoadError(f"Failed to read file {path}: {e}")

        try:
            config = self._parse_content(content, format)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise FileLoadError(f"Failed to parse configuration from {path}: {e}")

        if not isinstance(config, dict):
            raise FileLoadError(
                f"Configuration in {path} must be a mapping, "
                f"got {type(config).__name__}"
            )

        logger.info(f"Loaded configuration from {path} ({format.value})")
        return config

    def _detect_format(self, path: Path) -> ConfigFormat:
        """Detect file format from the file extension."""
        suffix = path.suffix.lower().lstrip(".")
        try:
            return ConfigFormat(suffix)
        except ValueError:
            raise FormatError(f"Unsupported configuration format: {path.suffix!r}")

    def _parse_content(self, content: str, format: ConfigFormat) -> Any:
        """Parse file content according to its format."""
        if not content.strip():
            return {}
        if format is ConfigFormat.JSON:
            return json.loads(content)
        return yaml.safe_load(content) or {}
