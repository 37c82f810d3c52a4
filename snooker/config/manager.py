"""Configuration manager.

Merges the configuration sources in precedence order (defaults < file <
environment < runtime overrides) and validates the result through the
pydantic ``SnookerConfig`` schema. Values are addressed with dot notation,
e.g. ``config.get("table.ball_radius")``.
"""

import copy
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from .loader.env import EnvironmentLoader
from .loader.file import ConfigurationError, FileLoader
from .models.schemas import ConfigSource, SnookerConfig, create_default_config

logger = logging.getLogger(__name__)


class ConfigValidationError(ConfigurationError):
    """Raised when merged configuration fails schema validation."""

    pass


class ConfigurationModule:
    """Main configuration interface providing centralized settings management."""

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        load_environment: bool = True,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize configuration module.

        Args:
            config_file: Optional YAML/JSON configuration file
            load_environment: Whether to apply ``SNOOKER_*`` variables
            environ: Variables to read instead of ``os.environ``

        Raises:
            FileLoadError: If the configuration file cannot be parsed
            ConfigValidationError: If the merged configuration is invalid
        """
        self._file_loader = FileLoader()
        self._env_loader = EnvironmentLoader()
        self._layers: dict[ConfigSource, dict[str, Any]] = {
            ConfigSource.DEFAULT: create_default_config().model_dump(mode="json"),
            ConfigSource.FILE: {},
            ConfigSource.ENVIRONMENT: {},
            ConfigSource.RUNTIME: {},
        }
        self._settings = create_default_config()
        self.config_file: Optional[Path] = None

        if config_file is not None:
            self.load_config(config_file)
        if load_environment:
            self.load_environment_variables(environ)

    # =========================================================================
    # Loading
    # =========================================================================

    def load_config(self, path: Union[str, Path]) -> SnookerConfig:
        """Load (or replace) the file layer.

        Returns:
            The validated settings after the reload
        """
        self.config_file = Path(path)
        data = self._file_loader.load_file(self.config_file)
        return self._apply_layer(ConfigSource.FILE, data)

    def load_environment_variables(
        self, environ: Optional[Mapping[str, str]] = None
    ) -> SnookerConfig:
        """Load (or replace) the environment layer."""
        data = self._env_loader.load_environment(environ)
        return self._apply_layer(ConfigSource.ENVIRONMENT, data)

    def update(self, values: Mapping[str, Any]) -> SnookerConfig:
        """Apply nested runtime overrides, e.g. ``{"rules": {"max_reds": 6}}``."""
        runtime = self._deep_merge(self._layers[ConfigSource.RUNTIME], dict(values))
        return self._apply_layer(ConfigSource.RUNTIME, runtime)

    def _apply_layer(self, source: ConfigSource, data: dict[str, Any]) -> SnookerConfig:
        previous = self._layers[source]
        self._layers[source] = data
        try:
            self._settings = self._build()
        except ConfigValidationError:
            self._layers[source] = previous
            raise
        logger.debug(f"Applied {source.value} configuration layer")
        return self._settings

    def _build(self) -> SnookerConfig:
        merged: dict[str, Any] = {}
        for source in ConfigSource:
            merged = self._deep_merge(merged, self._layers[source])
        try:
            return SnookerConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}") from e

    # =========================================================================
    # Access
    # =========================================================================

    @property
    def settings(self) -> SnookerConfig:
        """Validated settings object."""
        return self._settings

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key (dot notation supported)
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        current: Any = self._settings.model_dump(mode="json")
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key: str, value: Any) -> SnookerConfig:
        """Set a runtime override.

        Raises:
            ConfigValidationError: If the value is rejected by the schema; the
                previous configuration stays in effect
        """
        return self.update(self._unflatten_dict({key: value}))

    def get_all(self) -> dict[str, Any]:
        """All settings flattened to dot-notation keys."""
        return self._flatten_dict(self._settings.model_dump(mode="json"))

    def get_source(self, key: str) -> ConfigSource:
        """Highest-precedence source that defines ``key``."""
        for source in reversed(list(ConfigSource)):
            if key in self._flatten_dict(self._layers[source]):
                return source
        return ConfigSource.DEFAULT

    def reset_to_defaults(self) -> SnookerConfig:
        """Drop runtime overrides."""
        return self._apply_layer(ConfigSource.RUNTIME, {})

    # =========================================================================
    # Helpers
    # =========================================================================

    def _deep_merge(
        self, base: dict[str, Any], override: dict[str, Any]
    ) -> dict[str, Any]:
        """Deep merge two dictionaries; ``override`` wins."""
        result = copy.deepcopy(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(result.get(key), dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def _flatten_dict(
        self, d: dict[str, Any], parent_key: str = "", sep: str = "."
    ) -> dict[str, Any]:
        """Flatten nested dictionary into dot-notation keys."""
        items = []
        for k, v in d.items():
            new_key = f"{parent_key}{sep}{k}" if parent_key else k
            if isinstance(v, dict):
                items.extend(self._flatten_dict(v, new_key, sep=sep).items())
            else:
                items.append((new_key, v))
        return dict(items)

    def _unflatten_dict(self, d: dict[str, Any], sep: str = ".") -> dict[str, Any]:
        """Convert dot-notation keys back to nested dictionary."""
        result: dict[str, Any] = {}
        for key, value in d.items():
            parts = key.split(sep)
            current = result
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value
        return result
