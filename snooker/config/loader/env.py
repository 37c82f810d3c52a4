"""Environment variable configuration loader.

Maps prefixed variables onto the nested configuration structure, with
automatic type conversion:

    SNOOKER_TABLE__BALL_RADIUS=12.5   ->  {"table": {"ball_radius": 12.5}}
    SNOOKER_API__PORT=9000            ->  {"api": {"port": 9000}}
"""

import json
import logging
import os
from collections.abc import Mapping
from typing import Any, Optional

logger = logging.getLogger(__name__)


class EnvironmentLoader:
    """Environment variable configuration loader.

    Supports:
    - Prefix filtering (``SNOOKER_`` by default)
    - Nested keys separated by a double underscore
    - Automatic bool / int / float / JSON / list conversion
    """

    def __init__(self, prefix: str = "SNOOKER_", nested_separator: str = "__"):
        """Initialize the environment loader.

        Args:
            prefix: Only variables starting with this prefix are loaded
            nested_separator: Separator between nested keys
        """
        self.prefix = prefix
        self.nested_separator = nested_separator

    def load_environment(
        self, environ: Optional[Mapping[str, str]] = None
    ) -> dict[str, Any]:
        """Load configuration from environment variables.

        Args:
            environ: Variables to read (``os.environ`` if None)

        Returns:
            Configuration dictionary with nested structure
        """
        environ = os.environ if environ is None else environ
        config: dict[str, Any] = {}
        loaded = 0

        for env_key, env_value in environ.items():
            if not env_key.startswith(self.prefix):
                continue
            config_key = self._env_key_to_config_key(env_key)
            if not config_key:
                continue
            value = self._convert_value(env_value)
            self._set_nested_value(config, config_key, value)
            loaded += 1
            logger.debug(f"Loaded env var: {env_key} -> {config_key} = {value!r}")

        if loaded:
            logger.info(f"Loaded {loaded} environment variables")
        return config

    def _env_key_to_config_key(self, env_key: str) -> str:
        """Convert an environment variable name to a dot-notation key."""
        key = env_key[len(self.prefix) :].lower()
        return ".".join(part for part in key.split(self.nested_separator) if part)

    def config_key_to_env_key(self, config_key: str) -> str:
        """Convert a dot-notation key to its environment variable name."""
        return self.prefix + config_key.replace(".", self.nested_separator).upper()

    def _convert_value(self, value: str) -> Any:
        """Convert string value with automatic type inference."""
        value = value.strip()

        if value.lower() in ("true", "false", "yes", "no", "on", "off"):
            return self._convert_bool(value)

        if value.lower() in ("none", "null"):
            return None

        if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
            return int(value)

        try:
            return float(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        if "," in value:
            return [item.strip() for item in value.split(",")]

        return value

    def _convert_bool(self, value: str) -> bool:
        """Convert string to boolean."""
        value = value.lower().strip()
        if value in ("true", "yes", "on", "1"):
            return True
        elif value in ("false", "no", "off", "0"):
            return False
        else:
            raise ValueError(f"Cannot convert '{value}' to boolean")

    def _set_nested_value(self, config: dict[str, Any], key: str, value: Any) -> None:
        """Set a nested value in the configuration dictionary."""
        keys = key.split(".")
        current = config

        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value
