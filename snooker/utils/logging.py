"""Logging configuration utilities for the snooker trainer."""

import logging
import logging.config
import logging.handlers
from pathlib import Path
from typing import Optional, Union

import yaml

from ..config.models.schemas import LoggingConfig


def setup_logging(
    config: Optional[LoggingConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
) -> None:
    """Setup logging configuration.

    A YAML ``dictConfig`` file takes precedence when one is given (directly
    or through ``config.config_path``); otherwise a console handler, plus a
    rotating file handler when ``config.file`` is set, is installed on the
    root logger.

    Args:
        config: Logging section of the application configuration
        config_path: Path to a logging ``dictConfig`` YAML file
    """
    config = config or LoggingConfig()
    config_path = config_path or config.config_path
    level = getattr(logging, str(config.level).upper(), logging.INFO)

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            try:
                with open(path, encoding="utf-8") as config_file:
                    logging.config.dictConfig(yaml.safe_load(config_file))
                logging.getLogger(__name__).debug(
                    f"Logging configured from {path}"
                )
                return
            except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
                print(f"Error loading logging configuration from {path}: {e}")
                print("Using default logging configuration")
        else:
            print(f"Logging config file {path} not found. Using default configuration.")

    _setup_default_logging(level, config)


def _setup_default_logging(level: int, config: LoggingConfig) -> None:
    """Setup default logging with a console handler and optional file handler.

    Args:
        level: Logging level
        config: Logging section of the application configuration
    """
    formatter = logging.Formatter(config.format, datefmt=config.datefmt)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_snooker_handler", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler._snooker_handler = True
    root_logger.addHandler(console_handler)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_handler._snooker_handler = True
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)


def configure_uvicorn_logging() -> None:
    """Route uvicorn's error log through the root handlers and mute access logs."""
    logging.getLogger("uvicorn.access").disabled = True
    uvicorn_error = logging.getLogger("uvicorn.error")
    uvicorn_error.handlers = []
    uvicorn_error.propagate = True
