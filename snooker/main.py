"""Main entry point for the snooker trainer application."""

import argparse
import logging
from typing import NoReturn, Optional

import uvicorn

from .api.main import create_app
from .config.manager import ConfigurationModule
from .utils.logging import configure_uvicorn_logging, setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Snooker Trainer - turn and scoring rules engine server"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML or JSON configuration file",
    )
    parser.add_argument("--host", type=str, default=None, help="Override api.host")
    parser.add_argument("--port", type=int, default=None, help="Override api.port")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> NoReturn:
    """Main entry point for the application."""
    args = parse_args(argv)

    config = ConfigurationModule(config_file=args.config)
    if args.host is not None:
        config.set("api.host", args.host)
    if args.port is not None:
        config.set("api.port", args.port)
    settings = config.settings

    setup_logging(settings.logging)
    configure_uvicorn_logging()

    logger.info(f"Starting Snooker Trainer on {settings.api.host}:{settings.api.port}")
    logger.info(f"Log level: {settings.logging.level}")

    uvicorn.run(
        create_app(config),
        host=settings.api.host,
        port=settings.api.port,
        log_level=str(settings.logging.level).lower(),
    )

    raise SystemExit(0)


if __name__ == "__main__":
    main()
