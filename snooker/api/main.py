"""FastAPI application serving one snooker frame to the surrounding app."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.manager import ConfigurationModule
from ..core.turn_state import TurnStateMachine
from .dependencies import ApplicationState
from .middleware.error_handler import setup_error_handlers
from .routes import frame, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifecycle management."""
    state: ApplicationState = app.state.snooker
    logger.info(
        f"Snooker trainer API started (frame {state.engine.state.frame_number})"
    )
    yield
    logger.info("Snooker trainer API shutting down")


def create_app(config_module: Optional[ConfigurationModule] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config_module: Loaded configuration (defaults plus environment if None)

    Returns:
        Application with a freshly racked frame
    """
    config_module = config_module or ConfigurationModule()
    settings = config_module.settings

    app = FastAPI(
        title="Snooker Trainer API",
        description="Turn and scoring rules engine for a snooker frame",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.snooker = ApplicationState(
        config_module=config_module,
        engine=TurnStateMachine(config=settings),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handlers(app)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(frame.router, prefix="/api/v1")

    return app
