"""Dependency injection functions for FastAPI routes."""

import threading
import time
from typing import Optional

from fastapi import Depends, HTTPException, Request

from ..config.manager import ConfigurationModule
from ..core.turn_state import TurnStateMachine


class ApplicationState:
    """Application state container.

    Holds the single frame served by the API. The engine is synchronous and
    not thread-safe, so routes take ``lock`` around every engine call.
    """

    def __init__(
        self,
        config_module: Optional[ConfigurationModule] = None,
        engine: Optional[TurnStateMachine] = None,
    ):
        self.config_module = config_module
        self.engine = engine
        self.lock = threading.RLock()
        self.startup_time: float = time.time()

    @property
    def is_healthy(self) -> bool:
        return self.engine is not None


def get_app_state(request: Request) -> ApplicationState:
    """Get the application state attached to the running app."""
    state = getattr(request.app.state, "snooker", None)
    if state is None:
        raise HTTPException(status_code=503, detail="Application not initialized")
    return state


def get_engine(
    app_state: ApplicationState = Depends(get_app_state),
) -> TurnStateMachine:
    """Get the rules engine instance."""
    if app_state.engine is None:
        raise HTTPException(status_code=503, detail="Rules engine not available")
    return app_state.engine


def get_config_module(
    app_state: ApplicationState = Depends(get_app_state),
) -> ConfigurationModule:
    """Get the configuration module instance."""
    if app_state.config_module is None:
        raise HTTPException(
            status_code=503, detail="Configuration module not available"
        )
    return app_state.config_module
