"""Health check endpoint."""

import time

from fastapi import APIRouter, Depends

from ... import __version__
from ..dependencies import ApplicationState, get_app_state
from ..models.responses import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(
    app_state: ApplicationState = Depends(get_app_state),
) -> HealthResponse:
    """Report whether the rules engine is up."""
    engine = app_state.engine
    return HealthResponse(
        status="healthy" if app_state.is_healthy else "unhealthy",
        version=__version__,
        uptime=time.time() - app_state.startup_time,
        frame_number=engine.state.frame_number if engine else 0,
    )
