"""Exception handlers mapping engine errors onto HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ...core.turn_state import StateTransitionError
from ...core.validation import PreconditionViolation, RulesEngineError

logger = logging.getLogger(__name__)


def _error_body(exc: Exception, code: str) -> dict:
    return {"error": code, "message": str(exc)}


async def rules_engine_exception_handler(
    request: Request, exc: RulesEngineError
) -> JSONResponse:
    """Operations in the wrong state and inconsistent reports are conflicts."""
    if isinstance(exc, StateTransitionError):
        code = "invalid_state"
    elif isinstance(exc, PreconditionViolation):
        code = "precondition_violation"
    else:
        code = "rules_engine_error"
    logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=409, content=_error_body(exc, code))


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Bad arguments that passed request validation (e.g. an absent colour)."""
    logger.debug(f"{request.method} {request.url.path} invalid argument: {exc}")
    return JSONResponse(status_code=422, content=_error_body(exc, "invalid_argument"))


def setup_error_handlers(app: FastAPI) -> None:
    """Register the exception handlers on ``app``."""
    app.add_exception_handler(RulesEngineError, rules_engine_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
