import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import SessionBusyError, SessionNotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Rejected request: %s (%s)", exc.message, exc.code)
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "error": exc.code},
    )


async def session_not_found_handler(_request: Request, exc: SessionNotFoundError) -> JSONResponse:
    logger.warning("Unknown session %s", exc.session_id)
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc), "error": "session-not-found"},
    )


async def session_busy_handler(_request: Request, exc: SessionBusyError) -> JSONResponse:
    logger.warning("Session %s busy, rejecting overlapping action", exc.session_id)
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "error": "session-busy"},
    )
