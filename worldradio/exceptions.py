"""Exception types and FastAPI exception handlers."""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .logging import get_logger

logger = get_logger(__name__)


class WorldRadioError(Exception):
    """Base error carrying an HTTP status and structured details."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DirectoryError(WorldRadioError):
    """The radio directory could not be reached or returned an unusable body."""


class RelayError(WorldRadioError):
    """The relay failed to fetch from the upstream directory."""


class EndpointNotAllowedError(WorldRadioError):
    """The relay was asked for an upstream path outside the allowed prefixes."""

    status_code = status.HTTP_400_BAD_REQUEST


class StationNotFoundError(WorldRadioError):
    """No station with the requested id is loaded in the session."""

    status_code = status.HTTP_404_NOT_FOUND


class PlaybackError(WorldRadioError):
    """A stream could not be started."""


async def worldradio_error_handler(request: Request, exc: WorldRadioError) -> JSONResponse:
    """Render a WorldRadioError as a JSON body."""
    logger.warning(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=exc.message,
        status_code=exc.status_code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all so unexpected failures still answer with JSON."""
    logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the app."""
    app.add_exception_handler(WorldRadioError, worldradio_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
