"""Global exception handlers for the assistant error taxonomy."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from portal_assistant.core.errors import (
    AssistantError,
    BusyError,
    ConfigurationError,
    SessionNotFoundError,
    SubjectNotFoundError,
    TransportError,
    UpstreamError,
)

from .models import ErrorResponse

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[AssistantError], int] = {
    ConfigurationError: 503,
    TransportError: 502,
    UpstreamError: 502,
    BusyError: 409,
    SessionNotFoundError: 404,
    SubjectNotFoundError: 404,
}
DEFAULT_ERROR_STATUS = 500


def status_for(exc: AssistantError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return DEFAULT_ERROR_STATUS


def register_exception_handlers(app: FastAPI) -> None:
    """Register the ``AssistantError`` handler on *app*."""

    @app.exception_handler(AssistantError)
    async def handle_assistant_error(
        request: Request, exc: AssistantError
    ) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.warning("%s on %s: %s", exc.code, request.url.path, exc)
        body = ErrorResponse(detail=str(exc), code=exc.code, hint=exc.hint)
        headers = {"Retry-After": "1"} if isinstance(exc, BusyError) else None
        return JSONResponse(
            status_code=status_code,
            content=body.model_dump(),
            headers=headers,
        )
