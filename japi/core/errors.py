"""JSON error responses.

Every error leaves the API as::

    {"error": true, "message": "...", "status_code": 404, "request_id": "..."}

Request validation failures are 400s with a ``details`` list. Paths for which
``disguised`` returns True answer every failure with the body of an unknown
route, so callers cannot tell that anything is served there.
"""

from collections.abc import Callable
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from japi.core.context import get_request_id


logger = structlog.get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def error_response(
    request: Request, status_code: int, message: str, **extra: Any
) -> ORJSONResponse:
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    return ORJSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "message": message,
            "status_code": status_code,
            "request_id": request_id,
            **extra,
        },
    )


def not_found_response(request: Request) -> ORJSONResponse:
    """The response an unknown route gets."""
    return error_response(request, status.HTTP_404_NOT_FOUND, "Not Found")


def validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]


def register_exception_handlers(
    app: FastAPI, disguised: Callable[[str], bool] = lambda path: False
) -> None:
    """Install the handlers for HTTP, validation and unexpected errors."""

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        logger.warning(
            "http_error",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
        )
        if disguised(request.url.path):
            return not_found_response(request)

        # 5xx details stay in the log
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            return error_response(request, exc.status_code, INTERNAL_ERROR_MESSAGE)
        return error_response(request, exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        details = validation_details(exc)
        logger.warning("request_invalid", details=details, path=request.url.path)
        if disguised(request.url.path):
            return not_found_response(request)

        return error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            "Validation error",
            details=details,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        if disguised(request.url.path):
            return not_found_response(request)

        return error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE
        )
