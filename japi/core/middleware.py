"""Request context and access logging.

Most traffic comes from the comment widget embedded on third-party pages, so
the access log records the embedding page's ``Origin``. Query strings are
never logged: ``apiKey`` and ``masterKey`` travel there.
"""

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from japi.core.context import clear_context, set_request_id, set_trace_id


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def trace_id_from_headers(request: Request) -> str | None:
    """Trace id from ``X-Trace-ID`` or a W3C ``traceparent`` header."""
    trace_id = request.headers.get("x-trace-id")
    if trace_id:
        return trace_id

    # version-traceid-parentid-flags
    traceparent = request.headers.get("traceparent", "")
    parts = traceparent.split("-")
    return parts[1] if len(parts) >= 2 else None


def client_address(request: Request) -> str | None:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request id and trace id, and log each request once it completes."""

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = tuple(exclude_paths or ())

    def _is_logged(self, path: str) -> bool:
        return self.log_requests and not path.startswith(self.exclude_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        set_trace_id(trace_id_from_headers(request))
        request.state.request_id = request_id

        fields = {
            "method": request.method,
            "path": request.url.path,
            "origin": request.headers.get("origin"),
            "client_ip": client_address(request),
        }

        try:
            response = await call_next(request)

            if self._is_logged(request.url.path):
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    **fields,
                )

            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception as e:
            logger.exception(
                "request_failed",
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                **fields,
            )
            raise
        finally:
            clear_context()


__all__ = ["RequestContextMiddleware"]
