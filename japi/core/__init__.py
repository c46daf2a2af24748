# Core infrastructure
from japi.core.context import (
    clear_context,
    get_context,
    get_key_domain,
    get_request_id,
    get_trace_id,
    set_key_domain,
    set_request_id,
    set_trace_id,
)
from japi.core.database import init_async_cassandra, shutdown_async_cassandra
from japi.core.logging import configure_structlog, get_logger
from japi.core.middleware import RequestContextMiddleware


__all__ = [
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_key_domain",
    "get_logger",
    "get_request_id",
    "get_trace_id",
    "init_async_cassandra",
    "set_key_domain",
    "set_request_id",
    "set_trace_id",
    "shutdown_async_cassandra",
]
