"""Per-request values shared with the logging pipeline.

The middleware sets the request id (and a trace id when the caller propagates
one); the API key service adds the domain of a key once it has been resolved.
``add_context_processor`` in ``japi.core.logging`` copies whatever is set into
every log event.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)
key_domain_var: ContextVar[str | None] = ContextVar("key_domain", default=None)


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Bind a request id, generating one when the caller sent none.

    Returns:
        The id now bound to the context
    """
    value = request_id or str(uuid4())
    request_id_var.set(value)
    return value


def get_trace_id() -> str | None:
    return trace_id_var.get()


def set_trace_id(trace_id: str | None) -> None:
    trace_id_var.set(trace_id)


def get_key_domain() -> str | None:
    """Domain of the API key presented with the current request, if any."""
    return key_domain_var.get()


def set_key_domain(domain: str | None) -> None:
    key_domain_var.set(domain)


def get_context() -> dict[str, Any]:
    """Bound values, leaving out the unset ones."""
    values = {
        "request_id": request_id_var.get(),
        "trace_id": trace_id_var.get(),
        "key_domain": key_domain_var.get(),
    }
    return {name: value for name, value in values.items() if value}


def clear_context() -> None:
    """Reset every value once a request is done."""
    request_id_var.set("")
    trace_id_var.set(None)
    key_domain_var.set(None)
