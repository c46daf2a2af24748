"""Health check module."""

from japi.health.router import router


__all__ = ["router"]
