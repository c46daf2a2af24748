"""Utility modules for jAPI Comments."""

from japi.utils.urls import (
    encode_site_url,
    is_valid_url,
    prefix_range,
    site_host,
    site_url_key,
    trim_slash_end,
)


__all__ = [
    "encode_site_url",
    "is_valid_url",
    "prefix_range",
    "site_host",
    "site_url_key",
    "trim_slash_end",
]
