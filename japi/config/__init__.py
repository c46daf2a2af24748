"""Application configuration."""

from japi.config.settings import Settings, get_settings, parse_database_url


__all__ = ["Settings", "get_settings", "parse_database_url"]
