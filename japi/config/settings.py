"""Settings read from the environment (and ``.env``)."""

from functools import lru_cache
from typing import Literal
from urllib.parse import unquote

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """jAPI configuration. Every field maps to the upper-cased env variable."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "japi-comments"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production", "testing"] = (
        "development"
    )
    debug: bool = True

    # Server (python -m japi)
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    api_workers: int = 1
    api_reload: bool = True

    master_key: str | None = Field(
        default=None,
        description="Secret for /create-api-key; issuance is disabled while unset",
    )

    database_url: str | None = Field(
        default=None,
        description="cassandra://[user[:password]@]host1[,host2][:port]/keyspace",
    )
    cassandra_hosts: list[str] = ["localhost"]
    cassandra_port: int = 9042
    cassandra_keyspace: str = "japi"
    cassandra_username: str | None = None
    cassandra_password: str | None = None
    cassandra_protocol_version: int = 4
    cassandra_connect_timeout: float = 10.0

    comment_max_length: int = Field(
        default=10000, description="Longest accepted comment content, in characters"
    )
    markdown_extensions: list[str] = Field(
        default=["fenced_code", "sane_lists"],
        description="Python-Markdown extensions used when parseMarkdown is set",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"
    log_include_caller_info: bool = True
    log_dir: str = "logs"
    log_file_max_bytes: int = 10 * 1024 * 1024
    log_file_backup_count: int = 5
    log_requests: bool = True
    log_exclude_paths: list[str] = ["/health"]

    # The widget runs on arbitrary third-party origins
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["*"]
    cors_max_age: int = 600

    @model_validator(mode="after")
    def apply_database_url(self) -> "Settings":
        """Let DATABASE_URL take precedence over the individual Cassandra fields."""
        if self.database_url:
            for name, value in parse_database_url(self.database_url).items():
                setattr(self, name, value)
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def key_issuance_enabled(self) -> bool:
        return bool(self.master_key)


def parse_database_url(url: str) -> dict[str, object]:
    """Translate a cassandra:// connection string into Settings fields.

    Several contact points may be given separated by commas; a port on any of
    them applies to the whole cluster.

    Raises:
        ValueError: If the scheme is not cassandra or no host is given
    """
    scheme, sep, rest = url.partition("://")
    if not sep or scheme.lower() != "cassandra":
        msg = "DATABASE_URL must use the cassandra:// scheme"
        raise ValueError(msg)

    location, _, keyspace = rest.partition("/")
    keyspace = keyspace.split("?", 1)[0].strip("/")

    options: dict[str, object] = {}
    userinfo, at, hostinfo = location.rpartition("@")
    if at:
        username, _, password = userinfo.partition(":")
        options["cassandra_username"] = unquote(username) or None
        options["cassandra_password"] = unquote(password) or None

    hosts: list[str] = []
    for entry in hostinfo.split(","):
        host, colon, port = entry.strip().partition(":")
        if colon and port:
            options["cassandra_port"] = int(port)
        if host:
            hosts.append(host)

    if not hosts:
        msg = "DATABASE_URL must name at least one host"
        raise ValueError(msg)

    options["cassandra_hosts"] = hosts
    if keyspace:
        options["cassandra_keyspace"] = keyspace
    return options


@lru_cache
def get_settings() -> Settings:
    return Settings()
