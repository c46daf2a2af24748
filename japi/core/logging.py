"""Logging setup.

structlog renders every event, including records from stdlib loggers
(uvicorn, the Cassandra driver), through one processor chain:

- request context and application info are attached to each event
- values under key-like names (API keys, the master key) are masked
- the console gets colored or JSON output, depending on ``LOG_FORMAT``
- ``<app>.log`` and ``<app>.error.log`` rotate in ``LOG_DIR`` as JSON
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor

from japi.core.context import get_context


if TYPE_CHECKING:
    from japi.config.settings import Settings


SENSITIVE_KEYS = frozenset(
    {
        "api_key",
        "apikey",
        "master_key",
        "masterkey",
        "key_hash",
        "password",
        "secret",
        "token",
        "authorization",
    }
)

# Values at most this long are fully hidden
_FULL_MASK_LENGTH = 4

QUIET_LOGGERS = ("uvicorn.access", "uvicorn.error", "cassandra", "MARKDOWN")


def add_context_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Attach request_id, trace_id and key_domain when bound."""
    event_dict.update(get_context())
    return event_dict


def add_app_info_processor(settings: "Settings") -> Processor:
    app_info = {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }

    def processor(
        logger: logging.Logger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.update(app_info)
        return event_dict

    return processor


def mask_value(key: str, value: Any) -> Any:
    """Mask strings stored under sensitive names, looking inside dicts."""
    if isinstance(value, dict):
        return {k: mask_value(str(k), v) for k, v in value.items()}
    if not isinstance(value, str):
        return value
    if not any(name in key.lower() for name in SENSITIVE_KEYS):
        return value
    if len(value) <= _FULL_MASK_LENGTH:
        return "***"
    return f"{value[:2]}{'*' * (len(value) - 4)}{value[-2:]}"


def filter_sensitive_data(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    return {key: mask_value(key, value) for key, value in event_dict.items()}


def build_shared_processors(settings: "Settings") -> list[Processor]:
    """Processors shared by structlog loggers and foreign stdlib records."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_context_processor,
        add_app_info_processor(settings),
        filter_sensitive_data,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.log_include_caller_info:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            )
        )
    return processors


def _rotating_handler(
    path: Path, settings: "Settings", level: str
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=settings.log_file_max_bytes,
        backupCount=settings.log_file_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def configure_structlog(settings: "Settings", log_dir: Path | str | None = None) -> None:
    """Install console and file handlers on the root logger and configure structlog.

    Args:
        settings: Application settings
        log_dir: Directory for log files (default: ./logs)
    """
    log_dir = Path(log_dir or "logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    shared_processors = build_shared_processors(settings)

    def formatter(renderer: Processor) -> structlog.stdlib.ProcessorFormatter:
        return structlog.stdlib.ProcessorFormatter(
            processor=renderer, foreign_pre_chain=shared_processors
        )

    if settings.log_format == "json":
        console_renderer: Processor = structlog.processors.JSONRenderer()
    else:
        console_renderer = structlog.dev.ConsoleRenderer(
            colors=True, exception_formatter=structlog.dev.plain_traceback
        )

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(settings.log_level)
    console.setFormatter(formatter(console_renderer))

    handlers: list[logging.Handler] = [console]
    for filename, level in (
        (f"{settings.app_name}.log", settings.log_level),
        (f"{settings.app_name}.error.log", "ERROR"),
    ):
        file_handler = _rotating_handler(log_dir / filename, settings, level)
        file_handler.setFormatter(formatter(structlog.processors.JSONRenderer()))
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(settings.log_level)
    for handler in handlers:
        root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
