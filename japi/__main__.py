"""Run the API with uvicorn: ``python -m japi``."""

import uvicorn

from japi.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "japi.main:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=settings.api_workers,
        reload=settings.api_reload and settings.is_development,
        # structlog handles formatting; see japi.core.logging
        log_config=None,
    )


if __name__ == "__main__":
    main()
