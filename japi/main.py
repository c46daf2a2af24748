"""jAPI Comments application.

Routes are served at the root and again under ``/api``. When Cassandra cannot
be reached at startup the process still comes up: health probes answer and the
comment routes return 503 until it is restarted.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from japi.api_keys.router import is_disguised_path
from japi.api_keys.router import router as api_keys_router
from japi.api_keys.service import ApiKeyService
from japi.api_keys.store import CassandraApiKeyStore
from japi.comments.router import router as comments_router
from japi.comments.sanitizer import ContentPipeline
from japi.comments.service import CommentService
from japi.comments.store import CassandraCommentStore
from japi.config import Settings, get_settings
from japi.core.database import init_async_cassandra, shutdown_async_cassandra
from japi.core.errors import register_exception_handlers
from japi.core.logging import configure_structlog, get_logger
from japi.core.middleware import RequestContextMiddleware
from japi.health import router as health_router


settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)

API_PREFIX = "/api"


def build_services(
    session: Any, settings: Settings
) -> tuple[ApiKeyService, CommentService]:
    """Wire the Cassandra stores into the services."""
    keyspace = settings.cassandra_keyspace
    api_key_service = ApiKeyService(
        store=CassandraApiKeyStore(session=session, keyspace=keyspace),
        master_key=settings.master_key,
    )
    comment_service = CommentService(
        store=CassandraCommentStore(session=session, keyspace=keyspace),
        api_keys=api_key_service,
        pipeline=ContentPipeline(settings.markdown_extensions),
        max_content_length=settings.comment_max_length,
    )
    return api_key_service, comment_service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info(
        "application_starting",
        version=settings.app_version,
        environment=settings.environment,
        key_issuance_enabled=settings.key_issuance_enabled,
    )

    try:
        session = await init_async_cassandra()
    except Exception as e:
        logger.warning("database_unavailable", error=str(e))
    else:
        app.state.api_key_service, app.state.comment_service = build_services(
            session, settings
        )
        logger.info("services_ready", keyspace=settings.cassandra_keyspace)

    yield

    logger.info("application_stopping")
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    settings = get_settings()

    # Interactive docs only while developing; key issuance is never listed
    docs_enabled = settings.is_development
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Embeddable threaded comments, scoped by page URL",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    app.state.api_key_service = None
    app.state.comment_service = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )
    # Added last so it runs outermost
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    register_exception_handlers(app, disguised=is_disguised_path)

    app.include_router(health_router)
    for prefix, in_schema in (("", True), (API_PREFIX, False)):
        app.include_router(comments_router, prefix=prefix, include_in_schema=in_schema)
        app.include_router(api_keys_router, prefix=prefix, include_in_schema=in_schema)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        return {
            "message": "jAPI Comments",
            "version": settings.app_version,
            "docs": f"{request.base_url}docs",
        }

    return app


app = create_app()
