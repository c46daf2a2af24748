"""FastAPI dependencies for API key issuance."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import ApiKeyError, ApiKeyService


async def get_api_key_service(request: Request) -> ApiKeyService:
    """Get API key service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "api_key_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="API key service unavailable",
        )
    return app_state.api_key_service


ApiKeyServiceDep = Annotated[ApiKeyService, Depends(get_api_key_service)]


def handle_api_key_error(error: ApiKeyError) -> HTTPException:
    """Convert API key errors to HTTP exceptions.

    A bad master key answers exactly like an unknown route.
    """
    status_map = {
        "invalid_master_key": status.HTTP_404_NOT_FOUND,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
