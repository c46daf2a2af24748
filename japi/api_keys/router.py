"""API key issuance endpoint.

Hidden from the OpenAPI schema. Every failure on this path, including request
validation, is answered with the same 404 as an unknown route (see
``is_disguised_path`` and the exception handlers in ``japi.main``).
"""

from fastapi import APIRouter, Query

from .dependencies import ApiKeyServiceDep, handle_api_key_error
from .service import ApiKeyError


CREATE_API_KEY_PATH = "/create-api-key"

router = APIRouter(tags=["api-keys"])


def is_disguised_path(path: str) -> bool:
    """Whether errors on ``path`` must look like a missing route."""
    return path.rstrip("/").endswith(CREATE_API_KEY_PATH)


@router.post(CREATE_API_KEY_PATH, response_model=str, include_in_schema=False)
async def create_api_key(
    api_key_service: ApiKeyServiceDep,
    domain: str = Query(..., min_length=1),
    master_key: str = Query(..., alias="masterKey"),
) -> str:
    """Issue a new API key for ``domain``. The key is shown only once."""
    try:
        return await api_key_service.issue_key(domain=domain, master_key=master_key)
    except ApiKeyError as e:
        raise handle_api_key_error(e) from e
