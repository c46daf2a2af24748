"""API key service layer.

Business logic for:
- Issuing keys behind the master key
- Resolving a presented key to the author type it grants
"""

import structlog

from japi.comments.models import AuthorType
from japi.core.context import set_key_domain

from .models import ApiKey, create_api_key
from .security import generate_api_key, hash_api_key, verify_master_key
from .store import ApiKeyStore


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class ApiKeyError(Exception):
    """Base API key error."""

    def __init__(self, message: str, code: str = "api_key_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidMasterKeyError(ApiKeyError):
    """Master key missing or wrong."""

    def __init__(self, message: str = "Not Found"):
        super().__init__(message, "invalid_master_key")


# ==============================================================================
# API Key Service
# ==============================================================================


class ApiKeyService:
    """Service for API key issuance and lookup."""

    # Author type granted to comments posted with any valid key
    KEY_HOLDER_AUTHOR_TYPE = AuthorType.WEBMASTER

    def __init__(self, store: ApiKeyStore, master_key: str | None):
        self.store = store
        self.master_key = master_key

    async def issue_key(self, domain: str, master_key: str) -> str:
        """Create a key bound to ``domain``.

        Returns:
            The raw key. It is only available here; the store keeps its hash.

        Raises:
            InvalidMasterKeyError: If master_key does not match
        """
        if not verify_master_key(master_key, self.master_key):
            logger.warning("api_key_issuance_denied", domain=domain)
            raise InvalidMasterKeyError

        raw_key = generate_api_key()
        api_key = create_api_key(raw_key, domain)
        await self.store.insert_api_key(api_key)

        logger.info(
            "api_key_issued",
            domain=domain,
            key_prefix=api_key.key_prefix,
            author_type=api_key.author_type.value,
        )
        return raw_key

    async def find_key(self, raw_key: str | None) -> ApiKey | None:
        """Look up a presented key; empty or unknown keys resolve to None."""
        if not raw_key:
            return None

        api_key = await self.store.get_api_key(hash_api_key(raw_key))
        if api_key is None:
            logger.info("api_key_unknown")
            return None

        set_key_domain(api_key.domain)
        return api_key

    async def resolve_author_type(self, raw_key: str | None) -> AuthorType:
        """Author type for a comment posted with ``raw_key``."""
        api_key = await self.find_key(raw_key)
        if api_key is None:
            return AuthorType.DEFAULT
        return self.KEY_HOLDER_AUTHOR_TYPE
