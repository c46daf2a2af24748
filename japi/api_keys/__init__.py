"""API key module.

Keys are issued behind the server's master key and elevate comments posted
with them to the WEBMASTER author type.

Note: Router is not exported here to avoid circular imports.
"""

from .models import API_KEYS_TABLES_CQL, ApiKey, create_api_key
from .service import ApiKeyError, ApiKeyService, InvalidMasterKeyError
from .store import ApiKeyStore, CassandraApiKeyStore


__all__ = [
    "API_KEYS_TABLES_CQL",
    "ApiKey",
    "ApiKeyError",
    "ApiKeyService",
    "ApiKeyStore",
    "CassandraApiKeyStore",
    "InvalidMasterKeyError",
    "create_api_key",
]
