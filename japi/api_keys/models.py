"""Database models for API keys.

Keys are stored by SHA-256 hash; the raw key is returned to the caller once at
issuance and never persisted. ``key_prefix`` keeps the first characters so an
operator can tell keys apart.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from japi.comments.models import AuthorType

from .security import hash_api_key, key_prefix


API_KEYS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.api_keys (
    key_hash TEXT PRIMARY KEY,
    key_prefix TEXT,
    domain TEXT,
    author_type TEXT,
    created_at TIMESTAMP
)
"""

API_KEYS_TABLES_CQL = [API_KEYS_TABLE_CQL]


@dataclass
class ApiKey:
    """Issued API key (hash only)."""

    key_hash: str
    key_prefix: str
    domain: str
    author_type: AuthorType
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "ApiKey":
        """Create ApiKey from Cassandra row."""
        return cls(
            key_hash=row.key_hash,
            key_prefix=row.key_prefix,
            domain=row.domain,
            author_type=AuthorType(row.author_type or AuthorType.DEFAULT.value),
            created_at=row.created_at,
        )


def create_api_key(
    raw_key: str,
    domain: str,
    author_type: AuthorType = AuthorType.DEFAULT,
) -> ApiKey:
    """Build the stored record for a freshly generated key."""
    return ApiKey(
        key_hash=hash_api_key(raw_key),
        key_prefix=key_prefix(raw_key),
        domain=domain,
        author_type=author_type,
        created_at=datetime.now(UTC),
    )
