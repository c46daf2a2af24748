"""API key persistence."""

from typing import TYPE_CHECKING, Protocol

from .models import ApiKey


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ApiKeyStore(Protocol):
    """Storage capabilities used by ApiKeyService."""

    async def insert_api_key(self, api_key: ApiKey) -> None: ...

    async def get_api_key(self, key_hash: str) -> ApiKey | None: ...


class CassandraApiKeyStore:
    """ApiKeyStore backed by Cassandra. Keys are insert-only."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace

        self._insert_api_key = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.api_keys
            (key_hash, key_prefix, domain, author_type, created_at)
            VALUES (?, ?, ?, ?, ?)
        """)

        self._get_api_key = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.api_keys
            WHERE key_hash = ?
        """)

    async def insert_api_key(self, api_key: ApiKey) -> None:
        await self.session.aexecute(
            self._insert_api_key,
            [
                api_key.key_hash,
                api_key.key_prefix,
                api_key.domain,
                api_key.author_type.value,
                api_key.created_at,
            ],
        )

    async def get_api_key(self, key_hash: str) -> ApiKey | None:
        result = await self.session.aexecute(self._get_api_key, [key_hash])
        row = result.one()
        return ApiKey.from_row(row) if row else None
