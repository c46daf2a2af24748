"""Cassandra connection for jAPI Comments."""

from japi.core.database.async_cassandra import (
    AsyncCassandraConnection,
    init_async_cassandra,
    keyspace_cql,
    shutdown_async_cassandra,
)


__all__ = [
    "AsyncCassandraConnection",
    "init_async_cassandra",
    "keyspace_cql",
    "shutdown_async_cassandra",
]
