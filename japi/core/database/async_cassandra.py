"""Cassandra connection and schema bootstrap.

Sessions come from cassandra-asyncio-driver, which adds ``session.aexecute()``
to the regular cassandra-driver session. Connecting is blocking and happens
once at startup; queries are awaited.
"""

import structlog
from cassandra.auth import PlainTextAuthProvider
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy
from cassandra_asyncio.cluster import Cluster

from japi.api_keys.models import API_KEYS_TABLES_CQL
from japi.comments.models import COMMENTS_TABLES_CQL
from japi.config.settings import Settings, get_settings


logger = structlog.get_logger(__name__)

# Table groups created at startup, in order
SCHEMA = (
    ("comments", COMMENTS_TABLES_CQL),
    ("api_keys", API_KEYS_TABLES_CQL),
)


class AsyncCassandraConnection:
    """Process-wide cluster and session holder."""

    _cluster: Cluster | None = None
    _session = None

    @classmethod
    def connect(cls, settings: Settings):
        """Open the session, or return the one already open.

        Raises:
            ConnectionError: If no contact point answers
        """
        if cls._session is not None:
            return cls._session

        auth_provider = None
        if settings.cassandra_username:
            auth_provider = PlainTextAuthProvider(
                username=settings.cassandra_username,
                password=settings.cassandra_password or "",
            )

        cls._cluster = Cluster(
            contact_points=settings.cassandra_hosts,
            port=settings.cassandra_port,
            auth_provider=auth_provider,
            protocol_version=settings.cassandra_protocol_version,
            load_balancing_policy=TokenAwarePolicy(DCAwareRoundRobinPolicy()),
            connect_timeout=settings.cassandra_connect_timeout,
        )

        try:
            cls._session = cls._cluster.connect()
        except Exception as e:
            logger.error(
                "cassandra_connection_failed",
                hosts=settings.cassandra_hosts,
                error=str(e),
            )
            cls._cluster.shutdown()
            cls._cluster = None
            raise ConnectionError(f"Failed to connect to Cassandra: {e}") from e

        logger.info(
            "cassandra_connected",
            hosts=settings.cassandra_hosts,
            port=settings.cassandra_port,
        )
        return cls._session

    @classmethod
    def disconnect(cls) -> None:
        if cls._session is not None:
            cls._session.shutdown()
            cls._session = None
        if cls._cluster is not None:
            cls._cluster.shutdown()
            cls._cluster = None
            logger.info("cassandra_disconnected")


def keyspace_cql(keyspace: str, production: bool) -> str:
    """CREATE KEYSPACE statement; production clusters replicate three ways."""
    if production:
        replication = "'class': 'NetworkTopologyStrategy', 'datacenter1': 3"
    else:
        replication = "'class': 'SimpleStrategy', 'replication_factor': 1"
    return (
        f"CREATE KEYSPACE IF NOT EXISTS {keyspace} "
        f"WITH replication = {{{replication}}} AND durable_writes = true"
    )


async def init_async_keyspace(session, keyspace: str) -> None:
    settings = get_settings()
    await session.aexecute(keyspace_cql(keyspace, settings.is_production))
    logger.info("keyspace_ready", keyspace=keyspace)


async def init_async_tables(
    session, keyspace: str, tables_cql: list[str], group: str
) -> None:
    """Create one group of tables if they do not exist yet."""
    for cql_template in tables_cql:
        await session.aexecute(cql_template.format(keyspace=keyspace))
    logger.info("tables_ready", keyspace=keyspace, group=group)


async def init_async_cassandra():
    """Connect and make sure the keyspace and every table exist.

    Returns:
        Session with aexecute() support
    """
    settings = get_settings()
    keyspace = settings.cassandra_keyspace

    session = AsyncCassandraConnection.connect(settings)
    await init_async_keyspace(session, keyspace)
    session.set_keyspace(keyspace)

    for group, tables_cql in SCHEMA:
        await init_async_tables(session, keyspace, tables_cql, group)

    return session


async def shutdown_async_cassandra() -> None:
    AsyncCassandraConnection.disconnect()
