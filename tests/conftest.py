"""Shared fixtures.

Environment is configured before the application is imported: settings are
cached on first use and logging is configured at import of ``japi.main``.
"""

import dataclasses
import os
import tempfile
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient


os.environ["ENVIRONMENT"] = "testing"
os.environ["MASTER_KEY"] = "test-master-key"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="japi-logs-")
os.environ["LOG_REQUESTS"] = "false"
os.environ.pop("DATABASE_URL", None)

from japi.api_keys.models import ApiKey  # noqa: E402
from japi.api_keys.service import ApiKeyService  # noqa: E402
from japi.comments.models import Comment  # noqa: E402
from japi.comments.service import CommentService  # noqa: E402


MASTER_KEY = "test-master-key"


# ==============================================================================
# In-memory stores
# ==============================================================================


class InMemoryCommentStore:
    """CommentStore keeping comments in a dict, in insertion order."""

    def __init__(self) -> None:
        self.comments: dict[str, Comment] = {}

    async def insert_comment(self, comment: Comment) -> None:
        self.comments[comment.comment_id] = comment

    async def get_comment(self, comment_id: str) -> Comment | None:
        return self.comments.get(comment_id)

    async def list_top_level(self, host: str, url_key_prefix: str) -> list[Comment]:
        matches = [
            c
            for c in self.comments.values()
            if c.parent_id is None
            and c.site_host == host
            and c.site_url_key.startswith(url_key_prefix)
        ]
        return sorted(matches, key=lambda c: c.created_at)

    async def list_replies(self, parent_id: str) -> list[Comment]:
        replies = [c for c in self.comments.values() if c.parent_id == parent_id]
        return sorted(replies, key=lambda c: c.created_at)

    async def update_content(self, comment: Comment, content: str) -> bool:
        if comment.comment_id not in self.comments:
            return False
        self.comments[comment.comment_id] = dataclasses.replace(
            comment, content=content
        )
        return True

    async def delete_comment(self, comment: Comment) -> None:
        del self.comments[comment.comment_id]


class InMemoryApiKeyStore:
    """ApiKeyStore keeping keys in a dict keyed by hash."""

    def __init__(self) -> None:
        self.keys: dict[str, ApiKey] = {}

    async def insert_api_key(self, api_key: ApiKey) -> None:
        self.keys[api_key.key_hash] = api_key

    async def get_api_key(self, key_hash: str) -> ApiKey | None:
        return self.keys.get(key_hash)


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def comment_store() -> InMemoryCommentStore:
    return InMemoryCommentStore()


@pytest.fixture
def api_key_store() -> InMemoryApiKeyStore:
    return InMemoryApiKeyStore()


@pytest.fixture
def api_key_service(api_key_store: InMemoryApiKeyStore) -> ApiKeyService:
    return ApiKeyService(store=api_key_store, master_key=MASTER_KEY)


@pytest.fixture
def comment_service(
    comment_store: InMemoryCommentStore, api_key_service: ApiKeyService
) -> CommentService:
    return CommentService(store=comment_store, api_keys=api_key_service)


@pytest.fixture
def client(
    comment_service: CommentService, api_key_service: ApiKeyService
) -> Iterator[TestClient]:
    """Test client with in-memory services on app.state.

    The client is not entered as a context manager, so the lifespan (and its
    Cassandra connection) does not run.
    """
    from japi.main import app

    app.state.comment_service = comment_service
    app.state.api_key_service = api_key_service

    yield TestClient(app)

    app.state.comment_service = None
    app.state.api_key_service = None


@pytest.fixture
def unavailable_client() -> Iterator[TestClient]:
    """Test client with no services, as when the database is down."""
    from japi.main import app

    app.state.comment_service = None
    app.state.api_key_service = None

    yield TestClient(app)
