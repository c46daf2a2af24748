"""Tests for CassandraCommentStore against a mocked session."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from cassandra.cluster import Session

from japi.comments.models import AuthorType, Comment, create_comment
from japi.comments.store import CassandraCommentStore
from japi.utils.urls import PREFIX_UPPER_SENTINEL


@pytest.fixture
def mock_session():
    """Mock Cassandra session."""
    session = Mock(spec=Session)
    # Each prepared statement remembers its CQL
    session.prepare = Mock(side_effect=lambda cql: Mock(query_string=cql))
    # Make aexecute awaitable (cassandra-asyncio-driver)
    session.aexecute = AsyncMock(return_value=[])
    return session


@pytest.fixture
def store(mock_session) -> CassandraCommentStore:
    return CassandraCommentStore(session=mock_session, keyspace="test_keyspace")


@pytest.fixture
def top_level() -> Comment:
    return create_comment(content="hi", site_url="https://x.com/page", author="Bob")


@pytest.fixture
def reply(top_level: Comment) -> Comment:
    return create_comment(
        content="re", site_url="https://x.com/page", parent_id=top_level.comment_id
    )


def make_row(**overrides) -> SimpleNamespace:
    """Row as returned by the driver's named tuple factory."""
    row = {
        "comment_id": "abcdefghijkl",
        "author": "Bob",
        "content": "hi",
        "additional_info": '{"k":1}',
        "author_type": "WEBMASTER",
        "site_url": "https%3A%2F%2Fx.com",
        "site_host": "x.com",
        "site_url_key": "https%3a%2f%2fx.com",
        "created_at": datetime(2024, 1, 1, tzinfo=UTC),
    }
    row.update(overrides)
    return SimpleNamespace(**row)


def make_partial_row(**overrides) -> SimpleNamespace:
    """Row left behind by an UPDATE on a deleted key: key columns and content."""
    row = {
        "comment_id": "zombie000000",
        "author": None,
        "content": "edited",
        "additional_info": None,
        "author_type": None,
        "site_url": None,
        "site_host": "x.com",
        "site_url_key": "https%3a%2f%2fx.com",
        "created_at": datetime(2024, 1, 1, tzinfo=UTC),
    }
    row.update(overrides)
    return SimpleNamespace(**row)


def executed_statements(mock_session) -> list:
    return [call.args[0] for call in mock_session.aexecute.await_args_list]


class TestPrepareStatements:
    """Tests for statement preparation."""

    def test_statements_use_keyspace(self, store: CassandraCommentStore):
        assert "test_keyspace.comments_by_id" in store._insert_by_id.query_string
        assert "test_keyspace.comments_by_site" in store._get_by_site_prefix.query_string

    def test_prefix_query_is_a_clustering_range(self, store: CassandraCommentStore):
        cql = store._get_by_site_prefix.query_string
        assert "site_url_key >= ?" in cql
        assert "site_url_key < ?" in cql


class TestInsertComment:
    """Tests for insert_comment method."""

    @pytest.mark.asyncio
    async def test_top_level_goes_to_site_table(
        self, store: CassandraCommentStore, mock_session, top_level: Comment
    ):
        await store.insert_comment(top_level)

        assert executed_statements(mock_session) == [
            store._insert_by_id,
            store._insert_by_site,
        ]

    @pytest.mark.asyncio
    async def test_reply_goes_to_parent_table(
        self, store: CassandraCommentStore, mock_session, reply: Comment
    ):
        await store.insert_comment(reply)

        assert executed_statements(mock_session) == [
            store._insert_by_id,
            store._insert_by_parent,
        ]
        params = mock_session.aexecute.await_args_list[1].args[1]
        assert params[0] == reply.parent_id

    @pytest.mark.asyncio
    async def test_additional_info_serialized(
        self, store: CassandraCommentStore, mock_session
    ):
        comment = create_comment(
            content="hi", site_url="https://x.com", additional_info={"a": [1, 2]}
        )

        await store.insert_comment(comment)

        params = mock_session.aexecute.await_args_list[0].args[1]
        assert params[4] == '{"a":[1,2]}'
        assert params[5] == "DEFAULT"


class TestGetComment:
    """Tests for get_comment method."""

    @pytest.mark.asyncio
    async def test_found(self, store: CassandraCommentStore, mock_session):
        result = Mock()
        result.one.return_value = make_row(parent_id=None)
        mock_session.aexecute.return_value = result

        comment = await store.get_comment("abcdefghijkl")

        assert comment is not None
        assert comment.comment_id == "abcdefghijkl"
        assert comment.author_type == AuthorType.WEBMASTER
        assert comment.additional_info == {"k": 1}

    @pytest.mark.asyncio
    async def test_not_found(self, store: CassandraCommentStore, mock_session):
        result = Mock()
        result.one.return_value = None
        mock_session.aexecute.return_value = result

        assert await store.get_comment("missing") is None

    @pytest.mark.asyncio
    async def test_partial_row_is_missing(
        self, store: CassandraCommentStore, mock_session
    ):
        result = Mock()
        result.one.return_value = make_partial_row(parent_id=None)
        mock_session.aexecute.return_value = result

        assert await store.get_comment("zombie000000") is None


class TestListTopLevel:
    """Tests for list_top_level method."""

    @pytest.mark.asyncio
    async def test_queries_prefix_range(
        self, store: CassandraCommentStore, mock_session
    ):
        await store.list_top_level("x.com", "https%3a%2f%2fx.com")

        mock_session.aexecute.assert_awaited_once_with(
            store._get_by_site_prefix,
            [
                "x.com",
                "https%3a%2f%2fx.com",
                "https%3a%2f%2fx.com" + PREFIX_UPPER_SENTINEL,
            ],
        )

    @pytest.mark.asyncio
    async def test_sorted_chronologically(
        self, store: CassandraCommentStore, mock_session
    ):
        # Rows come back ordered by URL first
        mock_session.aexecute.return_value = [
            make_row(
                comment_id="newer0000000",
                site_url_key="https%3a%2f%2fx.com",
                created_at=datetime(2024, 1, 2, tzinfo=UTC),
            ),
            make_row(
                comment_id="older0000000",
                site_url_key="https%3a%2f%2fx.com%2fpage",
                created_at=datetime(2024, 1, 1, tzinfo=UTC),
            ),
        ]

        comments = await store.list_top_level("x.com", "https%3a%2f%2fx.com")

        assert [c.comment_id for c in comments] == ["older0000000", "newer0000000"]
        assert all(c.parent_id is None for c in comments)

    @pytest.mark.asyncio
    async def test_partial_rows_skipped(
        self, store: CassandraCommentStore, mock_session
    ):
        mock_session.aexecute.return_value = [make_partial_row(), make_row()]

        comments = await store.list_top_level("x.com", "https%3a%2f%2fx.com")

        assert [c.comment_id for c in comments] == ["abcdefghijkl"]


class TestListReplies:
    """Tests for list_replies method."""

    @pytest.mark.asyncio
    async def test_rows_mapped(self, store: CassandraCommentStore, mock_session):
        mock_session.aexecute.return_value = [make_row(parent_id="parent000000")]

        replies = await store.list_replies("parent000000")

        mock_session.aexecute.assert_awaited_once_with(
            store._get_by_parent, ["parent000000"]
        )
        assert replies[0].parent_id == "parent000000"

    @pytest.mark.asyncio
    async def test_partial_rows_skipped(
        self, store: CassandraCommentStore, mock_session
    ):
        mock_session.aexecute.return_value = [
            make_partial_row(parent_id="parent000000")
        ]

        assert await store.list_replies("parent000000") == []


class TestUpdateContent:
    """Tests for update_content method."""

    def test_updates_are_conditional(self, store: CassandraCommentStore):
        for statement in (
            store._update_content_by_id,
            store._update_content_by_site,
            store._update_content_by_parent,
        ):
            assert "IF EXISTS" in statement.query_string

    @pytest.mark.asyncio
    async def test_updates_both_copies(
        self, store: CassandraCommentStore, mock_session, top_level: Comment
    ):
        mock_session.aexecute.return_value = Mock(was_applied=True)

        assert await store.update_content(top_level, "new") is True

        assert executed_statements(mock_session) == [
            store._update_content_by_id,
            store._update_content_by_site,
        ]

    @pytest.mark.asyncio
    async def test_reply_updates_parent_table(
        self, store: CassandraCommentStore, mock_session, reply: Comment
    ):
        mock_session.aexecute.return_value = Mock(was_applied=True)

        assert await store.update_content(reply, "new") is True

        assert executed_statements(mock_session) == [
            store._update_content_by_id,
            store._update_content_by_parent,
        ]

    @pytest.mark.asyncio
    async def test_deleted_comment_not_recreated(
        self, store: CassandraCommentStore, mock_session, top_level: Comment
    ):
        """When the primary row is gone the query table is left alone."""
        mock_session.aexecute.return_value = Mock(was_applied=False)

        assert await store.update_content(top_level, "new") is False

        assert executed_statements(mock_session) == [store._update_content_by_id]


class TestDeleteComment:
    """Tests for delete_comment method."""

    @pytest.mark.asyncio
    async def test_top_level(
        self, store: CassandraCommentStore, mock_session, top_level: Comment
    ):
        await store.delete_comment(top_level)

        assert executed_statements(mock_session) == [
            store._delete_by_site,
            store._delete_by_id,
        ]

    @pytest.mark.asyncio
    async def test_reply(
        self, store: CassandraCommentStore, mock_session, reply: Comment
    ):
        await store.delete_comment(reply)

        assert executed_statements(mock_session) == [
            store._delete_by_parent,
            store._delete_by_id,
        ]
