"""Comment persistence.

``CommentStore`` is what the service layer needs from storage;
``CassandraCommentStore`` implements it over the query tables declared in
``models``. Each comment lives in ``comments_by_id`` plus either
``comments_by_site`` (top-level) or ``comments_by_parent`` (replies), and every
write touches both copies.
"""

from typing import TYPE_CHECKING, Protocol

import structlog

from japi.utils.urls import prefix_range

from .models import Comment, encode_additional_info, is_complete_row


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


class CommentStore(Protocol):
    """Storage capabilities used by CommentService."""

    async def insert_comment(self, comment: Comment) -> None: ...

    async def get_comment(self, comment_id: str) -> Comment | None: ...

    async def list_top_level(self, host: str, url_key_prefix: str) -> list[Comment]: ...

    async def list_replies(self, parent_id: str) -> list[Comment]: ...

    async def update_content(self, comment: Comment, content: str) -> bool: ...

    async def delete_comment(self, comment: Comment) -> None: ...


class CassandraCommentStore:
    """CommentStore backed by Cassandra (cassandra-asyncio-driver)."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_by_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_id
            (comment_id, parent_id, author, content, additional_info, author_type,
             site_url, site_host, site_url_key, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_by_site = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_site
            (site_host, site_url_key, created_at, comment_id, author, content,
             additional_info, author_type, site_url)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_by_parent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_parent
            (parent_id, created_at, comment_id, author, content, additional_info,
             author_type, site_url, site_host, site_url_key)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_by_id = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments_by_id
            WHERE comment_id = ?
        """)

        self._get_by_site_prefix = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments_by_site
            WHERE site_host = ? AND site_url_key >= ? AND site_url_key < ?
        """)

        self._get_by_parent = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments_by_parent
            WHERE parent_id = ?
        """)

        self._update_content_by_id = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments_by_id
            SET content = ?
            WHERE comment_id = ?
            IF EXISTS
        """)

        self._update_content_by_site = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments_by_site
            SET content = ?
            WHERE site_host = ? AND site_url_key = ? AND created_at = ? AND comment_id = ?
            IF EXISTS
        """)

        self._update_content_by_parent = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments_by_parent
            SET content = ?
            WHERE parent_id = ? AND created_at = ? AND comment_id = ?
            IF EXISTS
        """)

        self._delete_by_id = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_id
            WHERE comment_id = ?
        """)

        self._delete_by_site = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_site
            WHERE site_host = ? AND site_url_key = ? AND created_at = ? AND comment_id = ?
        """)

        self._delete_by_parent = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_parent
            WHERE parent_id = ? AND created_at = ? AND comment_id = ?
        """)

    async def insert_comment(self, comment: Comment) -> None:
        """Write a new comment to the primary table and its query table."""
        additional_info = encode_additional_info(comment.additional_info)

        await self.session.aexecute(
            self._insert_by_id,
            [
                comment.comment_id,
                comment.parent_id,
                comment.author,
                comment.content,
                additional_info,
                comment.author_type.value,
                comment.site_url,
                comment.site_host,
                comment.site_url_key,
                comment.created_at,
            ],
        )

        if comment.parent_id is None:
            await self.session.aexecute(
                self._insert_by_site,
                [
                    comment.site_host,
                    comment.site_url_key,
                    comment.created_at,
                    comment.comment_id,
                    comment.author,
                    comment.content,
                    additional_info,
                    comment.author_type.value,
                    comment.site_url,
                ],
            )
        else:
            await self.session.aexecute(
                self._insert_by_parent,
                [
                    comment.parent_id,
                    comment.created_at,
                    comment.comment_id,
                    comment.author,
                    comment.content,
                    additional_info,
                    comment.author_type.value,
                    comment.site_url,
                    comment.site_host,
                    comment.site_url_key,
                ],
            )

    async def get_comment(self, comment_id: str) -> Comment | None:
        """Find a comment by id."""
        result = await self.session.aexecute(self._get_by_id, [comment_id])
        row = result.one()
        if row is None or not is_complete_row(row):
            return None
        return Comment.from_row(row)

    async def list_top_level(self, host: str, url_key_prefix: str) -> list[Comment]:
        """Top-level comments on ``host`` whose URL key starts with the prefix."""
        lower, upper = prefix_range(url_key_prefix)
        rows = await self.session.aexecute(
            self._get_by_site_prefix,
            [host, lower, upper],
        )
        comments = [Comment.from_row(row) for row in rows if is_complete_row(row)]
        # Clustering order is by URL first; listings are chronological
        comments.sort(key=lambda c: (c.created_at, c.comment_id))
        return comments

    async def list_replies(self, parent_id: str) -> list[Comment]:
        """Direct replies to a comment, oldest first."""
        rows = await self.session.aexecute(self._get_by_parent, [parent_id])
        return [Comment.from_row(row) for row in rows if is_complete_row(row)]

    async def update_content(self, comment: Comment, content: str) -> bool:
        """Replace the content of both copies of a comment.

        Every UPDATE is IF EXISTS so a comment deleted since it was read is
        not recreated as a row holding only its key and content.

        Returns:
            False if the comment no longer exists
        """
        result = await self.session.aexecute(
            self._update_content_by_id,
            [content, comment.comment_id],
        )
        if not result.was_applied:
            logger.info("comment_update_skipped", comment_id=comment.comment_id)
            return False

        if comment.parent_id is None:
            await self.session.aexecute(
                self._update_content_by_site,
                [
                    content,
                    comment.site_host,
                    comment.site_url_key,
                    comment.created_at,
                    comment.comment_id,
                ],
            )
        else:
            await self.session.aexecute(
                self._update_content_by_parent,
                [content, comment.parent_id, comment.created_at, comment.comment_id],
            )
        return True

    async def delete_comment(self, comment: Comment) -> None:
        """Delete a single comment from both tables it lives in.

        Replies are not touched; callers delete them first.
        """
        if comment.parent_id is None:
            await self.session.aexecute(
                self._delete_by_site,
                [
                    comment.site_host,
                    comment.site_url_key,
                    comment.created_at,
                    comment.comment_id,
                ],
            )
        else:
            await self.session.aexecute(
                self._delete_by_parent,
                [comment.parent_id, comment.created_at, comment.comment_id],
            )

        await self.session.aexecute(self._delete_by_id, [comment.comment_id])
        logger.debug("comment_row_deleted", comment_id=comment.comment_id)
