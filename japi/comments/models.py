"""Database models for threaded comments.

Cassandra table definitions for:
- comments_by_id: primary copy of every comment, O(1) lookup by id
- comments_by_site: top-level comments, prefix-searchable by page URL
- comments_by_parent: replies, grouped under their parent

Architecture: Adjacency List pattern
- parent_id references the parent comment (NULL for top-level comments)
- Every comment lives in comments_by_id plus exactly one query table
- Deleting a comment walks its replies explicitly (no foreign keys)
"""

import json
import secrets
import string
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from japi.utils.urls import encode_site_url, site_host, site_url_key


class AuthorType(str, Enum):
    """Privilege tier attached to a comment author."""

    DEFAULT = "DEFAULT"
    MODERATOR = "MODERATOR"
    WEBMASTER = "WEBMASTER"


DEFAULT_AUTHOR = "Anonymous"
COMMENT_ID_LENGTH = 12
REPLY_ID_LENGTH = 6

ID_ALPHABET = string.ascii_letters + string.digits


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COMMENTS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_id (
    comment_id TEXT PRIMARY KEY,
    parent_id TEXT,
    author TEXT,
    content TEXT,
    additional_info TEXT,
    author_type TEXT,
    site_url TEXT,
    site_host TEXT,
    site_url_key TEXT,
    created_at TIMESTAMP
)
"""

# Top-level comments - partition by host, cluster by lowercased encoded URL
# so "LIKE url%" becomes a clustering range query
COMMENTS_BY_SITE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_site (
    site_host TEXT,
    site_url_key TEXT,
    created_at TIMESTAMP,
    comment_id TEXT,
    author TEXT,
    content TEXT,
    additional_info TEXT,
    author_type TEXT,
    site_url TEXT,
    PRIMARY KEY ((site_host), site_url_key, created_at, comment_id)
) WITH CLUSTERING ORDER BY (site_url_key ASC, created_at ASC, comment_id ASC)
"""

# Replies - partition by parent for eager loading and cascading deletes
COMMENTS_BY_PARENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_parent (
    parent_id TEXT,
    created_at TIMESTAMP,
    comment_id TEXT,
    author TEXT,
    content TEXT,
    additional_info TEXT,
    author_type TEXT,
    site_url TEXT,
    site_host TEXT,
    site_url_key TEXT,
    PRIMARY KEY ((parent_id), created_at, comment_id)
) WITH CLUSTERING ORDER BY (created_at ASC, comment_id ASC)
"""

COMMENTS_TABLES_CQL = [
    COMMENTS_BY_ID_TABLE_CQL,
    COMMENTS_BY_SITE_TABLE_CQL,
    COMMENTS_BY_PARENT_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Comment:
    """Comment entity with full details."""

    comment_id: str
    parent_id: str | None
    author: str
    content: str
    additional_info: Any
    author_type: AuthorType
    site_url: str
    site_host: str
    site_url_key: str
    created_at: datetime

    @property
    def reply_id(self) -> str:
        """Truncated identifier shown in listings instead of the real id."""
        return self.comment_id[:REPLY_ID_LENGTH]

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @classmethod
    def from_row(cls, row: Any) -> "Comment":
        """Create Comment from Cassandra row of any comments table."""
        return cls(
            comment_id=row.comment_id,
            parent_id=getattr(row, "parent_id", None),
            author=row.author or DEFAULT_AUTHOR,
            content=row.content or "",
            additional_info=decode_additional_info(row.additional_info),
            author_type=AuthorType(row.author_type or AuthorType.DEFAULT.value),
            site_url=row.site_url,
            site_host=row.site_host,
            site_url_key=row.site_url_key,
            created_at=row.created_at,
        )


def is_complete_row(row: Any) -> bool:
    """False for rows holding only a key and content, left by an UPDATE alone."""
    return getattr(row, "site_url", None) is not None


# ==============================================================================
# Factory Functions
# ==============================================================================


def generate_comment_id(length: int = COMMENT_ID_LENGTH) -> str:
    """Generate a short random alphanumeric comment identifier."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def encode_additional_info(value: Any) -> str | None:
    """Serialize client-defined data for a TEXT column."""
    if value is None:
        return None
    return json.dumps(value, separators=(",", ":"))


def decode_additional_info(value: str | None) -> Any:
    if value is None:
        return None
    return json.loads(value)


def utc_now_ms() -> datetime:
    """Current UTC time truncated to Cassandra's millisecond precision."""
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def create_comment(
    content: str,
    site_url: str,
    author: str = DEFAULT_AUTHOR,
    author_type: AuthorType = AuthorType.DEFAULT,
    parent_id: str | None = None,
    additional_info: Any = None,
) -> Comment:
    """Create a new comment with a fresh id and normalized site URL.

    Args:
        content: Already sanitized content
        site_url: Raw page URL (siteUrl or Origin)
        author: Display name
        author_type: Privilege tier
        parent_id: Parent comment id for replies
        additional_info: Opaque client-defined JSON

    Returns:
        Comment ready to be inserted
    """
    return Comment(
        comment_id=generate_comment_id(),
        parent_id=parent_id,
        author=author,
        content=content,
        additional_info=additional_info,
        author_type=author_type,
        site_url=encode_site_url(site_url),
        site_host=site_host(site_url),
        site_url_key=site_url_key(site_url),
        created_at=utc_now_ms(),
    )
