"""Threaded comment module.

Provides page-scoped comments with:
- Replies (parent/child)
- Author type elevation through API keys
- Markdown rendering and HTML sanitization

Note: Router is not exported here to avoid circular imports.
Import directly from japi.comments.router when needed.
"""

from .models import COMMENTS_TABLES_CQL, AuthorType, Comment, create_comment
from .service import CommentService
from .store import CassandraCommentStore, CommentStore


__all__ = [
    "COMMENTS_TABLES_CQL",
    "AuthorType",
    "CassandraCommentStore",
    "Comment",
    "CommentService",
    "CommentStore",
    "create_comment",
]
