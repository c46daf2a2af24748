"""Pydantic schemas for the comment API.

Field names are snake_case in Python and camelCase on the wire, matching what
the comment widget sends and expects.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import DEFAULT_AUTHOR, AuthorType, Comment


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(CamelModel):
    """Request to create a new comment."""

    author: str = Field(default=DEFAULT_AUTHOR, max_length=200)
    content: str
    site_url: str | None = Field(
        None, description="Page the comment belongs to; defaults to Origin"
    )
    parent_id: str | None = Field(None, description="Comment being replied to")
    additional_info: Any = Field(
        None, description="Client-defined data, returned untouched"
    )


class EditCommentRequest(CamelModel):
    """Request to edit a comment's content."""

    id: str = Field(..., min_length=1)
    content: str


# ==============================================================================
# Response Schemas
# ==============================================================================


class ReplyResponse(CamelModel):
    """A reply as shown in listings; the real id and parent are withheld."""

    reply_id: str
    author: str
    content: str
    additional_info: Any = None
    type: AuthorType
    created_at: datetime
    site_url: str

    @classmethod
    def from_comment(cls, comment: Comment) -> "ReplyResponse":
        return cls(
            reply_id=comment.reply_id,
            author=comment.author,
            content=comment.content,
            additional_info=comment.additional_info,
            type=comment.author_type,
            created_at=comment.created_at,
            site_url=comment.site_url,
        )


class CommentThreadResponse(CamelModel):
    """A top-level comment with its direct replies."""

    reply_id: str
    author: str
    content: str
    additional_info: Any = None
    type: AuthorType
    created_at: datetime
    parent_id: str | None = None
    site_url: str
    replies: list[ReplyResponse] = Field(default_factory=list)

    @classmethod
    def from_comment(
        cls, comment: Comment, replies: list[Comment] | None = None
    ) -> "CommentThreadResponse":
        """Create response from Comment entity and its loaded replies."""
        return cls(
            reply_id=comment.reply_id,
            author=comment.author,
            content=comment.content,
            additional_info=comment.additional_info,
            type=comment.author_type,
            created_at=comment.created_at,
            parent_id=comment.parent_id,
            site_url=comment.site_url,
            replies=[ReplyResponse.from_comment(reply) for reply in replies or []],
        )
