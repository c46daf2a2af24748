"""Comment service layer.

Business logic for:
- Resolving the page a comment belongs to (siteUrl or Origin)
- Author type elevation through API keys
- Content pipeline (Markdown + sanitization)
- Threaded listing and cascading deletes
"""

from typing import TYPE_CHECKING, Any

import structlog

from japi.utils.urls import is_valid_url, site_host, site_url_key

from .models import DEFAULT_AUTHOR, Comment, create_comment
from .sanitizer import ContentPipeline
from .schemas import CommentThreadResponse
from .store import CommentStore


if TYPE_CHECKING:
    from japi.api_keys.service import ApiKeyService


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CommentError(Exception):
    """Base comment error."""

    def __init__(self, message: str, code: str = "comment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CommentNotFoundError(CommentError):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message, "comment_not_found")


class ParentNotFoundError(CommentError):
    """Reply points at a comment that does not exist."""

    def __init__(self, message: str = "Parent comment not found"):
        super().__init__(message, "parent_not_found")


class CommentValidationError(CommentError):
    """Request is missing or has an invalid field."""

    def __init__(self, message: str):
        super().__init__(message, "validation_error")


# ==============================================================================
# Comment Service
# ==============================================================================


class CommentService:
    """Service for comment management."""

    def __init__(
        self,
        store: CommentStore,
        api_keys: "ApiKeyService",
        pipeline: ContentPipeline | None = None,
        max_content_length: int = 10000,
    ):
        self.store = store
        self.api_keys = api_keys
        self.pipeline = pipeline or ContentPipeline()
        self.max_content_length = max_content_length

    def _prepare_content(self, content: str, parse_markdown: bool) -> str:
        if len(content) > self.max_content_length:
            raise CommentValidationError(
                f"content must be at most {self.max_content_length} characters"
            )
        return self.pipeline.process(content, parse_markdown=parse_markdown)

    # ==========================================================================
    # Comment CRUD
    # ==========================================================================

    async def create_comment(
        self,
        content: str,
        author: str | None = DEFAULT_AUTHOR,
        site_url: str | None = None,
        origin: str | None = None,
        parent_id: str | None = None,
        additional_info: Any = None,
        api_key: str | None = None,
        parse_markdown: bool = False,
    ) -> Comment:
        """Create a new comment.

        Performs:
        - Site URL resolution (siteUrl, then Origin)
        - Author type elevation when a valid API key is given
        - Parent existence check for replies
        - Markdown rendering and sanitization

        Raises:
            CommentValidationError: If no site URL can be resolved
            ParentNotFoundError: If parent_id names no comment
        """
        if site_url:
            url = site_url
        elif origin:
            url = origin
        else:
            raise CommentValidationError("siteUrl must have a value")

        author_type = await self.api_keys.resolve_author_type(api_key)

        if parent_id and await self.store.get_comment(parent_id) is None:
            raise ParentNotFoundError

        comment = create_comment(
            content=self._prepare_content(content, parse_markdown),
            site_url=url,
            author=author or DEFAULT_AUTHOR,
            author_type=author_type,
            parent_id=parent_id or None,
            additional_info=additional_info,
        )
        await self.store.insert_comment(comment)

        logger.info(
            "comment_created",
            comment_id=comment.comment_id,
            parent_id=comment.parent_id,
            site_host=comment.site_host,
            author_type=comment.author_type.value,
        )
        return comment

    async def list_comments(
        self, url: str | None, api_key: str | None = None
    ) -> list[CommentThreadResponse]:
        """Top-level comments whose page URL starts with ``url``, with replies.

        Ids are always truncated to reply ids. A valid API key is resolved (and
        logged) but does not change what is returned.

        Raises:
            CommentValidationError: If url is missing or not a valid URL
        """
        if not url:
            raise CommentValidationError("url must be defined")
        if not is_valid_url(url):
            raise CommentValidationError("url must be a valid URL")

        privileged = await self.api_keys.find_key(api_key) is not None

        top_level = await self.store.list_top_level(site_host(url), site_url_key(url))

        threads = []
        for comment in top_level:
            replies = await self.store.list_replies(comment.comment_id)
            threads.append(CommentThreadResponse.from_comment(comment, replies))

        logger.debug(
            "comments_listed",
            site_host=site_host(url),
            count=len(threads),
            privileged=privileged,
        )
        return threads

    async def get_comment(self, comment_id: str) -> Comment:
        """Get a comment by id or raise CommentNotFoundError."""
        comment = await self.store.get_comment(comment_id)
        if comment is None:
            raise CommentNotFoundError
        return comment

    async def edit_comment(
        self, comment_id: str, content: str, parse_markdown: bool = False
    ) -> str:
        """Replace a comment's content; every other field is immutable."""
        comment = await self.get_comment(comment_id)

        new_content = self._prepare_content(content, parse_markdown)
        if not await self.store.update_content(comment, new_content):
            # Deleted between the read and the write
            raise CommentNotFoundError

        logger.info("comment_edited", comment_id=comment_id)
        return comment_id

    async def delete_comment(self, comment_id: str) -> str:
        """Delete a comment and, recursively, all of its replies."""
        comment = await self.get_comment(comment_id)

        deleted = await self._delete_thread(comment)

        logger.info("comment_deleted", comment_id=comment_id, deleted_count=deleted)
        return comment_id

    async def _delete_thread(self, comment: Comment) -> int:
        """Delete replies depth-first, then the comment itself.

        Returns:
            Number of comments deleted
        """
        deleted = 0
        for reply in await self.store.list_replies(comment.comment_id):
            deleted += await self._delete_thread(reply)

        await self.store.delete_comment(comment)
        return deleted + 1
