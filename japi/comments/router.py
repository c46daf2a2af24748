"""Comment API endpoints.

Provides routes for:
- Creating comments and replies
- Listing a page's comment threads
- Editing and deleting comments
"""

from fastapi import APIRouter, Header, Query

from .dependencies import CommentServiceDep, handle_comment_error
from .schemas import CommentThreadResponse, CreateCommentRequest, EditCommentRequest
from .service import CommentError


router = APIRouter(prefix="/comments", tags=["comments"])

PARSE_MARKDOWN_DESCRIPTION = (
    "Render the content as Markdown before sanitizing. HTML in the content is "
    "sanitized either way."
)


@router.get(
    "",
    response_model=list[CommentThreadResponse],
    summary="Get all comments",
)
async def list_comments(
    comment_service: CommentServiceDep,
    url: str | None = Query(None, description="Page URL (prefix match)"),
    api_key: str | None = Query(None, alias="apiKey"),
) -> list[CommentThreadResponse]:
    """Get top-level comments for a page with their direct replies.

    Comment ids are replaced by a short replyId.
    """
    try:
        return await comment_service.list_comments(url=url, api_key=api_key)
    except CommentError as e:
        raise handle_comment_error(e) from e


@router.post(
    "",
    response_model=str,
    summary="Create a comment",
)
async def create_comment(
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    parse_markdown: bool = Query(
        False, alias="parseMarkdown", description=PARSE_MARKDOWN_DESCRIPTION
    ),
    api_key: str | None = Query(None, alias="apiKey"),
    origin: str | None = Header(None),
) -> str:
    """Create a comment and return its id.

    The page is taken from siteUrl, or from the Origin header when siteUrl is
    empty. All content is sanitized.
    """
    try:
        comment = await comment_service.create_comment(
            content=data.content,
            author=data.author,
            site_url=data.site_url,
            origin=origin,
            parent_id=data.parent_id,
            additional_info=data.additional_info,
            api_key=api_key,
            parse_markdown=parse_markdown,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e

    return comment.comment_id


@router.patch(
    "",
    response_model=str,
    summary="Edit a comment",
)
async def edit_comment(
    data: EditCommentRequest,
    comment_service: CommentServiceDep,
    parse_markdown: bool = Query(
        False, alias="parseMarkdown", description=PARSE_MARKDOWN_DESCRIPTION
    ),
) -> str:
    """Replace a comment's content. Returns the comment id."""
    try:
        return await comment_service.edit_comment(
            comment_id=data.id,
            content=data.content,
            parse_markdown=parse_markdown,
        )
    except CommentError as e:
        raise handle_comment_error(e) from e


@router.delete(
    "",
    response_model=str,
    summary="Delete a comment",
)
async def delete_comment(
    comment_service: CommentServiceDep,
    id: str = Query(..., min_length=1, description="Comment id"),  # noqa: A002
) -> str:
    """Delete a comment together with all of its replies."""
    try:
        return await comment_service.delete_comment(id)
    except CommentError as e:
        raise handle_comment_error(e) from e
