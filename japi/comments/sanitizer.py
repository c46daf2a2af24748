"""Comment content pipeline.

Content is optionally rendered from Markdown to HTML, then always passed
through an allow-list HTML sanitizer before it is stored. Script and style
elements are dropped together with their text; presentation and widget
attributes are stripped so stored comments cannot restyle the host page or
spoof the widget's reply links.
"""

from collections.abc import Iterable

import markdown
import nh3


FORBIDDEN_TAGS = frozenset({"style"})

# Elements removed together with their content
CONTENT_STRIPPED_TAGS = frozenset({"script", "style"})

FORBIDDEN_ATTRIBUTES = frozenset(
    {"style", "class", "aria-hidden", "data-japicmt-replyid"}
)

ALLOWED_TAGS = frozenset(nh3.ALLOWED_TAGS) - FORBIDDEN_TAGS - CONTENT_STRIPPED_TAGS

ALLOWED_ATTRIBUTES = {
    tag: set(attributes) - FORBIDDEN_ATTRIBUTES
    for tag, attributes in nh3.ALLOWED_ATTRIBUTES.items()
}


def render_markdown(content: str, extensions: Iterable[str] = ()) -> str:
    """Convert Markdown to HTML."""
    return markdown.markdown(content, extensions=list(extensions))


def sanitize_html(content: str) -> str:
    """Strip every tag and attribute outside the allow-list."""
    return nh3.clean(
        content,
        tags=set(ALLOWED_TAGS),
        clean_content_tags=set(CONTENT_STRIPPED_TAGS),
        attributes=ALLOWED_ATTRIBUTES,
    )


class ContentPipeline:
    """Markdown rendering followed by sanitization."""

    def __init__(self, markdown_extensions: Iterable[str] = ()) -> None:
        self.markdown_extensions = tuple(markdown_extensions)

    def process(self, content: str, parse_markdown: bool = False) -> str:
        """Turn submitted content into the form that is persisted.

        Args:
            content: Raw content from the request
            parse_markdown: Render Markdown before sanitizing

        Returns:
            Sanitized HTML
        """
        if parse_markdown:
            content = render_markdown(content, self.markdown_extensions)
        return sanitize_html(content)
