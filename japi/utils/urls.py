"""Site URL normalization.

Comments are scoped by the page they were posted on. A page is identified by
its URL with trailing slashes removed and percent-encoded the way browsers
encode a URI component, so ``https://a.com/`` and ``https://a.com`` name the
same page.
"""

import re
from urllib.parse import quote, urlsplit


# Characters left unescaped by a URI-component encoder
URI_COMPONENT_SAFE = "-_.!~*'()"

# Upper bound for clustering-range prefix queries (encoded URLs are ASCII)
PREFIX_UPPER_SENTINEL = "\U0010ffff"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_HOST_END_RE = re.compile(r"[/?#]")


def trim_slash_end(value: str) -> str:
    """Remove every trailing slash."""
    return value.rstrip("/")


def encode_site_url(url: str) -> str:
    """Normalize a page URL into its stored siteUrl form."""
    return quote(trim_slash_end(url), safe=URI_COMPONENT_SAFE)


def site_url_key(url: str) -> str:
    """Lookup key for case-insensitive prefix matching on siteUrl."""
    return encode_site_url(url).lower()


def site_host(url: str) -> str:
    """Lowercased host part of a page URL.

    URLs without a scheme are treated as starting with their host, so
    ``example.com/page`` and ``https://example.com/page`` share a host. Port
    and credentials are dropped, so every port of a host shares its partition.
    """
    rest = _SCHEME_RE.sub("", trim_slash_end(url).strip(), count=1)
    host = _HOST_END_RE.split(rest, maxsplit=1)[0]
    return urlsplit("//" + host).hostname or ""


def prefix_range(prefix: str) -> tuple[str, str]:
    """Inclusive lower and exclusive upper bound matching ``prefix%``."""
    return prefix, prefix + PREFIX_UPPER_SENTINEL


def is_valid_url(url: str) -> bool:
    """Check that a string parses as an absolute URL."""
    try:
        parts = urlsplit(url)
        # Accessing port validates it
        _ = parts.port
    except ValueError:
        return False

    if not parts.scheme or not (parts.netloc or parts.path):
        return False
    if parts.scheme in {"http", "https", "ws", "wss", "ftp"}:
        return bool(parts.hostname)
    return True
