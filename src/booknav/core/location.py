"""Page identity and link resolution.

Mirrors how a browser resolves sidebar anchors: raw hrefs from the TOC are
prefixed with the page's path-to-root and then resolved against the current
page URL before comparison.
"""

import re
from urllib.parse import urldefrag, urljoin

from booknav.core.types import Href, PageURL

DEFAULT_DOCUMENT = "index.html"

# Scheme-qualified or protocol-relative URLs ("https://...", "//cdn/...")
_ABSOLUTE_URL_RE = re.compile(r"^(?:[a-z+]+:)?//")


def normalize_page_url(url: str, default_document: str = DEFAULT_DOCUMENT) -> PageURL:
    """Normalize a browser address into the page comparison key.

    Strips the fragment and query string. Directory URLs (ending in "/")
    get the default document name appended.

    Args:
        url: Current browser address
        default_document: Document served for directory URLs

    Returns:
        Normalized page URL
    """
    page = url.split("#", 1)[0].split("?", 1)[0]
    if page.endswith("/"):
        page += default_document
    return PageURL(page)


def is_relative_href(href: str) -> bool:
    """Whether an href is a same-site relative path eligible for prefixing."""
    return not href.startswith("#") and _ABSOLUTE_URL_RE.match(href) is None


def rewrite_href(href: str, root_prefix: str) -> Href:
    """Prefix a relative href with the page's path-to-root.

    Fragment-only and absolute hrefs are returned unchanged.

    Args:
        href: Raw href as authored in the TOC
        root_prefix: Relative path from the current page to the book root
                     (e.g., "../../"), empty at root depth

    Returns:
        Href to place on the rendered anchor
    """
    if href and is_relative_href(href):
        return Href(root_prefix + href)
    return Href(href)


def resolve_href(href: str, page_url: str) -> PageURL:
    """Resolve an anchor href against the page it appears on.

    The fragment of the result comes from the href only, so an empty href
    resolves to the page without its fragment.
    """
    if not href:
        return PageURL(urldefrag(page_url).url)
    return PageURL(urljoin(page_url, href))
