"""Allowlist sanitiser for the inline markup the editor produces (bold, italic, links, ...)"""

import re
from html import unescape

import bleach


ALLOWED_TAGS = {"b", "strong", "i", "em", "u", "s", "mark", "code", "br", "a"}
ALLOWED_ATTRS = {
    "a":    {"href", "target", "rel"},
    "code": {"class"},
    "mark": {"class"},
}
SAFE_SCHEMES = {"http", "https", "mailto"}

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")


def safe_url(value: str) -> bool:
    """Allow relative URLs and the http/https/mailto schemes only (same rule as link hrefs)."""
    # browsers ignore control characters and whitespace inside the scheme
    compact = re.sub(r"[\x00-\x20]", "", unescape(value))
    m = _SCHEME_RE.match(compact)
    return m is None or m.group(1).lower() in SAFE_SCHEMES


def sanitize_inline(markup: str) -> str:
    """Keep the editor's inline subset; other tags are unwrapped and their text escaped."""
    if not markup:
        return ""
    return bleach.clean(markup, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRS, protocols=SAFE_SCHEMES, strip=True)


def strip_tags(markup: str) -> str:
    """Plain-text view of inline markup (captions, excerpts); escaped again on output."""
    if not markup:
        return ""
    return unescape(bleach.clean(markup, tags=set(), strip=True))
