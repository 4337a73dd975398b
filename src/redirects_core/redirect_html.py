"""Canonical redirect documents.

Digests are computed over the rendered document, never over the raw URL, so
the template below is part of the persisted store format. Changing a single
byte of it invalidates every stored digest.
"""

from __future__ import annotations

import re

REDIRECT_HTML_TEMPLATE = '<html><body>You are being <a href="{url}">redirected</a>.</body></html>'
REDIRECT_HTML_RE = re.compile(
    r'^<html><body>You are being <a href="([^"]+)">redirected</a>\.</body></html>$'
)


def make_redirect_html(url: str) -> str:
    """Render the redirect document for ``url`` without any escaping.

    Callers must not pass URLs containing a double quote; the document would
    no longer parse back to the same URL.
    """

    return REDIRECT_HTML_TEMPLATE.format(url=url)


def render_redirect(url: str) -> bytes:
    """Return the canonical bytes a record digest is computed over."""

    return make_redirect_html(url).encode("utf-8")


def parse_redirect_html(document: str) -> str | None:
    """Extract the target URL from a redirect document, or None on mismatch."""

    match = REDIRECT_HTML_RE.fullmatch(document)
    if match is None:
        return None
    return match.group(1)
