"""Canonical form for Cumulocity tenant URLs.

Tenant URLs are used as lookup keys for stored credentials and as the base
address of remote clients, so every entry point normalizes them the same way.
"""

from __future__ import annotations

import string

SCHEME_SEPARATOR = "://"

_TRAILING_NOISE = string.whitespace + "/"


def normalize_tenant_url(url: str) -> str:
    """Reduce a tenant URL to ``scheme://host[:port]``.

    Surrounding whitespace and everything from the first ``/`` after the
    scheme separator onwards (path, query, fragment, trailing slash) is
    dropped. Without a scheme separator the search for the path starts at
    the third character and trailing slashes are removed.

    No validation happens here: malformed input is canonicalized on a
    best-effort basis and never rejected. The result is a fixed point, so
    normalizing it again returns it unchanged.

    Args:
        url: Raw tenant URL as typed by a user or taken from a request.

    Returns:
        The canonical tenant URL.
    """
    cleaned = url.strip()
    separator = cleaned.find(SCHEME_SEPARATOR)

    if separator == -1:
        path_start = cleaned.find("/", 2)
        if path_start != -1:
            cleaned = cleaned[:path_start]
        return cleaned.rstrip(_TRAILING_NOISE)

    # The separator itself is never cut, so "https://" stays as it is
    path_start = cleaned.find("/", separator + len(SCHEME_SEPARATOR))
    if path_start != -1:
        cleaned = cleaned[:path_start]
    return cleaned.rstrip()
