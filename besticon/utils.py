# SPDX-License-Identifier: AGPL-3.0-or-later
"""Utility functions for besticon."""

from __future__ import annotations

import urllib.parse


def humanize_bytes(size: int | float, precision: int = 2) -> str:
    """Determine the *human readable* value of bytes on 1024 base (1KB=1024B)."""
    s = ['B ', 'KB', 'MB', 'GB', 'TB']

    x = len(s) - 1
    p = 0
    while size > 1024 and p < x:
        p += 1
        size = size / 1024.0
    return "%.*f %s" % (precision, size, s[p])


def humanize_number(size: int | float, precision: int = 0) -> str:
    """Determine the *human readable* value of a decimal number."""
    s = ['', 'K', 'M', 'B', 'T']

    x = len(s) - 1
    p = 0
    while size > 1000 and p < x:
        p += 1
        size = size / 1000.0
    return "%.*f%s" % (precision, size, s[p])


def normalize_site_url(url: str) -> str:
    """Strip white space and add ``http://`` if the URL has no HTTP scheme.

    >>> normalize_site_url("  example.com ")
    'http://example.com'
    """
    url = url.strip()
    if not url.startswith("http:") and not url.startswith("https:"):
        url = "http://" + url
    return url


def host_only_url(url: str, host_only_domains: list[str] | tuple[str, ...]) -> str:
    """Strip everything but scheme and host from ``url`` if its host is one of
    the ``host_only_domains`` (``*`` matches all hosts).  Used for very popular
    domains where throttling is an issue."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return url

    for h in host_only_domains:
        if h in (parts.netloc, "*"):
            return urllib.parse.urlunsplit((parts.scheme, parts.netloc, "", "", ""))
    return url
