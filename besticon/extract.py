# SPDX-License-Identifier: AGPL-3.0-or-later
"""Extract the icon candidates of a web page.

:py:obj:`find_icon_links`
  Candidates of an HTML page: the icons declared by ``<link rel="icon">`` (and
  friends) plus the well-known :py:obj:`ICON_PATHS`.

:py:obj:`default_icon_urls`
  Candidates of a site whose page can not be fetched: only the well-known
  :py:obj:`ICON_PATHS`.
"""

from __future__ import annotations

__all__ = ["ICON_PATHS", "ICON_TYPES", "find_icon_links", "default_icon_urls", "extract_icon_tags"]

import urllib.parse

import lxml.etree
from lxml import html

from besticon import logger
from besticon.exceptions import InvalidURLException, UnparsableDocumentException

logger = logger.getChild('extract')

ICON_PATHS = (
    "/favicon.ico",
    "/apple-touch-icon.png",
    "/apple-touch-icon-precomposed.png",
)
"""Conventional icon locations, they are tried for every site."""

ICON_TYPES = frozenset(["icon", "apple-touch-icon", "apple-touch-icon-precomposed"])
"""Tokens in the ``rel`` attribute of a ``<link>`` that declares an icon
(``shortcut icon`` matches by its ``icon`` token)."""


def doc_from_html(data: bytes) -> html.HtmlElement:
    """Parse the UTF-8 encoded ``data``, markup errors are recovered."""
    parser = html.HTMLParser(encoding="utf-8")
    try:
        doc = html.document_fromstring(data, parser=parser)
    except (lxml.etree.LxmlError, ValueError) as exc:
        raise UnparsableDocumentException() from exc
    if doc is None:
        raise UnparsableDocumentException()
    return doc


def _parse_url(url: str) -> urllib.parse.SplitResult:
    parts = urllib.parse.urlsplit(url)
    # accessing the port validates it
    _ = parts.port
    return parts


def determine_base_url(site_url: str, doc: html.HtmlElement) -> str:
    """Returns the URL the icon links of ``doc`` are relative to: the href of
    ``<head><base>`` if there is one, otherwise the ``site_url``."""
    hrefs = doc.xpath("//head//base/@href")
    if not hrefs or not hrefs[0].strip():
        return site_url
    href = hrefs[0].strip()
    try:
        _parse_url(href)
    except ValueError:
        logger.debug("ignore unparsable base href %r", href)
        return site_url
    return urllib.parse.urljoin(site_url, href)


def extract_icon_tag(link: html.HtmlElement) -> str:
    """Returns the href of ``link`` if it declares an icon, otherwise an empty
    string."""
    rel = (link.get("rel") or "").lower()
    if not ICON_TYPES.intersection(rel.split()):
        return ""
    return (link.get("href") or "").strip()


def extract_icon_tags(doc: html.HtmlElement) -> list[str]:
    """Returns the hrefs (as found in the document) of all icon links."""
    hits = []
    for link in doc.xpath("//link[@href][@rel]"):
        href = extract_icon_tag(link)
        if href:
            hits.append(href)
    return hits


def absolute_url(base_url: str, path: str) -> str:
    """Resolve ``path`` against ``base_url``, a URL without a scheme gets
    ``http``."""
    if not urllib.parse.urlsplit(base_url).scheme:
        base_url = "http://" + base_url.lstrip("/")
    _parse_url(path)
    return urllib.parse.urljoin(base_url, path)


def find_icon_links(site_url: str, data: bytes) -> list[str]:
    """Returns the sorted list of candidate URLs for the HTML page ``data``
    which has been loaded from ``site_url``."""

    doc = doc_from_html(data)
    base_url = determine_base_url(site_url, doc)

    links: set[str] = set()
    for path in ICON_PATHS:
        links.add(absolute_url(base_url, path))

    for href in extract_icon_tags(doc):
        try:
            links.add(absolute_url(base_url, href))
        except ValueError:
            logger.debug("ignore unparsable icon href %r", href)

    return sorted(links)


def default_icon_urls(site_url: str) -> list[str]:
    """Candidates when the page of ``site_url`` can not be fetched."""
    try:
        parts = _parse_url(site_url)
    except ValueError as exc:
        raise InvalidURLException(site_url, str(exc)) from exc
    if not parts.netloc:
        raise InvalidURLException(site_url, "missing host")

    return sorted({absolute_url(site_url, path) for path in ICON_PATHS})
