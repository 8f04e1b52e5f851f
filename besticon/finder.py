# SPDX-License-Identifier: AGPL-3.0-or-later
"""Find the icons of a web site.

:py:obj:`Besticon` is build once (usually from a
:py:obj:`BesticonConfig <besticon.config.BesticonConfig>`) and holds the
network configuration and the cache.  For each request a new
:py:obj:`IconFinder` is created:

.. code:: python

   from besticon.config import load_config
   from besticon.finder import Besticon

   b = Besticon.from_config(load_config())
   finder = b.new_icon_finder()
   icons = finder.fetch_icons("github.com")
   best = finder.icon_in_size_range(b.parse_size_range("32..64..128"))

A discovery fetches the page, extracts the icon links (or falls back to the
well-known icon paths if the page can not be fetched), fetches and decodes
all candidates concurrently and drops the broken ones.  The icons are sorted,
the best icon first.
"""

from __future__ import annotations

__all__ = ["Besticon", "IconFinder", "main_color_for_icons"]

import asyncio
import sqlite3
import typing as t

import httpx
import msgspec

from besticon import logger
from besticon import cache as cache_
from besticon import charset
from besticon import extract
from besticon import pipeline
from besticon import selector
from besticon.colorfinder import ColorFinder, RGB
from besticon.exceptions import (
    BesticonException,
    EmptyResponseException,
    HTTPStatusException,
    NoIconsFoundException,
    UnknownImageFormatException,
)
from besticon.models import FetchResult, Icon
from besticon.network import Network
from besticon.size_range import MAX_ICON_SIZE, SizeRange, parse_size_range
from besticon.utils import host_only_url, normalize_site_url

if t.TYPE_CHECKING:
    from besticon.config import BesticonConfig

logger = logger.getChild('finder')


class Besticon:
    """Entry point of the icon discovery.  The object holds no per request
    state and can be shared between threads."""

    def __init__(
        self,
        network: Network | None = None,
        cache: cache_.IconCache | None = None,
        default_formats: t.Iterable[str] | None = None,
        discard_image_bytes: bool = False,
        host_only_domains: t.Iterable[str] | None = None,
        max_icon_size: int = MAX_ICON_SIZE,
    ):
        self.network = network or Network()
        self.cache = cache
        self.default_formats: list[str] = list(default_formats or selector.DEFAULT_FORMATS)
        self.discard_image_bytes = discard_image_bytes
        self.host_only_domains: list[str] = list(host_only_domains or [])
        self.max_icon_size = max_icon_size

    @classmethod
    def from_config(cls, cfg: BesticonConfig, transport: httpx.AsyncBaseTransport | None = None) -> Besticon:
        return cls(
            network=Network(cfg.network, transport=transport),
            cache=cache_.new_cache(cfg.cache),
            default_formats=cfg.finder.default_formats,
            discard_image_bytes=cfg.finder.discard_image_bytes,
            host_only_domains=cfg.finder.host_only_domains,
            max_icon_size=cfg.finder.max_icon_size,
        )

    def new_icon_finder(
        self,
        formats_allowed: t.Iterable[str] | None = None,
        host_only_domains: t.Iterable[str] | None = None,
    ) -> IconFinder:
        if host_only_domains is None:
            host_only_domains = self.host_only_domains
        return IconFinder(self, formats_allowed=formats_allowed, host_only_domains=host_only_domains)

    @property
    def cache_enabled(self) -> bool:
        return self.cache is not None and not isinstance(self.cache, cache_.IconCacheNull)

    async def fetch_html(self, client: httpx.AsyncClient, url: str) -> tuple[bytes, str]:
        """Fetch the page ``url``, returns the UTF-8 encoded HTML and the URL
        after redirects."""

        response, body = await self.network.get(client, url)
        if not 200 <= response.status_code < 300:
            raise HTTPStatusException(url, response.status_code)
        if not body:
            raise EmptyResponseException(url)

        return charset.to_utf8(body, response.charset_encoding), str(response.url)

    async def afetch_all(self, site_url: str) -> FetchResult:
        """Discover the icons of ``site_url`` (no cache).  Raises
        :py:obj:`InvalidURLException <besticon.exceptions.InvalidURLException>`
        and :py:obj:`UnparsableDocumentException
        <besticon.exceptions.UnparsableDocumentException>`."""

        async with self.network.new_client() as client:
            try:
                html, url_after_redirect = await self.fetch_html(client, site_url)
            except (httpx.HTTPError, httpx.InvalidURL, BesticonException) as exc:
                # Unable to fetch the page or got a bad HTTP status code, try
                # the default icon paths.
                logger.debug("fetch %s failed (%s), use default icon paths", site_url, exc)
                links = extract.default_icon_urls(site_url)
            else:
                links = extract.find_icon_links(url_after_redirect, html)

            results = await pipeline.fetch_all_icons(self.network, client, links, self.discard_image_bytes)

        return FetchResult(
            candidates=links,
            icons=selector.sort_icons(selector.reject_broken_icons(results)),
            failed=[i for i in results if i.error is not None],
        )

    async def afetch_icons(self, site_url: str) -> list[Icon]:
        """Same as :py:obj:`Besticon.fetch_icons` for callers in an event
        loop."""
        if not self.cache_enabled:
            return (await self.afetch_all(site_url)).icons

        key = cache_.cache_key(site_url)
        try:
            data = await asyncio.to_thread(self.cache.get, key)  # type: ignore
            if data is not None:
                return self._result_from_cache(data)
        except (sqlite3.Error, msgspec.DecodeError) as exc:
            logger.error("failed to get icons of %s from cache: %s", site_url, exc)

        icons = (await self.afetch_all(site_url)).icons
        # errors are not cached, they raise before this point
        try:
            await asyncio.to_thread(self.cache.set, key, cache_.encode_result(icons))  # type: ignore
        except sqlite3.Error as exc:
            logger.error("failed to store icons of %s in cache: %s", site_url, exc)
        return icons

    def fetch_icons(self, site_url: str) -> list[Icon]:
        """Discover the icons of ``site_url``, if a cache is configured the
        result of the day is taken from the cache."""
        return asyncio.run(self.afetch_icons(site_url))

    def _result_from_cache(self, data: bytes) -> list[Icon]:
        res = cache_.decode_result(data)
        if res.error:
            raise BesticonException(res.error)
        return res.icons

    def parse_size_range(self, s: str) -> SizeRange:
        """Parse ``s`` with the configured upper limit of the icon sizes."""
        return parse_size_range(s, self.max_icon_size)

    def discard_unwanted_formats(self, icons: list[Icon], wanted_formats: t.Iterable[str] | None = None) -> list[Icon]:
        formats = list(wanted_formats or []) or self.default_formats
        return selector.discard_unwanted_formats(icons, formats)


class IconFinder:
    """Finder for one discovery request, holds the allowed formats, the
    host-only domains and the icons of the last :py:obj:`IconFinder.fetch_icons`
    call."""

    def __init__(
        self,
        besticon: Besticon,
        formats_allowed: t.Iterable[str] | None = None,
        host_only_domains: t.Iterable[str] | None = None,
    ):
        self.besticon = besticon
        self.formats_allowed: list[str] = list(formats_allowed or [])
        self.host_only_domains: list[str] = list(host_only_domains or [])
        self._icons: list[Icon] = []

    def prepare_url(self, url: str) -> str:
        return host_only_url(normalize_site_url(url), self.host_only_domains)

    def fetch_icons(self, url: str) -> list[Icon]:
        """Fetch the icons of the site ``url`` and return those in the allowed
        formats, the best icon first."""
        self._icons = self.besticon.fetch_icons(self.prepare_url(url))
        return self.icons()

    async def afetch_icons(self, url: str) -> list[Icon]:
        self._icons = await self.besticon.afetch_icons(self.prepare_url(url))
        return self.icons()

    def icons(self) -> list[Icon]:
        return self.besticon.discard_unwanted_formats(self._icons, self.formats_allowed)

    def icon_in_size_range(self, r: SizeRange) -> Icon | None:
        return selector.icon_in_size_range(self.icons(), r)

    def icon_in_size_range_str(self, s: str) -> Icon | None:
        """Same as :py:obj:`IconFinder.icon_in_size_range` for a size range in
        string notation (e.g. ``32..64..128``).  Raises
        :py:obj:`BadSizeException <besticon.exceptions.BadSizeException>`."""
        return self.icon_in_size_range(self.besticon.parse_size_range(s))

    def fetch_best_icon(self, url: str) -> Icon:
        """Fetch the icons of ``url`` and return the best one, raises
        :py:obj:`NoIconsFoundException` if there is none."""
        icons = self.fetch_icons(url)
        if not icons:
            raise NoIconsFoundException(url)
        return icons[0]

    def main_color_for_icons(self) -> RGB | None:
        return main_color_for_icons(self.icons())


def main_color_for_icons(icons: list[Icon], color_finder: ColorFinder | None = None) -> RGB | None:
    """Dominant color of the first GIF, JPEG or PNG icon, or else of the first
    ICO icon.  Returns ``None`` if there is no such icon or it has no image
    data."""

    icon = next((i for i in icons if i.format in ("gif", "jpg", "png")), None)
    if icon is None:
        icon = next((i for i in icons if i.format == "ico"), None)
    if icon is None or not icon.image_data:
        return None

    try:
        img = icon.image()
    except UnknownImageFormatException as exc:
        logger.debug("can't decode %s: %s", icon.url, exc)
        return None

    try:
        return (color_finder or ColorFinder()).find_main_color(img)
    except ValueError as exc:
        logger.debug("can't find main color of %s: %s", icon.url, exc)
        return None
