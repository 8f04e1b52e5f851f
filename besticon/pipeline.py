# SPDX-License-Identifier: AGPL-3.0-or-later
"""Fetch and decode the icon candidates.

Every candidate is fetched in its own task, all tasks are started at once
(unless :py:obj:`NetworkConfig.max_concurrency <besticon.network.NetworkConfig>`
limits them) and the caller waits until all of them have finished.  A
candidate that fails does not affect the others, the failure is recorded in
:py:obj:`Icon.error <besticon.models.Icon.error>`.
"""

from __future__ import annotations

__all__ = ["SVG_SIZE", "is_svg", "fetch_icon_details", "fetch_all_icons"]

import asyncio
import contextlib
import hashlib

import httpx

from besticon import imaging
from besticon import ico  # pylint: disable=unused-import
from besticon import logger
from besticon.exceptions import (
    BesticonException,
    EmptyResponseException,
    HTTPStatusException,
    UnknownImageFormatException,
)
from besticon.models import Icon
from besticon.network import Network

logger = logger.getChild('pipeline')

SVG_SIZE = 9999
"""Width and height of a SVG icon, SVGs always win the size comparisons."""


def is_svg(body: bytes) -> bool:
    """Cheap detection of SVG documents.  The magic bytes are not sufficient
    since the start of a SVG can not be distinguished from HTML."""

    if len(body) < 10:
        return False

    if not (body.startswith(b"<!") or body.startswith(b"<?") or body.startswith(b"<svg")):
        return False

    off = body.find(b"<svg")
    return -1 < off <= 300


def sha1sum(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def decode_icon(url: str, body: bytes, discard_image_bytes: bool = False) -> Icon:
    """Classify ``body`` (loaded from ``url``) into an :py:obj:`Icon`."""

    icon = Icon(url=url)

    if is_svg(body):
        icon.format = "svg"
        icon.width = SVG_SIZE
        icon.height = SVG_SIZE
    else:
        try:
            cfg, fmt = imaging.decode_config(body)
        except UnknownImageFormatException as exc:
            icon.error = f"besticon: unknown image format: {exc}"
            return icon

        if fmt == "jpeg":
            fmt = "jpg"

        icon.width = cfg.width
        icon.height = cfg.height
        icon.format = fmt

    icon.byte_size = len(body)
    icon.sha1sum = sha1sum(body)
    if not discard_image_bytes:
        icon.image_data = body

    return icon


async def fetch_icon_details(
    network: Network, client: httpx.AsyncClient, url: str, discard_image_bytes: bool = False
) -> Icon:
    """Fetch and decode one candidate, errors are returned in the
    :py:obj:`Icon.error` field."""

    try:
        response, body = await network.get(client, url)
        if not 200 <= response.status_code < 300:
            raise HTTPStatusException(url, response.status_code)
        if not body:
            raise EmptyResponseException(url)
    except (httpx.HTTPError, httpx.InvalidURL, BesticonException) as exc:
        return Icon(url=url, error=str(exc) or exc.__class__.__name__)

    return decode_icon(url, body, discard_image_bytes)


async def fetch_all_icons(
    network: Network, client: httpx.AsyncClient, urls: list[str], discard_image_bytes: bool = False
) -> list[Icon]:
    """Fetch all candidates concurrently and wait for all of them.  The order of
    the returned icons is the order of ``urls``."""

    limit = network.cfg.max_concurrency
    semaphore = asyncio.Semaphore(limit) if limit > 0 else None

    async def task(url: str) -> Icon:
        guard = semaphore if semaphore is not None else contextlib.nullcontext()
        async with guard:
            return await fetch_icon_details(network, client, url, discard_image_bytes)

    icons = await asyncio.gather(*(task(u) for u in urls))
    logger.debug("fetched %d candidates, %d failed", len(icons), sum(1 for i in icons if i.error))
    return list(icons)
