# SPDX-License-Identifier: AGPL-3.0-or-later
"""Filter and rank decoded icons.

None of the functions here touch the network, a caller can rank the same
icons for different size preferences without fetching them again.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_FORMATS",
    "reject_broken_icons",
    "discard_unwanted_formats",
    "sort_icons",
    "icon_in_size_range",
]

import typing as t

from besticon.models import Icon
from besticon.size_range import SizeRange

DEFAULT_FORMATS: tuple[str, ...] = ("gif", "ico", "jpg", "png")
"""Formats which are returned when the caller does not ask for other formats
(SVG has to be requested explicitly)."""


def reject_broken_icons(icons: t.Iterable[Icon]) -> list[Icon]:
    """Drop icons with an error and degenerated icons (1x1 tracking pixels,
    zero sized decode artifacts)."""
    return [i for i in icons if i.error is None and i.width > 1 and i.height > 1]


def discard_unwanted_formats(icons: t.Iterable[Icon], formats: t.Iterable[str] | None = None) -> list[Icon]:
    wanted = set(formats or DEFAULT_FORMATS)
    return [i for i in icons if i.format in wanted]


def _sort_key(icon: Icon, size_descending: bool):
    sign = -1 if size_descending else 1
    # bytes (more is better) and URL break ties in both directions
    return (sign * icon.width, sign * icon.height, -icon.byte_size, icon.url)


def sort_icons(icons: t.Iterable[Icon], size_descending: bool = True) -> list[Icon]:
    """Sort by size (width, height), then by bytes (bigger first) and URL.  With
    ``size_descending`` the best icon is the first one."""
    return sorted(icons, key=lambda i: _sort_key(i, size_descending))


def icon_in_size_range(icons: t.Iterable[Icon], r: SizeRange) -> Icon | None:
    """Select the icon that fits best in the size range ``r``:

    1. a SVG icon always wins
    2. the smallest icon in ``perfect..max``
    3. the biggest icon in ``min..perfect``

    Returns ``None`` if no icon fits.
    """
    icons = list(icons)

    for icon in icons:
        if icon.format == "svg":
            return icon

    for icon in sort_icons(icons, size_descending=False):
        if r.perfect <= icon.width <= r.max and r.perfect <= icon.height <= r.max:
            return icon

    for icon in sort_icons(icons, size_descending=True):
        if r.min <= icon.width <= r.perfect and r.min <= icon.height <= r.perfect:
            return icon

    return None
