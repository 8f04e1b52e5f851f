# SPDX-License-Identifier: AGPL-3.0-or-later
"""Size ranges describe the icon dimensions a caller would like to get.

A size range is a triple ``(min, perfect, max)``, the string notation is
``min..perfect..max`` (e.g. ``60..100..200``) or a single number ``n`` which
is read as ``n..n..max_icon_size``.
"""

from __future__ import annotations

__all__ = ["MAX_ICON_SIZE", "SizeRange", "parse_size_range"]

import re

import msgspec

from besticon.exceptions import BadSizeException

MAX_ICON_SIZE: int = 500
"""Upper bound of all sizes in a size range."""

_SIZE_RE = re.compile(r'[+-]?[0-9]+')


class SizeRange(msgspec.Struct, frozen=True):  # pylint: disable=too-few-public-methods
    """The desired icon dimensions.  The order ``0 <= min <= perfect <= max <=
    MAX_ICON_SIZE`` is checked when the object is created, consumers don't need
    to check it again."""

    min: int
    perfect: int
    max: int

    def __post_init__(self):
        if not 0 <= self.min <= self.perfect <= self.max <= MAX_ICON_SIZE:
            raise BadSizeException(f"{self.min}..{self.perfect}..{self.max}")

    def __str__(self):
        return f"{self.min}..{self.perfect}..{self.max}"

    @classmethod
    def from_size(cls, size: int, max_icon_size: int = MAX_ICON_SIZE) -> SizeRange:
        """Size range for a single ``size``: ``size..size..max_icon_size``"""
        if not 0 <= size <= max_icon_size:
            raise BadSizeException(str(size))
        return cls(size, size, max_icon_size)


def _parse_size(s: str, max_icon_size: int) -> int | None:
    if not _SIZE_RE.fullmatch(s):
        return None
    size = int(s)
    if size < 0 or size > max_icon_size:
        return None
    return size


def parse_size_range(s: str, max_icon_size: int = MAX_ICON_SIZE) -> SizeRange:
    """Parses a string like ``60..100..200`` (or a single size like ``120``)
    into a :py:obj:`SizeRange`.  Raises :py:obj:`BadSizeException` if the
    string is malformed, a size is out of ``[0, max_icon_size]`` or the order
    is violated.

    ``max_icon_size`` can lower the limit of the sizes, but not raise it above
    :py:obj:`MAX_ICON_SIZE`.
    """
    if not 0 <= max_icon_size <= MAX_ICON_SIZE:
        raise BadSizeException(f"{s} (max_icon_size {max_icon_size})")

    parts = s.split("..", 2)

    if len(parts) == 1:
        size = _parse_size(parts[0], max_icon_size)
        if size is None:
            raise BadSizeException(s)
        return SizeRange(size, size, max_icon_size)

    if len(parts) == 3:
        sizes = [_parse_size(p, max_icon_size) for p in parts]
        if None in sizes:
            raise BadSizeException(s)
        n1, n2, n3 = sizes
        if not n1 <= n2 <= n3:  # type: ignore
            raise BadSizeException(s)
        return SizeRange(n1, n2, n3)  # type: ignore

    raise BadSizeException(s)
