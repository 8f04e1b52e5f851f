# SPDX-License-Identifier: AGPL-3.0-or-later
"""Data types of an icon discovery.

:py:obj:`Icon`
  One candidate, either decoded or carrying the error that made it fail.

:py:obj:`FetchResult`
  The outcome of one discovery call, the candidates are partitioned into
  decoded icons and failed candidates.

:py:obj:`ResultEnvelope`
  Serialized form of a discovery result in the cache.
"""

from __future__ import annotations

__all__ = ["Icon", "FetchResult", "ResultEnvelope"]

import typing as t

import msgspec

if t.TYPE_CHECKING:
    from PIL import Image


class Icon(msgspec.Struct, kw_only=True, omit_defaults=True):
    """Icon information of one candidate URL.  If :py:obj:`Icon.error` is set,
    the candidate failed and the sizing / format fields are meaningless."""

    url: str
    """Absolute URL of the icon, unique within one discovery result."""

    width: int = 0
    """Width in pixel (0 means unknown)."""

    height: int = 0
    """Height in pixel (0 means unknown)."""

    format: str = ""
    """Image format: ``png``, ``gif``, ``ico``, ``jpg``, ``svg`` or the name
    reported by the decoder (e.g. ``bmp``)."""

    byte_size: int = msgspec.field(default=0, name="bytes")
    """Length of the raw body."""

    sha1sum: str = ""
    """SHA-1 hex digest of the raw body."""

    error: str | None = None
    image_data: bytes | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def image(self) -> Image.Image:
        """Decode :py:obj:`Icon.image_data` into a Pillow image."""
        from besticon import imaging  # pylint: disable=import-outside-toplevel

        if not self.image_data:
            raise ValueError(f"icon {self.url} has no image data")
        img, _ = imaging.decode(self.image_data)
        return img


class FetchResult(msgspec.Struct, kw_only=True):
    """Raw outcome of a discovery call."""

    candidates: list[str] = msgspec.field(default_factory=list)
    """All candidate URLs which have been fetched (sorted)."""

    icons: list[Icon] = msgspec.field(default_factory=list)
    """Decoded, non broken icons, the best icon first."""

    failed: list[Icon] = msgspec.field(default_factory=list)
    """Candidates which could not be fetched or decoded."""

    @property
    def all_failed(self) -> bool:
        """``True`` if there are candidates but none of them could be used."""
        return bool(self.candidates) and not self.icons


class ResultEnvelope(msgspec.Struct):
    """Value stored in the cache, errors are never cached but the field is
    part of the format."""

    icons: list[Icon] = msgspec.field(default_factory=list)
    error: str = ""
