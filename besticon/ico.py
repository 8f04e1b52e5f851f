# SPDX-License-Identifier: AGPL-3.0-or-later
"""Codec for the Windows icon container (``.ico``).

An icon file holds one or more images and a directory that describes their
sizes::

  ICONDIR       reserved:u16  type:u16  count:u16            (6 bytes)
  ICONDIRENTRY  width:u8  height:u8  palette_count:u8  reserved:u8
                color_planes:u16  bits_per_pixel:u16
                size:u32  offset:u32                          (16 bytes each)

All integers are little-endian.  A width / height of ``0`` means 256 pixel, a
palette count of ``0`` means 256 colors.

:py:obj:`decode_config` only reads the directory, the pixel data is not
touched.  The module registers the format in :py:obj:`besticon.imaging` under
the magic bytes ``00 00 01 00``.
"""

from __future__ import annotations

__all__ = ["ICO_HEADER", "IconDir", "IconDirEntry", "parse_ico", "decode_config", "decode_image"]

import dataclasses
import io
import struct
import typing as t

from PIL import Image

from besticon import imaging
from besticon.exceptions import MalformedIconException

ICO_HEADER = b"\x00\x00\x01\x00"

ICONDIR = struct.Struct("<HHH")
ICONDIRENTRY = struct.Struct("<BBBBHHII")
BITMAPFILEHEADER = struct.Struct("<2sIHHI")
BITMAPINFOHEADER = struct.Struct("<IiiHHIIiiII")

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@dataclasses.dataclass
class IconDirEntry:
    """One entry of the icon directory, the values are stored as read from the
    file (use :py:obj:`IconDirEntry.real_width` for the width in pixel)."""

    width: int
    height: int
    palette_count: int = 0
    reserved: int = 0
    color_planes: int = 1
    bits_per_pixel: int = 32
    size: int = 0
    offset: int = 0

    @property
    def real_width(self) -> int:
        return 256 if self.width == 0 else self.width

    @property
    def real_height(self) -> int:
        return 256 if self.height == 0 else self.height

    @property
    def color_count(self) -> int:
        return 256 if self.palette_count == 0 else self.palette_count

    def pack(self) -> bytes:
        return ICONDIRENTRY.pack(*dataclasses.astuple(self))


@dataclasses.dataclass
class IconDir:
    """The icon directory (header and entries) of an icon file."""

    reserved: int = 0
    type: int = 1
    count: int = 0
    entries: list[IconDirEntry] = dataclasses.field(default_factory=list)

    def find_best_icon(self) -> IconDirEntry | None:
        """Returns the entry of the biggest image.

        An entry only replaces the current best if it is bigger in *both*
        dimensions, on ties the earliest entry is kept.  A 48x32 entry does not
        replace a 32x48 entry (and vice versa)."""
        if not self.entries:
            return None

        best = self.entries[0]
        for e in self.entries:
            if e.real_width > best.real_width and e.real_height > best.real_height:
                best = e
        return best

    def pack(self) -> bytes:
        data = ICONDIR.pack(self.reserved, self.type, self.count)
        return data + b"".join(e.pack() for e in self.entries)


def _read(stream: t.BinaryIO, st: struct.Struct) -> tuple[int, ...]:
    buf = stream.read(st.size)
    if len(buf) < st.size:
        raise MalformedIconException("ico: unexpected EOF")
    return st.unpack(buf)


def parse_ico(stream: t.BinaryIO) -> IconDir:
    """Reads the icon directory from ``stream``.  Raises
    :py:obj:`MalformedIconException` if the stream ends before the header and
    all entries have been read."""

    reserved, type_, count = _read(stream, ICONDIR)
    icon_dir = IconDir(reserved=reserved, type=type_, count=count)
    for _ in range(count):
        icon_dir.entries.append(IconDirEntry(*_read(stream, ICONDIRENTRY)))
    return icon_dir


def _best_icon(data: bytes) -> tuple[IconDirEntry, io.BytesIO]:
    stream = io.BytesIO(data)
    best = parse_ico(stream).find_best_icon()
    if best is None:
        raise MalformedIconException("ico file does not contain any icons")
    return best, stream


def decode_config(data: bytes) -> imaging.ImageConfig:
    """Returns the dimensions of the biggest image in the icon without decoding
    the pixel data."""
    best, _ = _best_icon(data)
    return imaging.ImageConfig(best.real_width, best.real_height)


def _dib_to_bmp(dib: bytes) -> bytes:
    # A DIB in an icon has the height of the XOR bitmap plus the AND mask,
    # the AND mask is dropped by halving the height.
    if len(dib) < BITMAPINFOHEADER.size:
        raise MalformedIconException("ico: unexpected EOF in bitmap header")

    header = list(BITMAPINFOHEADER.unpack_from(dib))
    header_size, _, height, _, bpp, _, _, _, _, colors_used, _ = header
    if header_size < BITMAPINFOHEADER.size:
        raise MalformedIconException(f"ico: unsupported bitmap header size {header_size}")

    header[2] = height // 2
    dib = BITMAPINFOHEADER.pack(*header) + dib[BITMAPINFOHEADER.size :]

    palette_size = 0
    if bpp <= 8:
        palette_size = (colors_used or (1 << bpp)) * 4

    pixel_offset = BITMAPFILEHEADER.size + header_size + palette_size
    file_header = BITMAPFILEHEADER.pack(b"BM", BITMAPFILEHEADER.size + len(dib), 0, 0, pixel_offset)
    return file_header + dib


def decode_image(data: bytes) -> Image.Image:
    """Decodes the biggest image of the icon.  The image is either a PNG or a
    raw DIB for which a bitmap file header is synthesized."""

    best, _ = _best_icon(data)
    payload = data[best.offset : best.offset + best.size]
    if len(payload) < best.size:
        raise MalformedIconException("ico: unexpected EOF in image data")

    if payload.startswith(PNG_MAGIC):
        return imaging.pillow_decode(payload)
    return imaging.pillow_decode(_dib_to_bmp(payload))


imaging.register_format("ico", ICO_HEADER, decode_config, decode_image)
