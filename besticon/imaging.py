# SPDX-License-Identifier: AGPL-3.0-or-later
"""Registry of image decoders.

A format is registered by its name and the *magic* bytes its data starts with
(``?`` matches any byte).  Each format provides two functions:

``decode_config(data) -> ImageConfig``
  Returns the dimensions of the image without decoding the pixel data.

``decode(data) -> PIL.Image.Image``
  Decodes the image.

PNG, GIF, JPEG and BMP are decoded by Pillow, the ICO container registers
itself from :py:obj:`besticon.ico`.
"""

from __future__ import annotations

__all__ = ["ImageConfig", "register_format", "sniff", "decode_config", "decode"]

import io
import typing as t

from PIL import Image, UnidentifiedImageError

from besticon import logger
from besticon.exceptions import UnknownImageFormatException

logger = logger.getChild('imaging')


class ImageConfig(t.NamedTuple):
    """Dimensions of an image."""

    width: int
    height: int


class ImageFormat(t.NamedTuple):
    name: str
    magic: bytes
    decode_config: t.Callable[[bytes], ImageConfig]
    decode: t.Callable[[bytes], Image.Image]


FORMATS: list[ImageFormat] = []


def register_format(
    name: str,
    magic: bytes,
    decode_config: t.Callable[[bytes], ImageConfig],  # pylint: disable=redefined-outer-name
    decode: t.Callable[[bytes], Image.Image],  # pylint: disable=redefined-outer-name
):
    """Registers an image format, formats registered later are tried first
    when their magic bytes overlap."""
    FORMATS.insert(0, ImageFormat(name, magic, decode_config, decode))


def _match(magic: bytes, data: bytes) -> bool:
    if len(data) < len(magic):
        return False
    return all(m in (ord("?"), b) for m, b in zip(magic, data))


def sniff(data: bytes) -> ImageFormat:
    """Returns the registered format of ``data`` (by its magic bytes)."""
    for fmt in FORMATS:
        if _match(fmt.magic, data):
            return fmt
    raise UnknownImageFormatException("image: unknown format")


def decode_config(data: bytes) -> tuple[ImageConfig, str]:
    """Returns the dimensions and the format name of the image in ``data``."""
    fmt = sniff(data)
    return fmt.decode_config(data), fmt.name


def decode(data: bytes) -> tuple[Image.Image, str]:
    """Decodes ``data`` and returns the image and the format name."""
    fmt = sniff(data)
    return fmt.decode(data), fmt.name


def pillow_decode_config(data: bytes) -> ImageConfig:
    """Reads the image header with Pillow (:py:obj:`PIL.Image.open` is lazy and
    does not load the pixel data)."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError, EOFError, SyntaxError, ValueError) as exc:
        raise UnknownImageFormatException(f"image: {exc}") from exc
    return ImageConfig(width, height)


def pillow_decode(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, EOFError, SyntaxError, ValueError) as exc:
        raise UnknownImageFormatException(f"image: {exc}") from exc
    return img


register_format("bmp", b"BM????\x00\x00\x00\x00", pillow_decode_config, pillow_decode)
register_format("jpeg", b"\xff\xd8", pillow_decode_config, pillow_decode)
register_format("gif", b"GIF8?a", pillow_decode_config, pillow_decode)
register_format("png", b"\x89PNG\r\n\x1a\n", pillow_decode_config, pillow_decode)
