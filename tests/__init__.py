# SPDX-License-Identifier: AGPL-3.0-or-later
# pylint: disable=missing-module-docstring,disable=missing-class-docstring,invalid-name

import io
import os
import struct

import aiounittest
import httpx
from PIL import Image

os.environ.pop('BESTICON_CONFIG_PATH', None)


class BesticonTestLayer:
    """Base layer for the tests."""

    __name__ = 'BesticonTestLayer'

    @classmethod
    def setUp(cls):
        pass

    @classmethod
    def tearDown(cls):
        pass

    @classmethod
    def testSetUp(cls):
        pass

    @classmethod
    def testTearDown(cls):
        pass


class BesticonTestCase(aiounittest.AsyncTestCase):
    """Base test case, coroutine test methods are run in an event loop."""

    layer = BesticonTestLayer

    def setattr4test(self, obj, attr, value):
        """setattr(obj, attr, value) but reset to the previous value in the
        cleanup."""
        previous_value = getattr(obj, attr)

        def cleanup_patch():
            setattr(obj, attr, previous_value)

        self.addCleanup(cleanup_patch)
        setattr(obj, attr, value)


def image_bytes(width: int, height: int, fmt: str = "PNG", color=(255, 0, 0)) -> bytes:
    """Encode a single colored image with Pillow."""
    mode = "RGB" if fmt in ("JPEG", "BMP") else "RGBA"
    if mode == "RGBA" and len(color) == 3:
        color = color + (255,)
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def dib_bytes(width: int, height: int, color=(0, 0, 255)) -> bytes:
    """A 24bit DIB as stored in an icon file: the BMP without file header, the
    height doubled and followed by the AND mask."""
    bmp = image_bytes(width, height, "BMP", color)
    dib = bytearray(bmp[14:])
    struct.pack_into("<i", dib, 8, height * 2)
    mask_row = ((width + 31) // 32) * 4
    return bytes(dib) + b"\x00" * (mask_row * height)


def ico_bytes(*images: tuple[int, int, bytes]) -> bytes:
    """Build an icon file from ``(width, height, payload)`` tuples, a size of
    256 is stored as 0."""
    header = struct.pack("<HHH", 0, 1, len(images))
    offset = 6 + 16 * len(images)
    entries = b""
    payloads = b""
    for width, height, payload in images:
        entries += struct.pack(
            "<BBBBHHII", width % 256, height % 256, 0, 0, 1, 32, len(payload), offset + len(payloads)
        )
        payloads += payload
    return header + entries + payloads


def url_key(url) -> str:
    """Normalized form of an URL, an empty path is written as '/'."""
    url = httpx.URL(str(url))
    return str(url.copy_with(path=url.path))


class MockWeb:
    """A fake web for ``httpx.MockTransport``: URL -> (status, body, headers).
    Unknown URLs get a 404, the requested URLs are recorded."""

    def __init__(self):
        self.pages: dict[str, tuple[int, bytes, dict]] = {}
        self.requests: list[str] = []

    def add(self, url: str, body: bytes = b"", status: int = 200, headers: dict | None = None):
        self.pages[url_key(url)] = (status, body, headers or {})

    def redirect(self, url: str, location: str, status: int = 301):
        self.pages[url_key(url)] = (status, b"", {"Location": location})

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = url_key(request.url)
        self.requests.append(url)
        status, body, headers = self.pages.get(url, (404, b"not found", {}))
        return httpx.Response(status, content=body, headers=headers)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)
