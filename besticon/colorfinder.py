# SPDX-License-Identifier: AGPL-3.0-or-later
"""Find the dominant color of an icon.

The pixels of the (down scaled) image are put into buckets of similar colors,
the color of an icon is the average color of the biggest bucket.  Transparent
pixels are ignored as long as there are opaque ones.
"""

from __future__ import annotations

__all__ = ["ColorFinder", "to_hex"]

import collections

from PIL import Image

from besticon import logger

logger = logger.getChild('colorfinder')

RGB = tuple[int, int, int]


def to_hex(color: RGB) -> str:
    return "%02x%02x%02x" % color


class ColorFinder:  # pylint: disable=too-few-public-methods
    """Determine the main color of an image."""

    def __init__(self, max_size: int = 64, shift: int = 4, alpha_threshold: int = 128):
        self.max_size = max_size
        self.shift = shift
        self.alpha_threshold = alpha_threshold

    def _pixels(self, img: Image.Image) -> list[tuple[int, int, int, int]]:
        img = img.convert("RGBA")
        img.thumbnail((self.max_size, self.max_size))
        data = img.tobytes()
        pixels = [tuple(data[i : i + 4]) for i in range(0, len(data), 4)]
        opaque = [p for p in pixels if p[3] >= self.alpha_threshold]
        return opaque or pixels

    def find_main_color(self, img: Image.Image) -> RGB:
        pixels = self._pixels(img)
        if not pixels:
            raise ValueError("image has no pixels")

        buckets: dict[RGB, list[tuple[int, int, int, int]]] = collections.defaultdict(list)
        for p in pixels:
            buckets[(p[0] >> self.shift, p[1] >> self.shift, p[2] >> self.shift)].append(p)

        # max() keeps the first bucket on ties, dicts keep the insertion order
        bucket = max(buckets.values(), key=len)
        n = len(bucket)
        return (
            sum(p[0] for p in bucket) // n,
            sum(p[1] for p in bucket) // n,
            sum(p[2] for p in bucket) // n,
        )
