# SPDX-License-Identifier: AGPL-3.0-or-later
# pylint: disable=missing-module-docstring,disable=missing-class-docstring,invalid-name

from PIL import Image

from besticon.colorfinder import ColorFinder, to_hex
from tests import BesticonTestCase


class TestColorFinder(BesticonTestCase):

    def test_solid(self):
        img = Image.new("RGB", (32, 32), (10, 20, 30))
        self.assertEqual(ColorFinder().find_main_color(img), (10, 20, 30))

    def test_dominant(self):
        img = Image.new("RGB", (10, 10), (250, 250, 250))
        for x in range(10):
            for y in range(3):
                img.putpixel((x, y), (0, 0, 200))
        self.assertEqual(ColorFinder().find_main_color(img), (250, 250, 250))

    def test_transparent_pixels_are_ignored(self):
        img = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
        for x in range(2):
            img.putpixel((x, 0), (200, 0, 0, 255))
        self.assertEqual(ColorFinder().find_main_color(img), (200, 0, 0))

    def test_big_image(self):
        img = Image.new("RGB", (300, 200), (0, 255, 0))
        self.assertEqual(ColorFinder(max_size=16).find_main_color(img), (0, 255, 0))

    def test_to_hex(self):
        self.assertEqual(to_hex((255, 0, 16)), "ff0010")
