# SPDX-License-Identifier: AGPL-3.0-or-later
# pylint: disable=missing-module-docstring,disable=missing-class-docstring,invalid-name

from parameterized.parameterized import parameterized

from besticon import selector
from besticon.models import Icon
from besticon.size_range import SizeRange
from tests import BesticonTestCase


def icon(url, width, height=None, fmt="png", byte_size=100, error=None):
    return Icon(
        url=url,
        width=width,
        height=width if height is None else height,
        format=fmt,
        byte_size=byte_size,
        error=error,
    )


class TestRejectBrokenIcons(BesticonTestCase):

    def test_reject(self):
        icons = [
            icon("http://a/ok.png", 16),
            icon("http://a/err.png", 16, error="besticon: empty response"),
            icon("http://a/pixel.gif", 1, fmt="gif"),
            icon("http://a/thin.png", 16, 1),
            icon("http://a/zero.png", 0),
        ]
        self.assertEqual([i.url for i in selector.reject_broken_icons(icons)], ["http://a/ok.png"])

    def test_idempotent(self):
        icons = [icon("http://a/ok.png", 16), icon("http://a/pixel.gif", 1, fmt="gif")]
        once = selector.reject_broken_icons(icons)
        self.assertEqual(selector.reject_broken_icons(once), once)


class TestDiscardUnwantedFormats(BesticonTestCase):

    icons = [
        icon("http://a/a.png", 16),
        icon("http://a/a.ico", 16, fmt="ico"),
        icon("http://a/a.svg", 9999, fmt="svg"),
        icon("http://a/a.bmp", 16, fmt="bmp"),
    ]

    def test_default_formats(self):
        self.assertEqual(
            [i.format for i in selector.discard_unwanted_formats(self.icons)],
            ["png", "ico"],
        )

    def test_formats(self):
        self.assertEqual(
            [i.format for i in selector.discard_unwanted_formats(self.icons, ["svg", "bmp"])],
            ["svg", "bmp"],
        )


class TestSortIcons(BesticonTestCase):

    def test_by_size(self):
        icons = [icon("http://a/16.png", 16), icon("http://a/64.png", 64), icon("http://a/32.png", 32)]
        self.assertEqual(
            [i.width for i in selector.sort_icons(icons)],
            [64, 32, 16],
        )
        self.assertEqual(
            [i.width for i in selector.sort_icons(icons, size_descending=False)],
            [16, 32, 64],
        )

    def test_width_before_height(self):
        icons = [icon("http://a/a.png", 32, 64), icon("http://a/b.png", 64, 32)]
        self.assertEqual([i.url for i in selector.sort_icons(icons)], ["http://a/b.png", "http://a/a.png"])

    def test_ties(self):
        icons = [
            icon("http://a/c.png", 32, byte_size=100),
            icon("http://a/b.png", 32, byte_size=100),
            icon("http://a/a.png", 32, byte_size=50),
            icon("http://a/d.png", 32, byte_size=200),
        ]
        expected = ["http://a/d.png", "http://a/b.png", "http://a/c.png", "http://a/a.png"]
        self.assertEqual([i.url for i in selector.sort_icons(icons)], expected)
        self.assertEqual([i.url for i in selector.sort_icons(icons, size_descending=False)], expected)


class TestIconInSizeRange(BesticonTestCase):

    icons = [
        icon("http://a/16.png", 16),
        icon("http://a/32.png", 32),
        icon("http://a/64.png", 64),
        icon("http://a/120.png", 120),
        icon("http://a/152.png", 152),
    ]

    @parameterized.expand(
        [
            # smallest icon in perfect..max
            (SizeRange(16, 64, 200), "http://a/64.png"),
            (SizeRange(16, 100, 200), "http://a/120.png"),
            (SizeRange(16, 130, 500), "http://a/152.png"),
            # none >= perfect: biggest icon in min..perfect
            (SizeRange(16, 200, 500), "http://a/152.png"),
            (SizeRange(20, 60, 60), "http://a/32.png"),
            (SizeRange(0, 0, 10), None),
            (SizeRange(200, 300, 500), None),
        ]
    )
    def test_select(self, r, expected):
        found = selector.icon_in_size_range(self.icons, r)
        self.assertEqual(found.url if found else None, expected)

    def test_svg_wins(self):
        icons = self.icons + [icon("http://a/logo.svg", 9999, fmt="svg")]
        self.assertEqual(selector.icon_in_size_range(icons, SizeRange(16, 16, 16)).url, "http://a/logo.svg")

    def test_both_dimensions(self):
        icons = [icon("http://a/wide.png", 200, 20)]
        self.assertIsNone(selector.icon_in_size_range(icons, SizeRange(16, 64, 500)))

    def test_empty(self):
        self.assertIsNone(selector.icon_in_size_range([], SizeRange(16, 32, 64)))
