# SPDX-License-Identifier: AGPL-3.0-or-later
# pylint: disable=missing-module-docstring,disable=missing-class-docstring,invalid-name

import msgspec

from besticon.exceptions import (
    BadSizeException,
    BesticonException,
    EmptyResponseException,
    FetchException,
    HTTPStatusException,
    InvalidURLException,
    MalformedIconException,
    UnknownImageFormatException,
)
from besticon.models import FetchResult, Icon
from tests import BesticonTestCase, image_bytes


class TestIcon(BesticonTestCase):

    def test_ok(self):
        self.assertTrue(Icon(url="http://a/i.png").ok)
        self.assertFalse(Icon(url="http://a/i.png", error="besticon: empty response").ok)

    def test_json(self):
        icon = Icon(url="http://a/i.png", width=16, height=16, format="png", byte_size=99, sha1sum="00ff")
        self.assertEqual(
            msgspec.json.decode(msgspec.json.encode(icon)),
            {"url": "http://a/i.png", "width": 16, "height": 16, "format": "png", "bytes": 99, "sha1sum": "00ff"},
        )

    def test_image(self):
        icon = Icon(url="http://a/i.gif", image_data=image_bytes(12, 7, "GIF"))
        self.assertEqual(icon.image().size, (12, 7))

    def test_image_without_data(self):
        with self.assertRaises(ValueError):
            Icon(url="http://a/i.png").image()


class TestFetchResult(BesticonTestCase):

    def test_all_failed(self):
        self.assertFalse(FetchResult().all_failed)
        failed = [Icon(url="http://a/favicon.ico", error="besticon: empty response")]
        self.assertTrue(FetchResult(candidates=["http://a/favicon.ico"], failed=failed).all_failed)
        self.assertFalse(
            FetchResult(candidates=["http://a/i.png"], icons=[Icon(url="http://a/i.png", width=16, height=16)]).all_failed
        )


class TestExceptions(BesticonTestCase):

    def test_hierarchy(self):
        self.assertTrue(issubclass(MalformedIconException, UnknownImageFormatException))
        self.assertTrue(issubclass(HTTPStatusException, FetchException))
        self.assertTrue(issubclass(EmptyResponseException, FetchException))
        for cls in (BadSizeException, InvalidURLException, FetchException, UnknownImageFormatException):
            self.assertTrue(issubclass(cls, BesticonException))

    def test_messages(self):
        self.assertEqual(str(HTTPStatusException("http://a/", 404)), "besticon: not found (HTTP status 404)")
        self.assertEqual(str(InvalidURLException("http://", "missing host")), "besticon: missing host: 'http://'")
        self.assertEqual(str(BadSizeException()), "besticon: bad size")
