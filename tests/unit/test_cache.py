# SPDX-License-Identifier: AGPL-3.0-or-later
# pylint: disable=missing-module-docstring,disable=missing-class-docstring,invalid-name

import datetime
import pathlib
import tempfile

from besticon import cache
from besticon.models import Icon
from tests import BesticonTestCase


class TestCacheKey(BesticonTestCase):

    def test_cache_key(self):
        day = datetime.date(2024, 3, 7)
        self.assertEqual(cache.cache_key("http://example.com", day), "2024-03-07-http://example.com")

    def test_today(self):
        self.assertTrue(cache.cache_key("x").startswith(datetime.date.today().isoformat() + "-"))


class TestEnvelope(BesticonTestCase):

    def test_encode(self):
        icons = [Icon(url="http://a/i.png", width=16, height=16, format="png", byte_size=42, sha1sum="abc")]
        data = cache.encode_result(icons)
        self.assertIn(b'"bytes":42', data)
        self.assertNotIn(b'"image_data"', data)

        res = cache.decode_result(data)
        self.assertEqual(res.icons, icons)
        self.assertEqual(res.error, "")


class TestIconCacheMEM(BesticonTestCase):

    def test_get_set(self):
        c = cache.IconCacheMEM(cache.IconCacheConfig())
        self.assertIsNone(c.get("k"))
        self.assertTrue(c.set("k", b"value"))
        self.assertEqual(c.get("k"), b"value")
        self.assertTrue(c.set("k", b"other"))
        self.assertEqual(c.get("k"), b"other")

        state = c.state()
        self.assertEqual((state.items, state.bytes, state.hits, state.misses), (1, 6, 2, 1))

    def test_lru(self):
        c = cache.IconCacheMEM(cache.IconCacheConfig(size_mb=1))
        chunk = b"x" * 400_000
        c.set("a", chunk)
        c.set("b", chunk)
        c.get("a")
        c.set("c", chunk)

        self.assertIsNotNone(c.get("a"))
        self.assertIsNone(c.get("b"))
        self.assertIsNotNone(c.get("c"))
        self.assertLessEqual(c.state().bytes, 1 << 20)

    def test_value_too_big(self):
        c = cache.IconCacheMEM(cache.IconCacheConfig(size_mb=1))
        self.assertFalse(c.set("k", b"x" * (1 << 20)))
        self.assertIsNone(c.get("k"))


class TestIconCacheSQLite(BesticonTestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()  # pylint: disable=consider-using-with
        self.addCleanup(self.tmp.cleanup)
        self.cfg = cache.IconCacheConfig(db_type="sqlite", db_url=str(pathlib.Path(self.tmp.name) / "cache.db"))

    def test_get_set(self):
        c = cache.new_cache(self.cfg)
        self.assertIsInstance(c, cache.IconCacheSQLite)
        self.assertIsNone(c.get("k"))
        c.set("k", b"value")
        c.set("k", b"other")
        self.assertEqual(c.get("k"), b"other")
        self.assertEqual(c.state().items, 1)

    def test_persistent(self):
        cache.IconCacheSQLite(self.cfg).set("k", b"value")
        self.assertEqual(cache.IconCacheSQLite(self.cfg).get("k"), b"value")

    def test_maintenance(self):
        c = cache.IconCacheSQLite(self.cfg)
        today = datetime.date(2024, 3, 7)
        c.set(cache.cache_key("http://a", datetime.date(2024, 3, 6)), b"old")
        c.set(cache.cache_key("http://a", today), b"new")
        c.set(cache.cache_key("http://b", today), b"new")

        c.maintenance(today)
        state = c.state()
        self.assertEqual((state.items, state.bytes), (2, 6))
        self.assertIsNone(c.get(cache.cache_key("http://a", datetime.date(2024, 3, 6))))


class TestNewCache(BesticonTestCase):

    def test_types(self):
        self.assertIsInstance(cache.new_cache(cache.IconCacheConfig(db_type="none")), cache.IconCacheNull)
        self.assertIsInstance(cache.new_cache(cache.IconCacheConfig()), cache.IconCacheMEM)

    def test_null(self):
        c = cache.new_cache(cache.IconCacheConfig(db_type="none"))
        self.assertFalse(c.set("k", b"v"))
        self.assertIsNone(c.get("k"))

    def test_report(self):
        report = cache.IconCacheStats(items=3, bytes=2048).report()
        self.assertIn("number of items in cache: 3\n", report)
        self.assertIn("total size (approx. bytes) of cache: 2.00 KB\n", report)
        self.assertIn("number of cache hits: --\n", report)
