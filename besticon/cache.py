# SPDX-License-Identifier: AGPL-3.0-or-later
"""Implementations for caching discovery results.

:py:obj:`IconCacheConfig`:
  Configuration of the cache

:py:obj:`IconCache`:
  Abstract base class of a key / bytes store.

:py:obj:`IconCacheMEM`:
  Cache in the memory of the process, bounded by the total size of the values.

:py:obj:`IconCacheSQLite`:
  Cache that stores the values in a SQLite DB.

:py:obj:`IconCacheNull`:
  Caches nothing.

The values are serialized :py:obj:`ResultEnvelope <besticon.models.ResultEnvelope>`
objects, the key is build from the calendar day and the site URL (see
:py:obj:`cache_key`), so entries expire daily without explicit eviction.
"""

from __future__ import annotations

__all__ = [
    "IconCacheConfig",
    "IconCacheStats",
    "IconCache",
    "IconCacheNull",
    "IconCacheMEM",
    "IconCacheSQLite",
    "new_cache",
    "cache_key",
]

import abc
import collections
import dataclasses
import datetime
import os
import sqlite3
import tempfile
import threading
from typing import Literal

import msgspec
import typer

from besticon import logger
from besticon.models import Icon, ResultEnvelope
from besticon.utils import humanize_bytes, humanize_number

logger = logger.getChild('cache')
app = typer.Typer()


class IconCacheConfig(msgspec.Struct):  # pylint: disable=too-few-public-methods
    """Configuration of the icon cache."""

    db_type: Literal["none", "mem", "sqlite"] = "mem"
    """Type of the cache:

    ``none``:
      :py:obj:`IconCacheNull`

    ``mem``:
      :py:obj:`IconCacheMEM`

    ``sqlite``:
      :py:obj:`IconCacheSQLite`
    """

    db_url: str = tempfile.gettempdir() + os.sep + "besticon_cache.db"
    """Path of the SQLite DB file."""

    size_mb: int = 32
    """Maximum size (MB) of all values in the memory cache."""


def new_cache(cfg: IconCacheConfig) -> IconCache:
    if cfg.db_type == "none":
        return IconCacheNull(cfg)
    if cfg.db_type == "mem":
        return IconCacheMEM(cfg)
    if cfg.db_type == "sqlite":
        return IconCacheSQLite(cfg)
    raise NotImplementedError(f"cache db_type '{cfg.db_type}' is unknown")


def cache_key(site_url: str, day: datetime.date | None = None) -> str:
    """Key of a site URL, the results expire after a day."""
    day = day or datetime.date.today()
    return f"{day.year}-{day.month:02d}-{day.day:02d}-{site_url}"


def encode_result(icons: list[Icon], error: str = "") -> bytes:
    return msgspec.json.encode(ResultEnvelope(icons=icons, error=error))


def decode_result(data: bytes) -> ResultEnvelope:
    return msgspec.json.decode(data, type=ResultEnvelope)


@dataclasses.dataclass
class IconCacheStats:
    """Dataclass which provides information on the status of the cache."""

    items: int | None = None
    bytes: int | None = None
    hits: int | None = None
    misses: int | None = None

    field_descr = (
        ("items", "number of items in cache", humanize_number),
        ("bytes", "total size (approx. bytes) of cache", humanize_bytes),
        ("hits", "number of cache hits", humanize_number),
        ("misses", "number of cache misses", humanize_number),
    )

    def report(self, fmt: str = "{descr}: {val}\n"):
        s = []
        for field, descr, cast in self.field_descr:
            val = getattr(self, field)
            if val is None:
                val = "--"
            else:
                val = cast(val)
            s.append(fmt.format(descr=descr, val=val))
        return "".join(s)


class IconCache(abc.ABC):
    """Abstract base class of a cache, the implementations have to be thread
    safe."""

    @abc.abstractmethod
    def __init__(self, cfg: IconCacheConfig):
        """An instance of the cache is build up from the configuration."""

    @abc.abstractmethod
    def get(self, key: str) -> bytes | None:
        """Returns the value of ``key`` or ``None`` if there is no entry."""

    @abc.abstractmethod
    def set(self, key: str, data: bytes) -> bool:
        """Stores ``data`` under ``key``, returns ``False`` if the value has not
        been stored."""

    @abc.abstractmethod
    def state(self) -> IconCacheStats:
        """Returns a :py:obj:`IconCacheStats` with information on the state of
        the cache."""


class IconCacheNull(IconCache):
    """A cache that caches nothing."""

    def __init__(self, cfg: IconCacheConfig):
        self.cfg = cfg

    def get(self, key: str) -> bytes | None:
        return None

    def set(self, key: str, data: bytes) -> bool:
        return False

    def state(self):
        return IconCacheStats(items=0, bytes=0)


class IconCacheMEM(IconCache):
    """Cache in the process' memory.  When the total size of the values exceeds
    :py:obj:`IconCacheConfig.size_mb`, the least recently used values are
    dropped."""

    def __init__(self, cfg: IconCacheConfig):
        self.cfg = cfg
        self.max_bytes: int = cfg.size_mb << 20
        self._data: collections.OrderedDict[str, bytes] = collections.OrderedDict()
        self._bytes = 0
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            data = self._data.get(key)
            if data is None:
                self._misses += 1
                return None
            self._hits += 1
            self._data.move_to_end(key)
            return data

    def set(self, key: str, data: bytes) -> bool:
        size = len(key) + len(data)
        if size > self.max_bytes:
            logger.info("value of %s to big to cache (bytes: %s)", key, size)
            return False

        with self._lock:
            old = self._data.pop(key, None)
            if old is not None:
                self._bytes -= len(key) + len(old)
            self._data[key] = data
            self._bytes += size
            while self._bytes > self.max_bytes:
                k, v = self._data.popitem(last=False)
                self._bytes -= len(k) + len(v)
                logger.debug("evicted %s from cache", k)
        return True

    def state(self):
        with self._lock:
            return IconCacheStats(items=len(self._data), bytes=self._bytes, hits=self._hits, misses=self._misses)


class IconCacheSQLite(IconCache):
    """Cache that stores the values in a SQLite DB.  Each thread uses its own
    DB connection, the writes are serialized by SQLite's transactions.  Entries
    of past days are removed by :py:obj:`IconCacheSQLite.maintenance`."""

    DDL_CACHE = """\
CREATE TABLE IF NOT EXISTS icon_cache (
  key        TEXT,
  m_time     INTEGER DEFAULT (strftime('%s', 'now')),
  data       BLOB NOT NULL,
  PRIMARY KEY (key))"""

    SQL_INSERT = (
        "INSERT INTO icon_cache (key, data) VALUES (?, ?)"
        "    ON CONFLICT (key) DO UPDATE "
        "   SET data=excluded.data, m_time=strftime('%s', 'now')"
    )

    def __init__(self, cfg: IconCacheConfig):
        if cfg.db_url == ":memory:":
            logger.critical("don't use SQLite DB in :memory: with more than one thread!!")
        self.cfg = cfg
        self._thread_local = threading.local()
        with self.connect() as conn:
            conn.execute(self.DDL_CACHE)

    def connect(self) -> sqlite3.Connection:
        """Returns the DB connection of the current thread."""
        conn = getattr(self._thread_local, "conn", None)
        if conn is None:
            conn = sqlite3.connect(self.cfg.db_url, check_same_thread=False, timeout=10)
            conn.execute("PRAGMA journal_mode=WAL")
            self._thread_local.conn = conn
        return conn

    def get(self, key: str) -> bytes | None:
        res = self.connect().execute("SELECT data FROM icon_cache WHERE key = ?", (key,)).fetchone()
        if res is None:
            return None
        return res[0]

    def set(self, key: str, data: bytes) -> bool:
        with self.connect() as conn:
            conn.execute(self.SQL_INSERT, (key, data))
        return True

    def maintenance(self, today: datetime.date | None = None):
        """Drop all entries which have not been stored today."""
        prefix = cache_key("", today)
        with self.connect() as conn:
            res = conn.execute("DELETE FROM icon_cache WHERE substr(key, 1, ?) != ?", (len(prefix), prefix))
        logger.debug("dropped %s obsolete items from db", res.rowcount)

    def state(self) -> IconCacheStats:
        items, total = self.connect().execute("SELECT count(*), SUM(length(data)) FROM icon_cache").fetchone()
        return IconCacheStats(items=items or 0, bytes=total or 0)


@app.command()
def state():
    """show state of the configured cache"""
    from besticon import config  # pylint: disable=import-outside-toplevel

    cache = new_cache(config.load_config().cache)
    print(cache.state().report())


@app.command()
def maintenance():
    """drop obsolete entries from the SQLite cache"""
    from besticon import config  # pylint: disable=import-outside-toplevel

    cache = new_cache(config.load_config().cache)
    if not isinstance(cache, IconCacheSQLite):
        print(f"cache of type '{cache.cfg.db_type}' does not need a maintenance")
        return
    state_t0 = cache.state()
    cache.maintenance()
    print("The cache has been reduced by:")
    print(f"- items: {humanize_number((state_t0.items or 0) - (cache.state().items or 0))}")
