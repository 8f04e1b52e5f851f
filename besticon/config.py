# SPDX-License-Identifier: AGPL-3.0-or-later
"""Configuration of besticon.

The configuration is read from a TOML file, the file is located by the
environment ``BESTICON_CONFIG_PATH`` and defaults to the ``besticon.toml``
shipped with the package::

  [besticon]
  cfg_schema = 1

  [besticon.network]
  timeout = 5.0

  [besticon.finder]
  default_formats = ["gif", "ico", "jpg", "png"]

  [besticon.cache]
  db_type = "mem"
"""

from __future__ import annotations

__all__ = ["CONFIG_SCHEMA", "DEFAULT_CFG_TOML_PATH", "BesticonConfig", "FinderConfig", "load_config"]

import os
import pathlib

import msgspec

from besticon import logger
from besticon.cache import IconCacheConfig
from besticon.network import NetworkConfig
from besticon.selector import DEFAULT_FORMATS
from besticon.size_range import MAX_ICON_SIZE

logger = logger.getChild('config')

CONFIG_SCHEMA: int = 1
"""Version of the configuration schema."""

TOML_CACHE_CFG: dict[str, "BesticonConfig"] = {}
"""Cache config objects by TOML's filename."""

DEFAULT_CFG_TOML_PATH = pathlib.Path(__file__).parent / "besticon.toml"


class FinderConfig(msgspec.Struct):  # pylint: disable=too-few-public-methods
    """Configuration of the icon finder."""

    default_formats: list[str] = msgspec.field(default_factory=lambda: list(DEFAULT_FORMATS))
    """Formats returned when the caller does not ask for specific formats."""

    discard_image_bytes: bool = False
    """Don't keep the raw image data in the icons (saves memory and cache
    space, but the color of an icon can't be determined)."""

    host_only_domains: list[str] = msgspec.field(default_factory=list)
    """Domains for which only scheme and host of the URL are used (``*`` for
    all domains)."""

    max_icon_size: int = MAX_ICON_SIZE
    """Upper limit of the sizes in a size range.  The value can't exceed
    :py:obj:`MAX_ICON_SIZE <besticon.size_range.MAX_ICON_SIZE>`."""

    def __post_init__(self):
        if not 0 <= self.max_icon_size <= MAX_ICON_SIZE:
            raise ValueError(f"finder.max_icon_size has to be in the range 0..{MAX_ICON_SIZE}")


class BesticonConfig(msgspec.Struct):  # pylint: disable=too-few-public-methods
    """The class aggregates configurations of besticon's components."""

    cfg_schema: int
    """Config's schema version, currently only version :py:obj:`CONFIG_SCHEMA`
    is supported."""

    network: NetworkConfig = msgspec.field(default_factory=NetworkConfig)
    """Setup of the :py:obj:`besticon.network.NetworkConfig`."""

    finder: FinderConfig = msgspec.field(default_factory=FinderConfig)
    """Setup of the :py:obj:`FinderConfig`."""

    cache: IconCacheConfig = msgspec.field(default_factory=IconCacheConfig)
    """Setup of the :py:obj:`besticon.cache.IconCacheConfig`."""

    @classmethod
    def from_toml_file(cls, cfg_file: pathlib.Path, use_cache: bool = True) -> "BesticonConfig":
        """Create a config object from a TOML file, the ``use_cache`` argument
        specifies whether a cache should be used.
        """

        cached = TOML_CACHE_CFG.get(str(cfg_file.resolve()))
        if use_cache and cached:
            return cached

        with cfg_file.open("rb") as f:
            data = f.read()

        cfg = msgspec.toml.decode(data, type=_BesticonConfig)
        schema = cfg.besticon.cfg_schema
        if schema != CONFIG_SCHEMA:
            raise ValueError(
                f"config schema version {CONFIG_SCHEMA} is needed, version {schema} is given in {cfg_file}"
            )

        cfg = cfg.besticon
        if use_cache:
            TOML_CACHE_CFG[str(cfg_file.resolve())] = cfg

        return cfg


class _BesticonConfig(msgspec.Struct):  # pylint: disable=too-few-public-methods
    # wrapper struct for root object "besticon."
    besticon: BesticonConfig


def load_config(use_cache: bool = True) -> BesticonConfig:
    """Load the configuration from ``BESTICON_CONFIG_PATH`` or the default
    config of the package."""

    cfg_file = DEFAULT_CFG_TOML_PATH
    env_path = os.environ.get("BESTICON_CONFIG_PATH")
    if env_path:
        cfg_file = pathlib.Path(env_path)
        if not cfg_file.exists():
            logger.error("missing besticon config: %s", cfg_file)
            cfg_file = DEFAULT_CFG_TOML_PATH

    logger.debug("load besticon config: %s", cfg_file)
    return BesticonConfig.from_toml_file(cfg_file, use_cache=use_cache)
