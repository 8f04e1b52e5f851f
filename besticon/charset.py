# SPDX-License-Identifier: AGPL-3.0-or-later
"""Normalize the encoding of HTML documents to UTF-8.

The encoding is determined in this order:

1. byte order mark
2. the charset declared by the HTTP response (``Content-Type`` header, see
   ``httpx.Response.charset_encoding``)
3. ``<meta charset>`` / ``<meta http-equiv="Content-Type">`` in the first
   1024 bytes of the document
4. UTF-8 if the document is valid UTF-8, otherwise ``windows-1252``

Names of unknown codecs and of codecs that are not text encodings (``rot13``,
``hex``, ``zlib``, ..) are ignored, the next step is tried.
"""

from __future__ import annotations

__all__ = ["determine_encoding", "to_utf8"]

import codecs
import re

from besticon import logger

logger = logger.getChild('charset')

PRESCAN_BYTES = 1024

BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

_META_CHARSET_RE = re.compile(rb"""<meta[^>]+charset\s*=\s*["']?\s*([a-zA-Z0-9_:.\-]+)""", re.IGNORECASE)


def lookup_text_encoding(name: str | None) -> str | None:
    """Returns the normalized name of the text encoding ``name`` or ``None``."""
    if not name:
        return None
    try:
        info = codecs.lookup(name.strip())
    except LookupError:
        logger.debug("unknown charset: %s", name)
        return None
    if not info._is_text_encoding:  # pylint: disable=protected-access
        logger.debug("charset %s is not a text encoding", name)
        return None
    return info.name


def determine_encoding(data: bytes, declared: str | None = None) -> str:
    """Encoding of the HTML ``data``, ``declared`` is the charset of the HTTP
    response (if any)."""
    for bom, encoding in BOMS:
        if data.startswith(bom):
            return encoding

    encoding = lookup_text_encoding(declared)
    if encoding:
        return encoding

    m = _META_CHARSET_RE.search(data[:PRESCAN_BYTES])
    if m:
        encoding = lookup_text_encoding(m.group(1).decode("ascii"))
        if encoding:
            return encoding

    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return "cp1252"
    return "utf-8"


def to_utf8(data: bytes, declared: str | None = None) -> bytes:
    """Transcode the HTML ``data`` to UTF-8."""
    encoding = determine_encoding(data, declared)
    if encoding == "utf-8":
        if data.startswith(codecs.BOM_UTF8):
            return data[len(codecs.BOM_UTF8) :]
        return data
    return data.decode(encoding, errors="replace").encode("utf-8")
