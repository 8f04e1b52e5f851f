# SPDX-License-Identifier: AGPL-3.0-or-later
"""Exception types raised by besticon modules."""


class BesticonException(Exception):
    """Base besticon exception."""


class BadSizeException(BesticonException):
    """Raised when a size range is malformed or violates
    ``0 <= min <= perfect <= max <= max_icon_size``."""

    def __init__(self, value: str = ''):
        message = "besticon: bad size"
        if value:
            message = f"{message} {value!r}"
        super().__init__(message)
        self.value: str = value


class InvalidURLException(BesticonException):
    """No valid base URL can be formed from the site URL."""

    def __init__(self, url: str, message: str = 'invalid URL'):
        super().__init__(f"besticon: {message}: {url!r}")
        self.url: str = url


class UnparsableDocumentException(BesticonException):
    """The HTML document can not be parsed at all."""

    def __init__(self, message: str = 'could not parse html'):
        super().__init__(f"besticon: {message}")


class UnknownImageFormatException(BesticonException):
    """No decoder is registered for the data or the decoder failed."""

    def __init__(self, message: str = 'unknown image format'):
        super().__init__(message)


class MalformedIconException(UnknownImageFormatException):
    """The ICO container is truncated or does not contain any icons."""


class FetchException(BesticonException):
    """Error while fetching a resource over HTTP."""


class HTTPStatusException(FetchException):
    """The response status is outside of [200, 300)."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"besticon: not found (HTTP status {status_code})")
        self.url: str = url
        self.status_code: int = status_code


class EmptyResponseException(FetchException):
    """The response body is empty."""

    def __init__(self, url: str):
        super().__init__("besticon: empty response")
        self.url: str = url


class BodyTooLargeException(FetchException):
    """The response body reached the configured size limit."""

    def __init__(self, url: str, limit: int):
        super().__init__(f"body too large (limit {limit} bytes)")
        self.url: str = url
        self.limit: int = limit


class NoIconsFoundException(BesticonException):
    """No icon has been found for a site."""

    def __init__(self, url: str):
        super().__init__("besticon: no icons found for site")
        self.url: str = url
