"""Terminal failures of the fetch -> parse -> map pipeline.

Per-field and per-episode anomalies are never raised; they resolve to
defaults in the mapper. Everything here aborts the current invocation.
"""

_NETWORK_MARKERS = (
    "timeout",
    "request failed",
    "name or service not known",
    "getaddrinfo",
    "enotfound",
)


class FeedError(Exception):
    """Base class for all terminal feed errors."""


class FetchError(FeedError):
    """The feed could not be downloaded."""


class NetworkError(FetchError):
    def __init__(self, cause: object):
        self.cause = cause
        super().__init__(f"Request failed: {cause}")


class FetchTimeout(FetchError):
    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"Request timeout after {seconds:g} seconds")


class HttpStatusError(FetchError):
    def __init__(self, code: int, reason: str = ""):
        self.code = code
        self.reason = reason
        super().__init__(f"HTTP {code}: {reason}" if reason else f"HTTP {code}")


class EmptyResponseError(FetchError):
    def __init__(self) -> None:
        super().__init__("Empty response from RSS feed")


class XmlSyntaxError(FeedError):
    """The feed document is not well-formed XML."""


class StructureError(FeedError):
    """Well-formed XML without an RSS channel."""

    def __init__(self, message: str = "Invalid RSS feed structure - no channel found"):
        super().__init__(message)


def is_network_failure(exc: BaseException) -> bool:
    """True when *exc* looks like a connectivity or timeout problem."""
    if isinstance(exc, (NetworkError, FetchTimeout)):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _NETWORK_MARKERS)
