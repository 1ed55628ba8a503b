import http.client
import logging
import time
import urllib.error
import urllib.request
from urllib.parse import urlparse

from podfeed.errors import (
    EmptyResponseError,
    FetchTimeout,
    HttpStatusError,
    NetworkError,
)

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/rss+xml, application/xml, text/xml"


def fetch_feed(url: str, timeout: float = 10.0, user_agent: str = "podfeed/0.1") -> str:
    """Fetch RSS feed content from a URL with a single bounded attempt.

    Args:
        url: Absolute http:// or https:// feed URL.
        timeout: Seconds before the request is abandoned.
        user_agent: Value of the User-Agent header.

    Returns:
        The decoded response body.

    Raises:
        FetchTimeout: The request did not finish within ``timeout``.
        HttpStatusError: The server answered with a non-2xx status.
        EmptyResponseError: The body was empty or whitespace only.
        NetworkError: DNS, connection or protocol failure.
    """
    scheme = urlparse(url).scheme
    if scheme not in ("http", "https"):
        raise NetworkError(f"unsupported URL scheme '{scheme}'")

    req = urllib.request.Request(
        url, headers={"User-Agent": user_agent, "Accept": ACCEPT_HEADER},
    )
    logger.info("Fetching feed: %s", url)
    t0 = time.monotonic()

    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            body = resp.read()
            charset = resp.headers.get_content_charset() or "utf-8"
    except urllib.error.HTTPError as e:
        raise HttpStatusError(e.code, str(e.reason or "")) from e
    except urllib.error.URLError as e:
        if isinstance(e.reason, TimeoutError):
            raise FetchTimeout(timeout) from e
        raise NetworkError(e.reason) from e
    except TimeoutError as e:
        raise FetchTimeout(timeout) from e
    except (OSError, http.client.HTTPException) as e:
        raise NetworkError(e) from e

    try:
        text = body.decode(charset, errors="replace")
    except LookupError:
        text = body.decode("utf-8", errors="replace")
    if not text.strip():
        raise EmptyResponseError()

    logger.info(
        "Fetched %d bytes in %dms", len(body), (time.monotonic() - t0) * 1000,
    )
    return text
