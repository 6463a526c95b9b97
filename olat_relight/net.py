# pyright: standard

"""Asset fetching: local files or http(s) URLs with retry/backoff."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Iterable
from urllib.parse import urlsplit

import httpx

from .errors import AssetLoadError

__all__ = [
    "BackoffError",
    "fetch_bytes",
    "httpx_get_with_backoff",
    "is_url",
    "redact_url_for_logs",
]

logger = logging.getLogger(__name__)

_DEFAULT_STATUS_FORCELIST = frozenset({429, 500, 502, 503, 504})


class BackoffError(RuntimeError):
    """Raised when network retries are exhausted."""


def is_url(location: str) -> bool:
    return urlsplit(str(location)).scheme in {"http", "https"}


def httpx_get_with_backoff(
    client: httpx.Client,
    url: str,
    *,
    retries: int = 2,
    initial_backoff: float = 0.5,
    max_backoff: float = 4.0,
    retry_status: Iterable[int] | None = None,
    sleep: Callable[[float], None] | None = None,
) -> httpx.Response:
    """Perform a GET request with exponential backoff for transient status codes."""

    retry_codes = frozenset(retry_status) if retry_status else _DEFAULT_STATUS_FORCELIST
    backoff = max(0.1, initial_backoff)
    upper_backoff = max(0.1, max_backoff)
    sleep_impl = sleep or time.sleep
    last_network_error: httpx.RequestError | None = None
    last_response: httpx.Response | None = None

    attempts = max(0, retries) + 1
    for attempt in range(attempts):
        try:
            response = client.get(url)
        except httpx.RequestError as exc:
            last_network_error = exc
            last_response = None
            delay = backoff
        else:
            if response.status_code not in retry_codes:
                return response
            last_response = response
            delay = _retry_delay_from_response(response, backoff, upper_backoff)

        # no point waiting after the final attempt
        if attempt + 1 < attempts:
            sleep_impl(delay)
            backoff = min(backoff * 2, upper_backoff)

    if last_response is not None:
        raise BackoffError(f"Request failed with status {last_response.status_code}")
    if last_network_error is not None:
        raise last_network_error
    raise BackoffError("Request failed before receiving a response")


def fetch_bytes(
    location: str,
    *,
    client: httpx.Client | None = None,
    timeout: float = 30.0,
    retries: int = 2,
) -> bytes:
    """Return the raw bytes behind *location* (filesystem path or URL)."""

    if not is_url(location):
        try:
            return Path(location).read_bytes()
        except OSError as exc:
            raise AssetLoadError(str(location), f"cannot read file: {exc.strerror or exc}") from exc

    owns_client = client is None
    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = httpx_get_with_backoff(http, location, retries=retries)
    except (BackoffError, httpx.RequestError) as exc:
        raise AssetLoadError(redact_url_for_logs(location), f"request failed: {exc}") from exc
    finally:
        if owns_client:
            http.close()
    if response.status_code >= 400:
        raise AssetLoadError(redact_url_for_logs(location), f"HTTP {response.status_code}")
    logger.debug("fetched %d bytes from %s", len(response.content), redact_url_for_logs(location))
    return response.content


def redact_url_for_logs(url: str) -> str:
    """Return a safe identifier for URLs when logging (host plus file name)."""

    try:
        parsed = urlsplit(url)
    except ValueError:
        return "url"
    if parsed.netloc:
        # drop userinfo so credentials never reach the log
        host = parsed.netloc.rsplit("@", 1)[-1]
        name = parsed.path.rsplit("/", 1)[-1]
        return f"{host}/.../{name}" if name else host
    return parsed.path or "url"


def _retry_delay_from_response(response: httpx.Response, fallback: float, cap: float) -> float:
    """Compute the delay for the next retry using Retry-After when available."""

    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            delay = float(retry_after)
        except ValueError:
            delay = fallback
    else:
        delay = fallback
    return max(0.1, min(delay, cap))
