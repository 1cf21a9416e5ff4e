"""Retry with exponential backoff, and failure classification for fallback logic."""

from __future__ import annotations

import asyncio
import logging
from typing import TypeVar

import anthropic
import httpx

from storyscale.errors import ProviderFailure, SourceFetchFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_HTTP_CODES = {429, 500, 502, 503, 504}
RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
    ConnectionError,
    TimeoutError,
)


def _backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    return min(base_delay * (2**attempt), max_delay)


async def retry_async(
    fn,
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    **kwargs,
):
    """Call an async function with exponential backoff on transient failures.

    Retries on httpx timeout/connection errors and HTTP 429/5xx responses.
    Everything else propagates immediately.
    """
    last_exc = None
    for attempt in range(max_retries + 1):
        try:
            return await fn(*args, **kwargs)
        except RETRYABLE_EXCEPTIONS as exc:
            last_exc = exc
            if attempt == max_retries:
                break
            delay = _backoff(attempt, base_delay, max_delay)
            logger.warning(
                "Retry %d/%d after %s: %s (waiting %.1fs)",
                attempt + 1, max_retries, type(exc).__name__, exc, delay,
            )
            await asyncio.sleep(delay)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code not in RETRYABLE_HTTP_CODES:
                raise
            last_exc = exc
            if attempt == max_retries:
                break
            # Honour Retry-After when the server rate limits us
            retry_after = exc.response.headers.get("retry-after")
            try:
                delay = min(float(retry_after), max_delay) if retry_after else None
            except ValueError:
                delay = None
            if delay is None:
                delay = _backoff(attempt, base_delay, max_delay)
            logger.warning(
                "Retry %d/%d after HTTP %d (waiting %.1fs)",
                attempt + 1, max_retries, exc.response.status_code, delay,
            )
            await asyncio.sleep(delay)

    raise last_exc  # type: ignore[misc]


def classify_failure(exc: BaseException) -> str:
    """Map an exception to a failure kind used by the fallback chain.

    Kinds: ``timeout``, ``rate_limit``, ``validation``, ``transport``,
    ``unavailable``.
    """
    if isinstance(exc, (ProviderFailure, SourceFetchFailure)):
        return exc.kind
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException,
                        anthropic.APITimeoutError)):
        return "timeout"
    if isinstance(exc, anthropic.RateLimitError):
        return "rate_limit"
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 429:
            return "rate_limit"
        if 400 <= status < 500:
            return "validation"
        return "transport"
    if isinstance(exc, anthropic.APIStatusError):
        return "validation" if 400 <= exc.status_code < 500 else "transport"
    if isinstance(exc, (httpx.TransportError, anthropic.APIConnectionError, ConnectionError)):
        return "transport"
    if isinstance(exc, (KeyError, IndexError, ValueError, TypeError)):
        # Malformed provider payloads
        return "validation"
    return "transport"
