"""
HTTP client utilities for pomkeeper.

This module provides an asynchronous HTTP client with retry logic,
rate limiting and concurrency control, used for Maven Central search
lookups. Only read-only ``GET`` requests returning JSON are needed.
"""

from __future__ import annotations

import time
import httpx
import random
import asyncio
from typing import Any, Dict, Mapping, Optional, cast

from pomkeeper.utils.logger import get_logger
from pomkeeper.__version__ import __version__
from pomkeeper.exceptions import NetworkError
from pomkeeper.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client with retries, rate limiting, and concurrency control.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Maximum number of retry attempts for transient failures.
        rate_limit_delay: Minimum delay (seconds) between requests.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of concurrent requests.
        max_rate_limit_retries: How many HTTP 429 responses to wait out
            before giving up.

    Example:
        >>> async with HTTPClient() as client:
        ...     data = await client.get_json(
        ...         "https://search.maven.org/solrsearch/select",
        ...         params={"q": 'g:"org.slf4j" AND a:"slf4j-api"', "wt": "json"},
        ...     )
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        rate_limit_delay: float = 0.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = 10,
        max_rate_limit_retries: int = 5,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.rate_limit_delay = rate_limit_delay
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency
        self.max_rate_limit_retries = max_rate_limit_retries

        self._client: Optional[httpx.AsyncClient] = None
        self._last_request_time: float = float("-inf")
        self._rate_limit_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "application/json",
                },
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _rate_limit(self) -> None:
        """Enforce a minimum delay between outgoing requests."""
        if self.rate_limit_delay <= 0:
            return

        async with self._rate_limit_lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time

            if elapsed < self.rate_limit_delay:
                delay = self.rate_limit_delay - elapsed
                self._last_request_time = now + delay
                await asyncio.sleep(delay)
            else:
                self._last_request_time = now

    async def _send(
        self,
        url: str,
        params: Optional[Mapping[str, Any]],
    ) -> httpx.Response:
        assert self._client is not None
        await self._rate_limit()
        async with self._semaphore:
            return await self._client.get(url, params=params)

    def _backoff(self, attempt: int) -> float:
        """Exponential delay with a little jitter."""
        return (2**attempt) + random.uniform(0.0, 0.3)

    async def _get_with_retry(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> httpx.Response:
        """Execute a GET request with retry and exponential backoff.

        Timeouts, connection errors and 5xx responses are retried. Other
        4xx responses fail immediately with :class:`NetworkError`; 429 is
        retried after ``Retry-After`` up to ``max_rate_limit_retries``.
        """
        await self._ensure_client()

        clean_url = url.strip().strip("\"'")
        attempts = self.max_retries + 1
        rate_limited = 0
        last_exc: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                response = await self._send(clean_url, params)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                last_exc = exc
                logger.warning(
                    "%s (%d/%d): %s",
                    "Request timeout" if isinstance(exc, httpx.TimeoutException) else "Network error",
                    attempt + 1,
                    attempts,
                    clean_url,
                )
            else:
                status = response.status_code

                if status == 429:
                    rate_limited += 1
                    if rate_limited > self.max_rate_limit_retries:
                        raise NetworkError(
                            f"Rate limit exceeded after {self.max_rate_limit_retries} retries",
                            url=clean_url,
                            status_code=429,
                        )
                    wait = _retry_after_seconds(response)
                    logger.warning(
                        "Rate limited by %s, retrying after %ds (%d/%d)",
                        clean_url,
                        wait,
                        rate_limited,
                        self.max_rate_limit_retries,
                    )
                    await asyncio.sleep(wait)
                    continue

                if status < 400:
                    return response

                error = NetworkError(
                    f"HTTP {status} error for {clean_url}",
                    url=clean_url,
                    status_code=status,
                    response_body=response.text,
                )
                if status < 500:
                    raise error

                last_exc = error
                logger.warning("Server error %d (%d/%d): %s", status, attempt + 1, attempts, clean_url)

            if attempt < self.max_retries:
                delay = self._backoff(attempt)
                logger.debug("Retrying in %.2fs", delay)
                await asyncio.sleep(delay)

        raise NetworkError(
            f"Request failed after {attempts} attempts: {clean_url}",
            url=clean_url,
        ) from last_exc

    async def get(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> httpx.Response:
        """Perform a GET request with retry logic."""
        return await self._get_with_retry(url, params)

    async def get_json(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Fetch a URL and parse the response as a JSON object.

        Raises:
            NetworkError: The request failed, or the body is not a JSON object.
        """
        response = await self.get(url, params=params)

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise NetworkError(
                f"Expected JSON object from {url}",
                url=url,
                response_body=response.text,
            )

        return cast(Dict[str, Any], data)


def _retry_after_seconds(response: httpx.Response) -> int:
    try:
        return max(0, int(response.headers.get("Retry-After", "1")))
    except ValueError:
        return 1
