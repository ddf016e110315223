"""Shared HTTP client for registry lookups.

Wraps a pooled :class:`httpx.AsyncClient` with:

- A per-request timeout and the depup ``User-Agent``.
- Retry with exponential backoff on connection errors, timeouts, HTTP 429
  and undecodable bodies.
- Translation of failures into :class:`~depup.errors.RegistryError`.

Usage::

    async with HttpClient() as client:
        data = await client.get_json(url, "serde", "crates.io")
"""

import asyncio
from typing import Any

import httpx

from .config import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT, MAX_RETRIES, RETRY_BACKOFF_BASE, USER_AGENT
from .errors import InvalidResponse, NetworkError, PackageNotFound, RateLimitExceeded, RegistryError, RegistryTimeout
from .logging import get_logger

log = get_logger("depup.client")


class HttpClient:
    """Retrying HTTP client shared by every registry adapter.

    The client holds no state besides its connection pool, so one instance
    serves all concurrent lookups of a run.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT,
        max_retries: int = MAX_RETRIES,
        backoff_base: float = RETRY_BACKOFF_BASE,
        pool_size: int = DEFAULT_CONCURRENCY,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        limits = httpx.Limits(max_connections=pool_size, max_keepalive_connections=pool_size)
        self._client = httpx.AsyncClient(
            limits=limits,
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _delay(self, attempt: int) -> float:
        return self.backoff_base * (2**attempt)

    async def _backoff(self, url: str, attempt: int, reason: str) -> None:
        delay = self._delay(attempt)
        log.debug("http_retry", url=url, attempt=attempt + 1, delay=delay, reason=reason)
        await asyncio.sleep(delay)

    async def get(self, url: str, package: str = "", registry: str = "") -> httpx.Response:
        """GET ``url``, retrying transient failures.

        Args:
            url: Absolute URL to fetch
            package: Package name used in error messages
            registry: Registry display name used in error messages

        Returns:
            A successful response

        Raises:
            PackageNotFound: On HTTP 404, without retrying
            NetworkError: On any other error status, or when connection
                errors persist after every retry
            RateLimitExceeded: When HTTP 429 persists after every retry
            RegistryTimeout: When timeouts persist after every retry
        """
        last_error: RegistryError | None = None

        for attempt in range(self.max_retries + 1):
            try:
                response = await self._client.get(url)
            except httpx.TimeoutException:
                last_error = RegistryTimeout(package, registry)
                reason = "timeout"
            except httpx.TransportError as e:
                last_error = NetworkError(package, registry, str(e) or type(e).__name__)
                reason = "network_error"
            else:
                if response.status_code == 429:
                    last_error = RateLimitExceeded(package, registry)
                    reason = "rate_limited"
                elif response.status_code == 404:
                    raise PackageNotFound(package, registry)
                elif not response.is_success:
                    raise NetworkError(package, registry, f"HTTP {response.status_code}")
                else:
                    return response

            if attempt < self.max_retries:
                await self._backoff(url, attempt, reason)

        raise last_error

    async def get_text(self, url: str, package: str = "", registry: str = "") -> str:
        """GET ``url`` and decode the body as text."""
        last_error: RegistryError | None = None
        for attempt in range(self.max_retries + 1):
            response = await self.get(url, package, registry)
            try:
                return response.content.decode(response.encoding or "utf-8")
            except (UnicodeDecodeError, LookupError) as e:
                last_error = InvalidResponse(package, registry, f"failed to get text response: {e}")
            if attempt < self.max_retries:
                await self._backoff(url, attempt, "undecodable_text")
        raise last_error

    async def get_json(self, url: str, package: str = "", registry: str = "") -> Any:
        """GET ``url`` and decode the body as JSON."""
        last_error: RegistryError | None = None
        for attempt in range(self.max_retries + 1):
            response = await self.get(url, package, registry)
            try:
                return response.json()
            except ValueError as e:
                last_error = InvalidResponse(package, registry, f"failed to parse JSON: {e}")
            if attempt < self.max_retries:
                await self._backoff(url, attempt, "invalid_json")
        raise last_error
