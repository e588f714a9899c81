"""
Base API Client - Common HTTP request pattern with retry, rate limiting, and circuit breaker.

Shared by every upstream client (DexScreener, GeckoTerminal, token lists):
- Automatic retry on 429 (rate limit) with Retry-After support
- Retry on connection errors with exponential backoff
- Rate limiting (configurable interval between requests)
- Circuit breaker for fault tolerance
- Typed errors instead of silent ``None`` so adapters can report status
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import httpx
from typing_extensions import Self

from token_search.core.async_utils import CircuitBreaker
from token_search.core.exceptions import (
    ParseError,
    RateLimitError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
    get_retry_delay,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "token-search/1.0"


class BaseAPIClient:
    """
    Base class for upstream API clients.

    Provides common infrastructure:
    - httpx.AsyncClient management
    - Rate limiting with configurable interval
    - Retry on 429 / connection errors with exponential backoff
    - Circuit breaker for fault tolerance
    - Error mapping: 5xx/connection -> UpstreamUnavailableError,
      4xx -> UpstreamRejectedError, bad JSON -> ParseError

    Subclasses set `_service_name` and can override
    `_handle_expected_status()` for service-specific status codes (e.g. 404).

    Example:
        class MyClient(BaseAPIClient):
            _service_name = "MyAPI"

            def __init__(self):
                super().__init__(base_url="https://api.example.com", min_interval=0.1)

            async def get_item(self, item_id: str) -> dict:
                return await self._make_request(f"/items/{item_id}")
    """

    _service_name: str = "API"
    _MAX_RETRIES: int = 1

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        min_interval: float = 0.0,
        headers: dict[str, str] | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize base client.

        Args:
            base_url: Base URL for the API (optional, can pass full URLs)
            timeout: Request timeout in seconds
            min_interval: Minimum seconds between requests (rate limiting)
            headers: Default headers for all requests
            circuit_breaker: Optional circuit breaker for fault tolerance.
                             If None, a default one is created (threshold=10, recovery=60s).
            transport: Optional httpx transport (used by tests)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._min_interval = min_interval
        self._last_request_time = 0.0
        default_headers = {"User-Agent": DEFAULT_USER_AGENT, "Accept": "application/json"}
        default_headers.update(headers or {})
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers=default_headers,
            transport=transport,
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=10,
            recovery_timeout=60.0,
            name=self._service_name,
        )

    async def _rate_limit(self) -> None:
        """Enforce minimum interval between requests."""
        if self._min_interval <= 0:
            return
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_interval:
            await asyncio.sleep(self._min_interval - elapsed)
        self._last_request_time = time.time()

    def _build_url(self, url: str) -> str:
        """Build full URL from path or full URL."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    async def _make_request(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Make a GET request with retry on 429/connection errors and circuit breaker protection.

        Args:
            url: Full URL or path (appended to base_url)
            params: Query string parameters
            headers: Additional headers for this request

        Returns:
            Parsed JSON body

        Raises:
            RateLimitError: Still rate limited after retries, or breaker open
            UpstreamUnavailableError: Connection failure or HTTP 5xx
            UpstreamRejectedError: HTTP 4xx
            ParseError: Body is not valid JSON
        """
        full_url = self._build_url(url)

        for attempt in range(self._MAX_RETRIES + 1):
            await self._rate_limit()
            try:
                async with self._circuit_breaker:
                    response = await self._client.get(full_url, params=params, headers=headers or {})

                    expected = self._handle_expected_status(response, full_url)
                    if expected is not _CONTINUE:
                        return expected

                    if response.status_code == 429:
                        raise RateLimitError(
                            f"{self._service_name}: rate limited (429)",
                            retry_after=self._get_retry_after(response, attempt),
                            source=self._service_name,
                            status_code=429,
                        )
                    self._raise_for_status(response)
                    return self._parse_response(response)

            except RateLimitError as e:
                if attempt < self._MAX_RETRIES and e.context.status_code == 429:
                    delay = get_retry_delay(e, attempt)
                    logger.warning(
                        f"{self._service_name}: Rate limited (429), "
                        f"retry {attempt + 1}/{self._MAX_RETRIES} in {delay:.1f}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise
            except httpx.RequestError as e:
                if attempt < self._MAX_RETRIES:
                    delay = get_retry_delay(e, attempt)
                    logger.warning(f"{self._service_name} request error (attempt {attempt + 1}): {e!r}")
                    await asyncio.sleep(delay)
                    continue
                raise UpstreamUnavailableError(
                    f"request failed: {e!r}",
                    source=self._service_name,
                ) from e

        raise UpstreamUnavailableError("retries exhausted", source=self._service_name)

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Map HTTP error codes onto the typed upstream errors."""
        status = response.status_code
        if status >= 500:
            raise UpstreamUnavailableError(
                f"HTTP {status}: {response.reason_phrase}",
                source=self._service_name,
                status_code=status,
            )
        if status >= 400:
            raise UpstreamRejectedError(
                f"HTTP {status}: {response.reason_phrase}",
                source=self._service_name,
                status_code=status,
            )

    def _handle_expected_status(self, response: httpx.Response, url: str) -> Any:
        """
        Handle expected non-200 status codes that shouldn't be treated as errors.

        Override in subclasses for service-specific behavior.
        Return a value to short-circuit (e.g., [] for 404).
        Return the sentinel _CONTINUE to continue normal processing.

        Default: no special handling.
        """
        return _CONTINUE

    def _parse_response(self, response: httpx.Response) -> Any:
        """Parse response body as JSON."""
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError("Invalid JSON response", source=self._service_name) from e

    @staticmethod
    def _get_retry_after(response: httpx.Response, attempt: int) -> float:
        """Extract Retry-After from response headers, with exponential backoff fallback."""
        try:
            return float(response.headers.get("Retry-After", 2 ** attempt))
        except (ValueError, TypeError):
            return float(2 ** attempt)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


# Sentinel object to indicate "continue normal processing" from _handle_expected_status
_CONTINUE = object()
