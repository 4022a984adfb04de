"""
Upstream HTTP client
Performs calls to the fixed merchant API and hands every HTTP status back to the caller
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from gobiz_proxy.core.config import Settings, get_settings
from gobiz_proxy.core.errors import UpstreamTransportError
from gobiz_proxy.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class UpstreamResponse:
    """Status and decoded body of an upstream reply."""
    status: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "UpstreamResponse":
        """Decode the body as JSON when possible, falling back to raw text."""
        if not response.content:
            return cls(status=response.status_code, data="")
        try:
            data = response.json()
        except ValueError:
            data = response.text
        return cls(status=response.status_code, data=data)


class UpstreamClient:
    """Client for the upstream merchant API, used as an async context manager"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or get_settings()
        self.http_client: Optional[httpx.AsyncClient] = None
        self._transport = transport

    async def __aenter__(self):
        """Open the underlying HTTP client"""
        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.upstream_timeout),
            follow_redirects=True,
            max_redirects=5,
            transport=self._transport
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close the underlying HTTP client"""
        if self.http_client:
            await self.http_client.aclose()
            self.http_client = None

    def url_for(self, endpoint: str) -> str:
        return f"{self.settings.UPSTREAM_BASE}{endpoint}"

    async def request(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None
    ) -> UpstreamResponse:
        """
        Send one request to the upstream API

        Args:
            method: HTTP method (GET or POST)
            endpoint: Upstream path, appended to the configured base URL
            body: JSON-serializable request body
            headers: Complete upstream header mapping

        Returns:
            UpstreamResponse for any HTTP status, including 4xx and 5xx

        Raises:
            UpstreamTransportError: On timeout or network failure
        """
        if not self.http_client:
            raise RuntimeError("Upstream client not initialized. Use async context manager.")

        url = self.url_for(endpoint)
        started = time.perf_counter()

        try:
            # httpx timeouts apply per read; the deadline bounds the whole exchange
            response = await asyncio.wait_for(
                self.http_client.request(
                    method=method,
                    url=url,
                    json=body,
                    headers=headers
                ),
                timeout=self.settings.upstream_timeout
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error(
                "upstream_timeout",
                method=method,
                endpoint=endpoint,
                timeout_ms=self.settings.UPSTREAM_TIMEOUT_MS
            )
            raise UpstreamTransportError(
                f"timeout of {self.settings.UPSTREAM_TIMEOUT_MS}ms exceeded",
                endpoint=endpoint
            ) from e
        except httpx.TransportError as e:
            logger.error(
                "upstream_transport_error",
                method=method,
                endpoint=endpoint,
                error=str(e) or type(e).__name__
            )
            raise UpstreamTransportError(str(e) or type(e).__name__, endpoint=endpoint) from e

        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.info(
            "upstream_response",
            method=method,
            endpoint=endpoint,
            status=response.status_code,
            elapsed_ms=elapsed_ms,
            response_size=len(response.content)
        )

        return UpstreamResponse.from_httpx(response)
