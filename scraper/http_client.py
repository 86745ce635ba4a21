"""HTTP utilities for fetching pages to scan for media."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

import httpx

from .config import ScraperConfig

LOGGER = logging.getLogger(__name__)


class FetchErrorKind(str, Enum):
    NETWORK = "network"
    TIMEOUT = "timeout"
    STATUS = "status"


class HttpFetchError(RuntimeError):
    """Raised when a page cannot be retrieved; callers skip the URL."""

    def __init__(self, url: str, kind: FetchErrorKind, message: str) -> None:
        super().__init__(f"{kind.value} error for {url}: {message}")
        self.url = url
        self.kind = kind


@dataclass(slots=True)
class FetchedPage:
    url: str
    html: str
    status_code: int


class HttpFetcher:
    """Async HTTP client with a hard per-request deadline."""

    def __init__(
        self,
        config: ScraperConfig,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._timeout = config.timeout.request_timeout
        self._transport = transport
        self._client = client or self._build_client()
        self._owns_client = client is None

    @property
    def timeout(self) -> float:
        return self._timeout

    def _build_client(self) -> httpx.AsyncClient:
        headers = {"User-Agent": self._config.user_agent}
        kwargs: dict[str, object] = {
            "timeout": self._timeout,
            "headers": headers,
            "follow_redirects": True,
        }
        if self._transport:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def fetch_html(self, url: str) -> FetchedPage:
        # httpx timeouts apply per phase; wait_for bounds the whole exchange
        try:
            response = await asyncio.wait_for(self._client.get(url), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise HttpFetchError(
                url, FetchErrorKind.TIMEOUT, f"no response within {self._timeout:.1f}s"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise HttpFetchError(url, FetchErrorKind.NETWORK, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise HttpFetchError(url, FetchErrorKind.STATUS, f"unexpected status {response.status_code}")

        return FetchedPage(url=url, html=response.text, status_code=response.status_code)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, *_exc_info) -> None:
        await self.aclose()
