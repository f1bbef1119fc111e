"""Async HTTP fetcher.

Responsible solely for retrieving page HTML and JSON API payloads.

Uses httpx.AsyncClient which is meant to be long-lived and reused.  One
``HttpFetcher`` is built at startup and shared by every extractor; see
``HttpFetcher.aclose`` for the shutdown hook.

Every request is bounded by a deadline.  There are no retries: a failed
fetch is reported to the caller, which falls through to its next strategy.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Upgrade-Insecure-Requests": "1",
}

JSON_HEADERS = {
    "User-Agent": BROWSER_HEADERS["User-Agent"],
    "Accept": "application/json,text/javascript,*/*;q=0.8",
    "Accept-Language": BROWSER_HEADERS["Accept-Language"],
}


class UpstreamFetchError(Exception):
    """Raised when the fetcher cannot retrieve a page or API payload."""


class HttpStatusError(UpstreamFetchError):
    """The upstream answered with a non-2xx status."""

    def __init__(self, status: int, url: str) -> None:
        super().__init__(f"HTTP request failed with status {status} for {url}")
        self.status = status
        self.url = url


class FetchTimeoutError(UpstreamFetchError):
    """The request did not complete before its deadline."""


class NetworkError(UpstreamFetchError):
    """Transport-level failure (DNS, connection refused, TLS, ...)."""


@dataclass(frozen=True)
class FetchedPage:
    """HTML body read from the final URL after redirects."""

    url: str
    text: str


class HttpFetcher:
    """Shared GET client with browser-like headers and per-call deadlines."""

    def __init__(
        self,
        timeout: float = 10.0,
        verify: bool = True,
        max_content_length: int = 2_000_000,
    ) -> None:
        self.timeout = timeout
        self._verify = verify
        self._max_content_length = max_content_length
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpFetcher:
        return cls(
            timeout=settings.http_timeout,
            verify=settings.http_verify_ssl,
            max_content_length=settings.http_max_content_length,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Return the shared AsyncClient.  Creates one if missing."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                verify=self._verify,
                headers=BROWSER_HEADERS,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the shared AsyncClient gracefully."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.info("HTTP client closed.")

    async def fetch_html(self, url: str, timeout: float | None = None) -> FetchedPage:
        """GET *url* and return its body together with the final URL.

        The body is streamed and reading stops after ``max_content_length``
        bytes, so oversized pages are truncated rather than held in memory.

        Raises:
            HttpStatusError: non-2xx response.
            FetchTimeoutError: the deadline elapsed; the request is cancelled.
            NetworkError: transport failure.
        """
        response, body = await self._get(
            url, BROWSER_HEADERS, timeout, limit=self._max_content_length
        )
        text = body.decode(response.encoding or "utf-8", errors="replace")
        return FetchedPage(url=str(response.url), text=text)

    async def fetch_json(self, url: str, timeout: float | None = None) -> Any:
        """GET *url* and decode the JSON body.

        Raises the same errors as :meth:`fetch_html`, plus a plain
        :class:`UpstreamFetchError` when the body is not valid JSON.
        """
        _, body = await self._get(url, JSON_HEADERS, timeout)
        try:
            return json.loads(body)
        except ValueError as exc:
            raise UpstreamFetchError(f"Invalid JSON payload from {url}") from exc

    async def _get(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float | None,
        limit: int | None = None,
    ) -> tuple[httpx.Response, bytes]:
        """Perform a single bounded GET and map failures to fetch errors."""
        deadline = timeout if timeout is not None else self.timeout
        try:
            response, body = await asyncio.wait_for(
                self._read(url, headers, limit), timeout=deadline
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise FetchTimeoutError(
                f"Request to {url} timed out after {deadline:g}s"
            ) from exc
        except httpx.InvalidURL as exc:
            raise NetworkError(f"Invalid URL '{url}': {exc}") from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Request error for '{url}': {exc}") from exc

        logger.debug("Fetched %s (%d) -> %s", url, response.status_code, response.url)
        return response, body

    async def _read(
        self, url: str, headers: dict[str, str], limit: int | None
    ) -> tuple[httpx.Response, bytes]:
        async with self.client.stream("GET", url, headers=headers) as response:
            if not response.is_success:
                raise HttpStatusError(response.status_code, url)
            body = bytearray()
            async for chunk in response.aiter_bytes():
                body.extend(chunk)
                if limit is not None and len(body) >= limit:
                    del body[limit:]
                    break
        return response, bytes(body)
