"""oEmbed-backed extractors (YouTube, Spotify, Twitter/X)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence
from urllib.parse import urlencode

from app.models.metadata.schemas import ParsedMetadata
from app.services.extractors.base import BaseExtractor, ChainedExtractor, Strategy
from app.utils.html_parser import sanitize_text
from app.utils.platforms import Platform, is_platform
from app.utils.urls import resolve_url, strip_tracking_params
from app.workers.fetcher import HttpFetcher, UpstreamFetchError


@dataclass(frozen=True)
class OEmbedProvider:
    """Where and how to ask a provider for oEmbed data."""

    platform: Platform
    endpoint: str
    url_param: str = "url"
    format: str | None = None
    access_token: str | None = None

    def request_url(self, url: str) -> str:
        params = {self.url_param: url}
        if self.format:
            params["format"] = self.format
        if self.access_token:
            params["access_token"] = self.access_token
        separator = "&" if "?" in self.endpoint else "?"
        return f"{self.endpoint}{separator}{urlencode(params)}"


YOUTUBE = OEmbedProvider(Platform.YOUTUBE, "https://www.youtube.com/oembed", format="json")
SPOTIFY = OEmbedProvider(Platform.SPOTIFY, "https://open.spotify.com/oembed")
TWITTER = OEmbedProvider(Platform.TWITTER, "https://publish.twitter.com/oembed")


def describe_oembed(data: dict[str, Any]) -> str | None:
    """Use the provider's description, or build ``"By <author> on <provider>"``."""
    description = data.get("description")
    if isinstance(description, str) and description.strip():
        return description

    parts = []
    if data.get("author_name"):
        parts.append(f"By {data['author_name']}")
    if data.get("provider_name"):
        parts.append(f"on {data['provider_name']}")
    return " ".join(parts) or None


class OEmbedExtractor(ChainedExtractor):
    """Ask the platform's oEmbed endpoint, then fall back to scraping the page."""

    def __init__(
        self,
        provider: OEmbedProvider,
        fetcher: HttpFetcher,
        default: BaseExtractor,
        timeout: float | None = None,
    ) -> None:
        super().__init__(fetcher, default)
        self.provider = provider
        self.name = provider.platform.value
        self._timeout = timeout

    def can_handle(self, url: str) -> bool:
        return is_platform(url, self.provider.platform)

    def strategies(self) -> Sequence[tuple[str, Strategy]]:
        return [("oembed", self.from_oembed)]

    async def from_oembed(self, url: str) -> ParsedMetadata | None:
        target = strip_tracking_params(url)
        data = await self._fetcher.fetch_json(
            self.provider.request_url(target), timeout=self._timeout
        )
        if not isinstance(data, dict):
            raise UpstreamFetchError(f"Unexpected oEmbed payload for {url}")

        thumbnail = data.get("thumbnail_url")
        return ParsedMetadata(
            title=sanitize_text(data.get("title")),
            description=sanitize_text(describe_oembed(data)),
            image=resolve_url(thumbnail, target) if thumbnail else None,
            url=target,
        )
