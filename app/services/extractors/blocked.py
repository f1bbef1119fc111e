"""Platforms that block automated fetches (Netflix).

Scraping is still attempted, but the chain ends in a canned label instead of
the default extractor so a preview always has something to show.
"""

from __future__ import annotations

from typing import Sequence

from app.models.metadata.schemas import ParsedMetadata
from app.services.extractors.base import BaseExtractor, ChainedExtractor, Strategy
from app.utils.html_parser import parse_html
from app.utils.platforms import Platform, is_platform
from app.utils.urls import path_segments
from app.workers.fetcher import HttpFetcher

PLATFORM_DEFAULT_IMAGES: dict[Platform, str] = {
    Platform.NETFLIX: (
        "https://upload.wikimedia.org/wikipedia/commons/thumb/7/75/"
        "Netflix_icon.svg/1024px-Netflix_icon.svg.png"
    ),
}

_PATH_LABELS = {
    "title": "Title",
    "watch": "Video",
}


class BlockedExtractor(ChainedExtractor):
    def __init__(self, platform: Platform, fetcher: HttpFetcher, default: BaseExtractor) -> None:
        super().__init__(fetcher, default)
        self.platform = platform
        self.name = platform.value

    @property
    def display_name(self) -> str:
        return self.platform.value.capitalize()

    def can_handle(self, url: str) -> bool:
        return is_platform(url, self.platform)

    def strategies(self) -> Sequence[tuple[str, Strategy]]:
        return [("html", self.from_html), ("url path", self.from_url)]

    async def from_html(self, url: str) -> ParsedMetadata | None:
        page = await self._fetcher.fetch_html(url)
        metadata = parse_html(page.text, page.url)
        return metadata.model_copy(update={"url": metadata.url or url})

    async def from_url(self, url: str) -> ParsedMetadata | None:
        """``/title/<id>`` and ``/watch/<id>`` at least say what kind of page it is."""
        # drop locale prefixes such as /in/ or /gb/
        segments = [segment for segment in path_segments(url) if len(segment) != 2]
        for index, segment in enumerate(segments[:-1]):
            label = _PATH_LABELS.get(segment.lower())
            if label:
                return ParsedMetadata(
                    title=f"{self.display_name} {label} {segments[index + 1]}",
                    description=f"Content from {self.display_name}",
                    image=PLATFORM_DEFAULT_IMAGES.get(self.platform),
                    url=url,
                )
        return None

    async def fallback(self, url: str) -> ParsedMetadata:
        return ParsedMetadata(
            title=f"{self.display_name} Content",
            description=f"Content from {self.display_name}",
            image=PLATFORM_DEFAULT_IMAGES.get(self.platform),
            url=url,
        )
