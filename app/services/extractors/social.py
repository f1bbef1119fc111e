"""Instagram and Facebook: scrape OG tags, clean the captions, else read the URL."""

from __future__ import annotations

from typing import Sequence

from app.models.metadata.schemas import ParsedMetadata
from app.services.extractors.base import ChainedExtractor, Strategy
from app.services.extractors.captions import (
    clean_facebook_description,
    clean_facebook_title,
    clean_instagram_description,
    clean_instagram_title,
    decode_entities,
)
from app.utils.html_parser import meta_content
from app.utils.platforms import Platform, is_platform
from app.utils.urls import path_segments, resolve_url, title_from_slug

INSTAGRAM_RESERVED_PATHS = frozenset({"explore", "accounts", "direct", "about", "developer"})


def instagram_metadata_from_path(url: str) -> ParsedMetadata | None:
    segments = path_segments(url)
    if not segments:
        return None

    kind = segments[0].lower()
    if kind == "p" and len(segments) > 1:
        title = "Instagram Post"
    elif kind in ("reel", "reels") and len(segments) > 1:
        title = "Instagram Reel"
    elif kind == "tv" and len(segments) > 1:
        title = "Instagram Video"
    elif kind == "stories" and len(segments) > 1:
        title = f"Story by @{segments[1]}"
    elif kind not in INSTAGRAM_RESERVED_PATHS:
        title = f"@{segments[0]}"
    else:
        return None
    return ParsedMetadata(title=title, url=url)


def facebook_metadata_from_path(url: str) -> ParsedMetadata | None:
    segments = path_segments(url)
    if not segments:
        return None

    first = segments[0].lower()
    if first == "pages" and len(segments) > 1:
        title = "Facebook Page"
    elif first == "groups" and len(segments) > 1:
        title = "Facebook Group"
    elif first == "events" and len(segments) > 1:
        title = "Facebook Event"
    elif first in ("watch", "reel", "videos"):
        title = "Facebook Video"
    elif len(segments) >= 2 and segments[1].lower() in ("posts", "videos", "photos"):
        title = f"Facebook Post by {title_from_slug(segments[0])}"
    elif first in ("share", "story.php", "permalink.php", "photo.php", "photo"):
        title = "Facebook Post"
    else:
        title = title_from_slug(segments[0])
    return ParsedMetadata(title=title or None, url=url)


class InstagramExtractor(ChainedExtractor):
    name = "instagram"

    def can_handle(self, url: str) -> bool:
        return is_platform(url, Platform.INSTAGRAM)

    def strategies(self) -> Sequence[tuple[str, Strategy]]:
        return [("html", self.from_html), ("url path", self.from_url)]

    async def from_html(self, url: str) -> ParsedMetadata | None:
        soup, final_url = await self.fetch_soup(url)
        image = decode_entities(meta_content(soup, "og:image"))
        return ParsedMetadata(
            title=clean_instagram_title(meta_content(soup, "og:title")),
            description=clean_instagram_description(meta_content(soup, "og:description")),
            image=resolve_url(image, final_url) if image else None,
            url=url,
        )

    async def from_url(self, url: str) -> ParsedMetadata | None:
        return instagram_metadata_from_path(url)


class FacebookExtractor(ChainedExtractor):
    name = "facebook"

    def can_handle(self, url: str) -> bool:
        return is_platform(url, Platform.FACEBOOK)

    def strategies(self) -> Sequence[tuple[str, Strategy]]:
        return [("html", self.from_html), ("url path", self.from_url)]

    async def from_html(self, url: str) -> ParsedMetadata | None:
        soup, final_url = await self.fetch_soup(url)
        title = meta_content(soup, "og:title")
        if not title and soup.title is not None:
            title = soup.title.get_text()
        image = decode_entities(meta_content(soup, "og:image"))
        return ParsedMetadata(
            title=clean_facebook_title(title),
            description=clean_facebook_description(
                meta_content(soup, "og:description", "description")
            ),
            image=resolve_url(image, final_url) if image else None,
            url=url,
        )

    async def from_url(self, url: str) -> ParsedMetadata | None:
        return facebook_metadata_from_path(url)
