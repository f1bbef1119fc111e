"""Shopping and food-delivery pages (Flipkart, BlinkIt, Swiggy/Instamart)."""

from __future__ import annotations

import re
from typing import Sequence
from urllib.parse import parse_qs, urlsplit

from app.models.metadata.schemas import ParsedMetadata
from app.services.extractors.base import ChainedExtractor, Strategy, merge_metadata
from app.utils.html_parser import sanitize_text
from app.utils.platforms import Platform, detect_platform, is_platform
from app.utils.urls import path_segments, title_from_slug

PRODUCT_TITLE_SELECTORS = ('h1[class*="product"]', 'h1[class*="Product"]', "h1")
PRODUCT_IMAGE_SELECTORS = ('img[class*="product"]', 'img[alt*="product"]')
SWIGGY_IMAGE_SELECTORS = ('img[class*="image"]', 'img[alt*="restaurant"]')

# Restaurant slugs end in a numeric id or a ``rest<id>`` token.
_RESTAURANT_ID = re.compile(r"(?:[-_]?rest\d+|[-_]\d+)$", re.IGNORECASE)


def flipkart_metadata_from_query(url: str) -> ParsedMetadata | None:
    """Shared Flipkart links carry the product name in ``?text=``."""
    try:
        query = parse_qs(urlsplit(url).query)
    except ValueError:
        return None
    title = sanitize_text((query.get("text") or [None])[0])
    if not title:
        return None
    return ParsedMetadata(title=title, url=url)


def blinkit_metadata_from_path(url: str) -> ParsedMetadata | None:
    """``/prn/<product-name>/prid/<id>`` -> product name."""
    segments = path_segments(url)
    if "prn" not in segments:
        return None
    index = segments.index("prn")
    if index + 1 >= len(segments):
        return None
    return ParsedMetadata(title=title_from_slug(segments[index + 1]) or None, url=url)


def instamart_metadata_from_path(url: str) -> ParsedMetadata | None:
    if "item" not in path_segments(url):
        return None
    return ParsedMetadata(title="Instamart Item", url=url)


def restaurant_metadata_from_path(url: str) -> ParsedMetadata | None:
    """Restaurant name from ``/restaurants/<slug>-<id>`` or ``/city/<city>/<slug>``."""
    segments = path_segments(url)
    slug = None
    if len(segments) >= 2 and segments[0] in ("restaurants", "restaurant"):
        slug = segments[1]
    elif len(segments) >= 3 and segments[0] == "city":
        slug = segments[2]
    if not slug:
        return None

    title = title_from_slug(_RESTAURANT_ID.sub("", slug))
    if not title:
        return None
    return ParsedMetadata(title=title, description="Restaurant on Swiggy", url=url)


class FlipkartExtractor(ChainedExtractor):
    name = "flipkart"

    def can_handle(self, url: str) -> bool:
        return is_platform(url, Platform.FLIPKART)

    def strategies(self) -> Sequence[tuple[str, Strategy]]:
        return [("html", self.from_html), ("text parameter", self.from_query)]

    async def from_html(self, url: str) -> ParsedMetadata | None:
        soup, final_url = await self.fetch_soup(url)
        metadata = self.og_metadata(
            soup,
            final_url,
            title_selectors=PRODUCT_TITLE_SELECTORS,
            image_selectors=PRODUCT_IMAGE_SELECTORS,
        )
        return metadata.model_copy(update={"url": url})

    async def from_query(self, url: str) -> ParsedMetadata | None:
        return flipkart_metadata_from_query(url)


class BlinkitExtractor(ChainedExtractor):
    name = "blinkit"

    def can_handle(self, url: str) -> bool:
        return is_platform(url, Platform.BLINKIT)

    def strategies(self) -> Sequence[tuple[str, Strategy]]:
        return [("html", self.from_html), ("url path", self.from_url)]

    async def from_html(self, url: str) -> ParsedMetadata | None:
        soup, final_url = await self.fetch_soup(url)
        metadata = self.og_metadata(
            soup,
            final_url,
            title_selectors=PRODUCT_TITLE_SELECTORS,
            image_selectors=PRODUCT_IMAGE_SELECTORS,
        ).model_copy(update={"url": url})
        if not metadata.has_content():
            return None
        from_path = blinkit_metadata_from_path(url)
        return merge_metadata(metadata, from_path) if from_path else metadata

    async def from_url(self, url: str) -> ParsedMetadata | None:
        return blinkit_metadata_from_path(url)


class SwiggyExtractor(ChainedExtractor):
    """Serves both Swiggy restaurants and Instamart items."""

    name = "swiggy"

    def can_handle(self, url: str) -> bool:
        return is_platform(url, Platform.SWIGGY, Platform.INSTAMART)

    def strategies(self) -> Sequence[tuple[str, Strategy]]:
        return [("html", self.from_html), ("url path", self.from_url)]

    @staticmethod
    def _from_path(url: str) -> ParsedMetadata | None:
        if detect_platform(url) is Platform.INSTAMART:
            return instamart_metadata_from_path(url)
        return restaurant_metadata_from_path(url)

    async def from_html(self, url: str) -> ParsedMetadata | None:
        soup, final_url = await self.fetch_soup(url)
        metadata = self.og_metadata(
            soup, final_url, image_selectors=SWIGGY_IMAGE_SELECTORS
        ).model_copy(update={"url": url})
        if not metadata.has_content():
            return None
        from_path = self._from_path(url)
        if from_path is None:
            return metadata
        # URL-derived descriptions are placeholders; keep only the title.
        return merge_metadata(metadata, from_path.model_copy(update={"description": None}))

    async def from_url(self, url: str) -> ParsedMetadata | None:
        return self._from_path(url)
