from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from app.core.config import Settings
from app.services.extractors.base import BaseExtractor
from app.services.extractors.blocked import BlockedExtractor
from app.services.extractors.commerce import (
    BlinkitExtractor,
    FlipkartExtractor,
    SwiggyExtractor,
)
from app.services.extractors.default import DefaultExtractor
from app.services.extractors.oembed import SPOTIFY, TWITTER, YOUTUBE, OEmbedExtractor
from app.services.extractors.reddit import RedditExtractor
from app.services.extractors.social import FacebookExtractor, InstagramExtractor
from app.utils.platforms import Platform, detect_platform
from app.workers.fetcher import HttpFetcher

logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """Read-only platform -> extractor lookup, built once at startup."""

    def __init__(self, extractors: Mapping[Platform, BaseExtractor], default: BaseExtractor) -> None:
        self._extractors = MappingProxyType(dict(extractors))
        self.default = default

    def __len__(self) -> int:
        return len(self._extractors)

    def get(self, platform: Platform) -> BaseExtractor | None:
        return self._extractors.get(platform)

    def select(self, url: str) -> BaseExtractor:
        platform = detect_platform(url)
        if platform is None:
            return self.default

        extractor = self._extractors.get(platform)
        if extractor is None:
            return self.default
        if not extractor.can_handle(url):
            logger.warning("%r refused %s detected as %s", extractor, url, platform.value)
            return self.default
        return extractor


def build_registry(fetcher: HttpFetcher, settings: Settings) -> ExtractorRegistry:
    default = DefaultExtractor(fetcher)
    api_timeout = settings.http_api_timeout
    swiggy = SwiggyExtractor(fetcher, default)

    extractors: dict[Platform, BaseExtractor] = {
        Platform.YOUTUBE: OEmbedExtractor(YOUTUBE, fetcher, default, timeout=api_timeout),
        Platform.SPOTIFY: OEmbedExtractor(SPOTIFY, fetcher, default, timeout=api_timeout),
        Platform.TWITTER: OEmbedExtractor(TWITTER, fetcher, default, timeout=api_timeout),
        Platform.REDDIT: RedditExtractor(fetcher, default, api_timeout=api_timeout),
        Platform.INSTAGRAM: InstagramExtractor(fetcher, default),
        Platform.FACEBOOK: FacebookExtractor(fetcher, default),
        Platform.FLIPKART: FlipkartExtractor(fetcher, default),
        Platform.BLINKIT: BlinkitExtractor(fetcher, default),
        Platform.SWIGGY: swiggy,
        Platform.INSTAMART: swiggy,
        Platform.NETFLIX: BlockedExtractor(Platform.NETFLIX, fetcher, default),
    }
    logger.info("Registered %d platform extractors", len(extractors))
    return ExtractorRegistry(extractors, default)
