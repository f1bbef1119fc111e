from __future__ import annotations

import logging

from app.models.metadata.schemas import MetadataRecord, ParsedMetadata
from app.repositories.metadata.repository import MetadataCacheRepository, cache_key
from app.services.extractors.registry import ExtractorRegistry
from app.services.metadata.formatter import degraded_record, format_record
from app.services.tagging.detector import detect_tag
from app.utils.urls import normalize_url

logger = logging.getLogger(__name__)


class MetadataService:
    """Link-preview pipeline: normalize, cache lookup, extract, tag, format."""

    def __init__(self, registry: ExtractorRegistry, cache: MetadataCacheRepository) -> None:
        self._registry = registry
        self._cache = cache

    async def get_metadata(self, raw_url: str | None) -> MetadataRecord:
        """Return the preview record for *raw_url*.

        Raises:
            InvalidInputError: *raw_url* is missing or not an http(s) URL.
            UpstreamFetchError: the page could not be fetched and no
                platform extractor covered for it.
        """
        url = normalize_url(raw_url)
        parsed = await self.extract(url)
        tag = detect_tag(url, parsed)
        return format_record(url, parsed, tag)

    async def extract(self, url: str) -> ParsedMetadata:
        key = cache_key(url)
        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", url)
            return cached

        extractor = self._registry.select(url)
        logger.info("Extracting %s with %r", url, extractor)
        parsed = await extractor.extract(url)

        if parsed.has_content():
            await self._cache.set(key, url, parsed)
        return parsed

    @staticmethod
    def fallback_record(url: str) -> MetadataRecord:
        """Record returned alongside upstream errors so the link can still be saved."""
        return degraded_record(url, detect_tag(url))
