"""Extractor contract and the fallback-chain runner shared by platform extractors.

Adding a platform:
    1. Add a ``Platform`` member and hostname rule in ``app.utils.platforms``.
    2. Subclass ``ChainedExtractor``, implement ``can_handle`` and
       ``strategies()`` returning the ordered steps to try.
    3. Register an instance in ``build_registry``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, ClassVar, Sequence

from bs4 import BeautifulSoup

from app.models.metadata.schemas import ParsedMetadata
from app.utils.html_parser import element_text, meta_content, sanitize_text
from app.utils.urls import resolve_url
from app.workers.fetcher import HttpFetcher, UpstreamFetchError

logger = logging.getLogger(__name__)

Strategy = Callable[[str], Awaitable[ParsedMetadata | None]]


class BaseExtractor(ABC):
    """A metadata source for the URLs it claims with ``can_handle``."""

    name: ClassVar[str] = "base"

    @abstractmethod
    def can_handle(self, url: str) -> bool:
        """True if this extractor understands *url*."""

    @abstractmethod
    async def extract(self, url: str) -> ParsedMetadata:
        """Return preview metadata for *url*."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class ChainedExtractor(BaseExtractor):
    """Runs an ordered list of strategies until one yields usable metadata.

    A strategy returns ``ParsedMetadata`` or ``None``; fetch errors and
    unexpected exceptions are logged and the next strategy runs.  A result is
    accepted when ``ParsedMetadata.has_content()`` holds.  When every strategy
    comes up empty, :meth:`fallback` runs (the default extractor unless a
    subclass overrides it).  ``extract`` never raises.
    """

    def __init__(self, fetcher: HttpFetcher, default: BaseExtractor) -> None:
        self._fetcher = fetcher
        self._default = default

    @abstractmethod
    def strategies(self) -> Sequence[tuple[str, Strategy]]:
        """Ordered ``(label, coroutine function)`` pairs to try."""

    async def extract(self, url: str) -> ParsedMetadata:
        for label, strategy in self.strategies():
            try:
                result = await strategy(url)
            except UpstreamFetchError as exc:
                logger.info("%s: %s step failed for %s: %s", self.name, label, url, exc)
                continue
            except Exception:
                logger.exception("%s: %s step crashed for %s", self.name, label, url)
                continue

            if result is not None and result.has_content():
                logger.debug("%s: %s step succeeded for %s", self.name, label, url)
                return result
            logger.info("%s: %s step found nothing for %s", self.name, label, url)

        return await self.fallback(url)

    async def fallback(self, url: str) -> ParsedMetadata:
        try:
            return await self._default.extract(url)
        except UpstreamFetchError as exc:
            logger.warning("%s: default fallback failed for %s: %s", self.name, url, exc)
            return ParsedMetadata(url=url)

    # ------------------------------------------------------------------
    # Helpers shared by scraping strategies
    # ------------------------------------------------------------------

    async def fetch_soup(self, url: str) -> tuple[BeautifulSoup, str]:
        """Fetch *url* and return the parsed document with its final URL."""
        page = await self._fetcher.fetch_html(url)
        return BeautifulSoup(page.text, "html.parser"), page.url

    @staticmethod
    def og_metadata(
        soup: BeautifulSoup,
        url: str,
        *,
        title_selectors: Sequence[str] = ("h1",),
        image_selectors: Sequence[str] = (),
    ) -> ParsedMetadata:
        """Open Graph tags with a few page-specific selector fallbacks."""
        title = meta_content(soup, "og:title")
        for selector in title_selectors:
            if title:
                break
            title = element_text(soup.select_one(selector))

        description = meta_content(soup, "og:description", "description")

        image = meta_content(soup, "og:image")
        for selector in image_selectors:
            if image:
                break
            element = soup.select_one(selector)
            image = element.get("src") if element is not None else None

        return ParsedMetadata(
            title=sanitize_text(title),
            description=sanitize_text(description),
            image=resolve_url(image.strip(), url) if image else None,
            url=url,
        )


def merge_metadata(primary: ParsedMetadata, secondary: ParsedMetadata) -> ParsedMetadata:
    """Field-wise ``primary or secondary``, keeping the primary URL."""
    return ParsedMetadata(
        title=primary.title or secondary.title,
        description=primary.description or secondary.description,
        image=primary.image or secondary.image,
        url=primary.url or secondary.url,
    )
