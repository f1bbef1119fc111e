from __future__ import annotations

from app.models.metadata.schemas import ParsedMetadata
from app.services.extractors.base import BaseExtractor
from app.utils.html_parser import parse_html
from app.workers.fetcher import HttpFetcher


class DefaultExtractor(BaseExtractor):
    """Fetch the page and run the generic heuristic parser.

    Handles every URL.  It is the last resort of all other extractors and the
    only one allowed to raise: fetch errors propagate as
    :class:`~app.workers.fetcher.UpstreamFetchError`.
    """

    name = "default"

    def __init__(self, fetcher: HttpFetcher) -> None:
        self._fetcher = fetcher

    def can_handle(self, url: str) -> bool:
        return True

    async def extract(self, url: str) -> ParsedMetadata:
        page = await self._fetcher.fetch_html(url)
        return parse_html(page.text, page.url)
