"""Reddit posts: page tags, then the public ``.json`` listing, then the URL path."""

from __future__ import annotations

import html
from typing import Any, Sequence
from urllib.parse import urlsplit, urlunsplit

from app.models.metadata.schemas import ParsedMetadata
from app.services.extractors.base import BaseExtractor, ChainedExtractor, Strategy
from app.utils.html_parser import meta_content, sanitize_text
from app.utils.platforms import Platform, is_platform
from app.utils.urls import path_segments, resolve_url, title_from_slug
from app.workers.fetcher import HttpFetcher

# Served to non-browser clients instead of the post itself.
GENERIC_LANDING_TITLE = "Reddit - The heart of the internet"


def json_endpoint(url: str) -> str:
    """``https://reddit.com/r/x/comments/1/t/?a=b`` -> ``https://reddit.com/r/x/comments/1/t.json``."""
    parts = urlsplit(url)
    path = parts.path.rstrip("/")
    return urlunsplit((parts.scheme, parts.netloc, f"{path}.json", "", ""))


def parse_listing(payload: Any, url: str) -> ParsedMetadata | None:
    """Turn the first post of a Reddit listing into preview metadata."""
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if not isinstance(payload, dict):
        return None
    children = (payload.get("data") or {}).get("children") or []
    if not children:
        return None
    post = children[0].get("data") or {}

    title = post.get("title")
    if title and post.get("subreddit"):
        title = f"r/{post['subreddit']}: {title}"

    description = post.get("selftext") or None
    if not description and post.get("author"):
        description = f"Posted by u/{post['author']}"
        if post.get("num_comments") is not None:
            description += f" • {post['num_comments']} comments"

    image = None
    images = (post.get("preview") or {}).get("images") or []
    source_url = ((images[0] if images else {}).get("source") or {}).get("url")
    if source_url:
        # preview URLs come HTML-escaped (&amp;)
        image = resolve_url(html.unescape(source_url), url)
    elif isinstance(post.get("thumbnail"), str) and post["thumbnail"].startswith("http"):
        image = resolve_url(post["thumbnail"], url)

    return ParsedMetadata(
        title=sanitize_text(title),
        description=sanitize_text(description),
        image=image,
        url=url,
    )


def metadata_from_path(url: str) -> ParsedMetadata | None:
    """Infer a title from ``/r/<subreddit>/comments/<id>/<slug>/``."""
    segments = path_segments(url)
    if "r" not in segments:
        return None
    index = segments.index("r")
    if index + 1 >= len(segments):
        return None
    subreddit = segments[index + 1]

    rest = segments[index + 2 :]
    slug_parts = rest[2:] if rest[:1] == ["comments"] else []
    title = title_from_slug(" ".join(slug_parts)) if slug_parts else f"r/{subreddit}"

    return ParsedMetadata(
        title=title,
        description=f"Post from r/{subreddit}",
        url=url,
    )


class RedditExtractor(ChainedExtractor):
    name = "reddit"

    def __init__(
        self, fetcher: HttpFetcher, default: BaseExtractor, api_timeout: float | None = None
    ) -> None:
        super().__init__(fetcher, default)
        self._api_timeout = api_timeout

    def can_handle(self, url: str) -> bool:
        return is_platform(url, Platform.REDDIT)

    def strategies(self) -> Sequence[tuple[str, Strategy]]:
        return [
            ("html", self.from_html),
            ("json api", self.from_json_api),
            ("url path", self.from_url),
        ]

    async def from_html(self, url: str) -> ParsedMetadata | None:
        soup, final_url = await self.fetch_soup(url)
        title = meta_content(soup, "og:title", "twitter:title")
        if not title and soup.title is not None:
            title = soup.title.get_text()
        title = sanitize_text(title)
        if title == GENERIC_LANDING_TITLE:
            # Bot wall: the rest of the page describes Reddit, not the post.
            return None

        image = meta_content(soup, "og:image", "twitter:image", "twitter:image:src")
        return ParsedMetadata(
            title=title,
            description=sanitize_text(
                meta_content(soup, "og:description", "twitter:description", "description")
            ),
            image=resolve_url(image, final_url) if image else None,
            url=url,
        )

    async def from_json_api(self, url: str) -> ParsedMetadata | None:
        payload = await self._fetcher.fetch_json(json_endpoint(url), timeout=self._api_timeout)
        return parse_listing(payload, url)

    async def from_url(self, url: str) -> ParsedMetadata | None:
        return metadata_from_path(url)
