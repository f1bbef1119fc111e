from __future__ import annotations

from app.workers.fetcher import FetchedPage


def page(html: str, url: str = "https://example.com/") -> FetchedPage:
    return FetchedPage(url=url, text=html)


def og_html(**tags: str) -> str:
    """Minimal document carrying the given ``og:*`` tags."""
    metas = "".join(
        f'<meta property="og:{name}" content="{value}">' for name, value in tags.items()
    )
    return f"<html><head>{metas}</head><body></body></html>"
