"""Heuristic extraction of preview metadata from arbitrary HTML.

Each field is looked up through an ordered list of sources, Open Graph
first, then progressively weaker signals from the document itself:

- title:       og:title, <title>, first <h1>, meta[name=title], <h2>..<h6>
- description: og:description, meta[name=description], first meaningful
               paragraph, meta[name=keywords], a long <title>, a long
               aria-label in the main content
- image:       og:image, then the best non-logo <img> in the body

Parsing never raises; missing data is reported as ``None``.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from app.models.metadata.schemas import ParsedMetadata
from app.utils.urls import resolve_url

MIN_PARAGRAPH_LENGTH = 50
MIN_TITLE_AS_DESCRIPTION_LENGTH = 20
MIN_ARIA_LABEL_LENGTH = 30
MIN_IMAGE_DIMENSION = 200

NAV_KEYWORDS = re.compile(
    r"\b(?:home|about|contact|menu|navigation|nav|skip to|skip)\b", re.IGNORECASE
)
PARAGRAPH_SELECTORS = ("main p", "article p", "section p", "body > p")
ARIA_LABEL_SELECTORS = ("main [aria-label]", "article [aria-label]", "[role=main] [aria-label]")

LOGO_KEYWORDS = ("logo", "brand", "icon", "favicon")
LOGO_SRC_PATTERNS = ("/favicon", "icon.", "logo.", "brand.", ".ico", "apple-touch-icon")
CHROME_ANCESTORS = frozenset({"header", "footer", "nav"})

_WHITESPACE = re.compile(r"\s+")
_LEADING_INT = re.compile(r"^\s*(\d+)")


def sanitize_text(text: str | None) -> str | None:
    """Collapse runs of whitespace/newlines and trim; empty becomes ``None``."""
    if text is None:
        return None
    cleaned = _WHITESPACE.sub(" ", text).strip()
    return cleaned or None


def meta_content(soup: BeautifulSoup, *names: str) -> str | None:
    """First non-blank ``content`` of ``meta[property=name]`` / ``meta[name=name]``."""
    for name in names:
        for attr in ("property", "name"):
            tag = soup.find("meta", attrs={attr: name})
            if tag is None:
                continue
            content = tag.get("content")
            if content and content.strip():
                return content.strip()
    return None


def element_text(element: Tag | None) -> str | None:
    if element is None:
        return None
    return sanitize_text(element.get_text(" "))


def _first_text(soup: BeautifulSoup, name: str) -> str | None:
    for element in soup.find_all(name):
        text = element_text(element)
        if text:
            return text
    return None


def _page_title(soup: BeautifulSoup) -> str | None:
    return element_text(soup.find("title"))


def extract_title(soup: BeautifulSoup) -> str | None:
    title = (
        meta_content(soup, "og:title")
        or _page_title(soup)
        or element_text(soup.find("h1"))
        or meta_content(soup, "title")
    )
    if title:
        return title

    for level in range(2, 7):
        heading = _first_text(soup, f"h{level}")
        if heading:
            return heading
    return None


def _is_nav_text(text: str) -> bool:
    return NAV_KEYWORDS.search(text) is not None


def find_meaningful_paragraph(soup: BeautifulSoup) -> str | None:
    """First paragraph long enough to describe the page, preferring main content."""
    candidates: list[Tag] = []
    for selector in PARAGRAPH_SELECTORS:
        candidates.extend(soup.select(selector))
    candidates.extend(soup.find_all("p"))

    for paragraph in candidates:
        text = element_text(paragraph)
        if text and len(text) >= MIN_PARAGRAPH_LENGTH and not _is_nav_text(text):
            return text
    return None


def _aria_label(soup: BeautifulSoup) -> str | None:
    for selector in ARIA_LABEL_SELECTORS:
        for element in soup.select(selector):
            label = sanitize_text(element.get("aria-label"))
            if label and len(label) >= MIN_ARIA_LABEL_LENGTH:
                return label
    return None


def extract_description(soup: BeautifulSoup) -> str | None:
    description = (
        meta_content(soup, "og:description")
        or meta_content(soup, "description")
        or find_meaningful_paragraph(soup)
        or meta_content(soup, "keywords")
    )
    if description:
        return description

    title = _page_title(soup)
    if title and len(title) >= MIN_TITLE_AS_DESCRIPTION_LENGTH:
        return title

    return _aria_label(soup)


def _dimension(img: Tag, attr: str) -> int:
    match = _LEADING_INT.match(str(img.get(attr) or ""))
    return int(match.group(1)) if match else 0


def _attr_text(img: Tag, attr: str) -> str:
    value = img.get(attr) or ""
    if isinstance(value, list):  # bs4 returns multi-valued attributes (class) as lists
        value = " ".join(value)
    return value.lower()


def is_likely_logo(img: Tag) -> bool:
    """Heuristic: logos, icons and site chrome never make good preview images."""
    labels = (_attr_text(img, "class"), _attr_text(img, "id"), _attr_text(img, "alt"))
    if any(keyword in label for label in labels for keyword in LOGO_KEYWORDS):
        return True

    src = _attr_text(img, "src")
    if any(pattern in src for pattern in LOGO_SRC_PATTERNS):
        return True

    if any(parent.name in CHROME_ANCESTORS for parent in img.parents):
        return True

    width, height = _dimension(img, "width"), _dimension(img, "height")
    if width > 0 and height > 0 and (width < MIN_IMAGE_DIMENSION or height < MIN_IMAGE_DIMENSION):
        return True

    return False


def find_meaningful_image(soup: BeautifulSoup, base_url: str) -> str | None:
    """Largest non-logo body image; earlier images win ties and undeclared sizes."""
    root = soup.body or soup
    best: tuple[int, int, str] | None = None

    for index, img in enumerate(root.find_all("img")):
        if is_likely_logo(img):
            continue
        src = (img.get("src") or img.get("data-src") or "").strip()
        if not src:
            continue

        width, height = _dimension(img, "width"), _dimension(img, "height")
        if width > 0 and height > 0:
            score = width * height
        else:
            score = 10000 - index * 10

        # Strict comparison keeps the earliest image on equal scores.
        if best is None or score > best[0]:
            best = (score, index, src)

    if best is None:
        return None
    return resolve_url(best[2], base_url)


def extract_image(soup: BeautifulSoup, base_url: str) -> str | None:
    og_image = meta_content(soup, "og:image")
    if og_image:
        return resolve_url(og_image, base_url)
    return find_meaningful_image(soup, base_url)


def parse_html(html: str, base_url: str) -> ParsedMetadata:
    """Extract title, description, image and canonical URL from *html*."""
    soup = BeautifulSoup(html or "", "html.parser")

    og_url = meta_content(soup, "og:url")
    return ParsedMetadata(
        title=sanitize_text(extract_title(soup)),
        description=sanitize_text(extract_description(soup)),
        image=extract_image(soup, base_url),
        url=resolve_url(og_url, base_url) if og_url else None,
    )
