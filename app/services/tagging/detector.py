"""Pick a short tag for a link: a well-known app name, else a broad category."""

from __future__ import annotations

import re
from typing import Iterable

from app.models.metadata.schemas import ParsedMetadata
from app.utils.platforms import host_matches
from app.utils.urls import extract_hostname

# Apps and services people recognise by name.
POPULAR_HOSTNAMES: dict[str, str] = {
    # shopping
    "blinkit.com": "blinkit",
    "swiggy.com": "swiggy",
    "instamart.com": "instamart",
    "zepto.com": "zepto",
    "dealshare.com": "dealshare",
    "flipkart.com": "flipkart",
    "amazon.com": "amazon",
    "amazon.in": "amazon",
    "amazon.co.uk": "amazon",
    "myntra.com": "myntra",
    "ajio.com": "ajio",
    "nykaa.com": "nykaa",
    # video and entertainment
    "youtube.com": "youtube",
    "youtu.be": "youtube",
    "netflix.com": "netflix",
    "spotify.com": "spotify",
    "crunchyroll.com": "crunchyroll",
    "instagram.com": "instagram",
    # social
    "linkedin.com": "linkedin",
    "facebook.com": "facebook",
    "twitter.com": "twitter",
    "x.com": "twitter",
    "reddit.com": "reddit",
    # news
    "timesofindia.com": "timesofindia",
    "indiatoday.com": "indiatoday",
    "ndtv.com": "ndtv",
    "bbc.com": "bbc",
    "cnn.com": "cnn",
    "reuters.com": "reuters",
    "nytimes.com": "nytimes",
    "theguardian.com": "theguardian",
    # tech
    "github.com": "github",
    "stackoverflow.com": "stackoverflow",
    "medium.com": "medium",
    "dev.to": "devto",
    # google
    "news.google.com": "googlenews",
    "chrome.google.com": "chrome",
    "play.google.com": "playstore",
    "google.com": "google",
    "google.co.in": "google",
}

# Second-level labels that identify the brand on any TLD (``amazon.de``).
POPULAR_LABELS: dict[str, str] = {
    "blinkit": "blinkit",
    "swiggy": "swiggy",
    "instamart": "instamart",
    "zepto": "zepto",
    "dealshare": "dealshare",
    "flipkart": "flipkart",
    "amazon": "amazon",
    "myntra": "myntra",
    "ajio": "ajio",
    "nykaa": "nykaa",
    "youtube": "youtube",
    "netflix": "netflix",
    "spotify": "spotify",
    "crunchyroll": "crunchyroll",
    "instagram": "instagram",
    "linkedin": "linkedin",
    "facebook": "facebook",
    "twitter": "twitter",
    "reddit": "reddit",
    "github": "github",
    "stackoverflow": "stackoverflow",
    "medium": "medium",
}

CATEGORY_DOMAINS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("shopping", (
        "amazon.com", "amazon.in", "amazon.co.uk", "flipkart.com", "shopify.com",
        "etsy.com", "ebay.com", "alibaba.com", "aliexpress.com", "walmart.com",
        "target.com", "bestbuy.com", "macys.com", "nike.com", "adidas.com",
        "zara.com", "hm.com", "myntra.com", "ajio.com", "nykaa.com", "purplle.com",
    )),
    ("news", (
        "bbc.com", "bbc.co.uk", "cnn.com", "reuters.com", "nytimes.com",
        "theguardian.com", "washingtonpost.com", "wsj.com", "economist.com",
        "timesofindia.com", "indiatoday.com", "ndtv.com",
    )),
    ("social", (
        "facebook.com", "twitter.com", "x.com", "instagram.com", "linkedin.com",
        "pinterest.com", "reddit.com", "tiktok.com", "snapchat.com",
    )),
    ("video", (
        "youtube.com", "youtu.be", "vimeo.com", "dailymotion.com", "twitch.tv",
        "netflix.com", "hulu.com", "disneyplus.com", "primevideo.com",
    )),
    ("tech", (
        "github.com", "stackoverflow.com", "medium.com", "dev.to",
        "techcrunch.com", "theverge.com", "wired.com", "arstechnica.com",
    )),
)

CATEGORY_PATH_PATTERNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("shopping", (
        "/product/", "/products/", "/shop/", "/buy/", "/cart/", "/checkout/",
        "/store/", "/purchase/", "/item/", "/dp/", "/gp/product/",
    )),
    ("news", ("/news/", "/article/", "/story/", "/breaking/")),
    ("video", ("/watch", "/video/", "/v/", "/embed/")),
)

CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("shopping", (
        "buy", "purchase", "price", "cart", "shopping", "sale", "discount",
        "deal", "shop", "store", "add to cart", "checkout", "product",
        "shipping", "delivery",
    )),
    ("news", (
        "news", "breaking", "article", "report", "journalism", "headlines",
    )),
    ("video", ("video", "watch", "stream", "movie", "episode")),
    ("tech", (
        "technology", "tech", "software", "programming", "code", "developer",
        "api", "framework",
    )),
)


def _keyword_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(keyword) for keyword in keywords)
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


_KEYWORD_PATTERNS = tuple(
    (category, _keyword_pattern(keywords)) for category, keywords in CATEGORY_KEYWORDS
)


def hostname_tag(hostname: str) -> str | None:
    if hostname in POPULAR_HOSTNAMES:
        return POPULAR_HOSTNAMES[hostname]

    for pattern, tag in POPULAR_HOSTNAMES.items():
        if host_matches(hostname, pattern):
            return tag

    labels = hostname.split(".")
    if len(labels) >= 2:
        return POPULAR_LABELS.get(labels[-2])
    return None


def category_tag(url: str, hostname: str | None, text: str) -> str | None:
    if hostname:
        for category, domains in CATEGORY_DOMAINS:
            if any(host_matches(hostname, domain) for domain in domains):
                return category

    lowered = url.lower()
    for category, patterns in CATEGORY_PATH_PATTERNS:
        if any(pattern in lowered for pattern in patterns):
            return category

    if text:
        for category, pattern in _KEYWORD_PATTERNS:
            if pattern.search(text):
                return category
    return None


def detect_tag(url: str, metadata: ParsedMetadata | None = None) -> str | None:
    """Tag for *url*: a known app name, else a category, else ``None``."""
    if not url:
        return None

    hostname = extract_hostname(url)
    if hostname:
        tag = hostname_tag(hostname)
        if tag:
            return tag

    text = ""
    if metadata is not None:
        text = " ".join(part for part in (metadata.title, metadata.description) if part)
    return category_tag(url, hostname, text)
