"""Map URLs to the platform families that have a dedicated extractor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable
from urllib.parse import urlsplit

from app.utils.urls import extract_hostname


class Platform(str, Enum):
    YOUTUBE = "youtube"
    SPOTIFY = "spotify"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    REDDIT = "reddit"
    FLIPKART = "flipkart"
    BLINKIT = "blinkit"
    SWIGGY = "swiggy"
    INSTAMART = "instamart"
    NETFLIX = "netflix"


def _swiggy_refinement(path: str) -> Platform | None:
    if "/instamart/" in path:
        return Platform.INSTAMART
    return None


@dataclass(frozen=True)
class PlatformRule:
    platform: Platform
    hosts: tuple[str, ...]
    # Optional path check that narrows the match to a more specific platform.
    refine: Callable[[str], Platform | None] | None = None


PLATFORM_RULES: tuple[PlatformRule, ...] = (
    PlatformRule(Platform.YOUTUBE, ("youtube.com", "youtu.be")),
    PlatformRule(Platform.SPOTIFY, ("spotify.com",)),
    PlatformRule(Platform.INSTAGRAM, ("instagram.com",)),
    PlatformRule(Platform.FACEBOOK, ("facebook.com", "fb.com", "fb.watch")),
    PlatformRule(Platform.TWITTER, ("twitter.com", "x.com")),
    PlatformRule(Platform.REDDIT, ("reddit.com", "redd.it")),
    PlatformRule(Platform.FLIPKART, ("flipkart.com",)),
    PlatformRule(Platform.BLINKIT, ("blinkit.com",)),
    PlatformRule(Platform.SWIGGY, ("swiggy.com",), refine=_swiggy_refinement),
    PlatformRule(Platform.NETFLIX, ("netflix.com",)),
)


def host_matches(hostname: str, pattern: str) -> bool:
    """True if *hostname* is *pattern* or one of its subdomains."""
    return hostname == pattern or hostname.endswith("." + pattern)


def detect_platform(url: str) -> Platform | None:
    """Return the platform serving *url*, or ``None`` for generic sites."""
    hostname = extract_hostname(url)
    if not hostname:
        return None

    for rule in PLATFORM_RULES:
        if any(host_matches(hostname, pattern) for pattern in rule.hosts):
            if rule.refine is not None:
                refined = rule.refine(urlsplit(url).path)
                if refined is not None:
                    return refined
            return rule.platform
    return None


def is_platform(url: str, *platforms: Platform) -> bool:
    return detect_platform(url) in platforms
