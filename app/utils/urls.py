"""URL validation and manipulation helpers."""

from __future__ import annotations

import re
from urllib.parse import (
    parse_qsl,
    unquote,
    urlencode,
    urljoin,
    urlsplit,
    urlunsplit,
)

import httpx

ALLOWED_SCHEMES = ("http", "https")

TRACKING_PARAMS = frozenset({"fbclid", "gclid", "ref", "source"})

_SLUG_SEPARATORS = re.compile(r"[-_+]+")


class InvalidInputError(ValueError):
    """Raised when a submitted URL is missing or malformed."""


def normalize_url(raw: str | None) -> str:
    """Trim *raw* and make sure it is an absolute http(s) URL.

    The result is returned as-is otherwise, so normalizing twice is a no-op.
    """
    if raw is None or not isinstance(raw, str):
        raise InvalidInputError("URL is required and must be a string")

    url = raw.strip()
    if not url:
        raise InvalidInputError("URL cannot be empty")

    try:
        parts = urlsplit(url)
        parts.port  # raises on a non-numeric or out-of-range port
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL) as exc:
        raise InvalidInputError(f"Invalid URL format: {url}") from exc

    host = parts.hostname
    if (
        parts.scheme.lower() not in ALLOWED_SCHEMES
        or not host
        or any(ch.isspace() for ch in host)
    ):
        raise InvalidInputError(f"Invalid URL format: {url}")

    return url


def resolve_url(relative: str, base: str) -> str:
    """Resolve a possibly relative URL against *base*.

    Falls back to *relative* unchanged if resolution fails.
    """
    try:
        return urljoin(base, relative)
    except ValueError:
        return relative


def extract_hostname(url: str) -> str | None:
    """Return the lower-cased hostname of *url* without a leading ``www.``."""
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    hostname = hostname.lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def path_segments(url: str) -> list[str]:
    """Non-empty path segments of *url*."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return []
    return [segment for segment in path.split("/") if segment]


def strip_tracking_params(url: str) -> str:
    """Remove analytics/tracking query parameters such as ``utm_source``."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.query:
        return url

    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if not key.lower().startswith("utm_") and key.lower() not in TRACKING_PARAMS
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))


def title_from_slug(slug: str) -> str:
    """``"boat-aavante-bar_1600"`` -> ``"Boat Aavante Bar 1600"``."""
    words = _SLUG_SEPARATORS.sub(" ", unquote(slug)).split()
    return " ".join(word[:1].upper() + word[1:] for word in words)
