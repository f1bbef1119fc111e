"""Text transforms that strip social-platform boilerplate from OG tags.

Instagram and Facebook wrap the actual post text in engagement counters,
author names and dates.  Each function here takes and returns plain strings
(``None`` when nothing useful is left) so the patterns can be tested in
isolation from any HTML.
"""

from __future__ import annotations

import html
import re

_IG_TITLE = re.compile(r"^(?P<author>.+?)\s+on Instagram:\s*(?P<caption>.+)$", re.IGNORECASE | re.DOTALL)
_IG_PROFILE_SUFFIX = re.compile(r"\s*[•·|-]\s*Instagram photos and videos\s*$", re.IGNORECASE)
_ENGAGEMENT_PREFIX = re.compile(
    r"^\s*[\d.,]+\s*[KkMm]?\s+(?:likes?|reactions?|followers?)"
    r"(?:\s*,\s*[\d.,]+\s*[KkMm]?\s+(?:comments?|shares?|following|posts?))*"
    r"\s*[-–·•]\s*",
    re.IGNORECASE,
)
# "username on March 3: "Caption"" / "username: "Caption""
_AUTHOR_BEFORE_QUOTE = re.compile(r"^[^:\"“]+:\s*(?=[\"“])")
# "username on March 3, 2024: " / "username on 3 March 2024: "
_AUTHOR_ON_DATE = re.compile(r"^\S+\s+on\s+[^:]{3,40}?\d{4}\s*:\s*", re.IGNORECASE)
_FB_TITLE_SUFFIX = re.compile(r"\s*\|\s*Facebook\s*$", re.IGNORECASE)
_FB_GENERIC_TITLES = re.compile(r"^(?:facebook|log in or sign up.*|log into facebook.*)$", re.IGNORECASE)
_WRAPPING_QUOTES = re.compile(
    r"^(?:\"(?P<double>.*?)\"?|“(?P<curly>.*?)[”\"]?|'(?P<single>.*)')\.?$", re.DOTALL
)


def decode_entities(text: str | None) -> str | None:
    """Decode named and numeric HTML entities (``&amp;``, ``&#39;``, ``&#x1F600;``)."""
    if text is None:
        return None
    return html.unescape(text)


def _unquote(text: str) -> str:
    # Double quotes may be left open by truncated captions; single quotes must close.
    text = text.strip()
    match = _WRAPPING_QUOTES.match(text)
    if match is None:
        return text
    return next(group for group in match.groups() if group is not None).strip()


def _or_none(text: str | None) -> str | None:
    if text is None:
        return None
    text = " ".join(text.split())
    return text or None


def clean_instagram_title(raw: str | None) -> str | None:
    """``'farmhousehub on Instagram: "Let's live"'`` -> ``"Let's live"``."""
    if not raw:
        return None
    title = decode_entities(raw).strip()

    match = _IG_TITLE.match(title)
    if match:
        title = match.group("caption")
    title = _IG_PROFILE_SUFFIX.sub("", title)
    title = _unquote(title)

    if title.lower() == "instagram":
        return None
    return _or_none(title)


def clean_instagram_description(raw: str | None) -> str | None:
    """``'2,740 likes, 138 comments - user on March 3, 2024: "Caption"'`` -> ``"Caption"``."""
    if not raw:
        return None
    description = decode_entities(raw).strip()

    stripped = _ENGAGEMENT_PREFIX.sub("", description, count=1)
    if stripped != description:
        description, quoted = _AUTHOR_BEFORE_QUOTE.subn("", stripped, count=1)
        if not quoted:
            description = _AUTHOR_ON_DATE.sub("", stripped, count=1)
    description = _unquote(description)
    return _or_none(description)


def clean_facebook_title(raw: str | None) -> str | None:
    """Drop the ``| Facebook`` suffix and generic login-wall titles."""
    if not raw:
        return None
    title = _FB_TITLE_SUFFIX.sub("", decode_entities(raw).strip())
    if _FB_GENERIC_TITLES.match(title):
        return None
    return _or_none(_unquote(title))


def clean_facebook_description(raw: str | None) -> str | None:
    """Drop leading engagement counters such as ``1.2K likes, 30 comments - ``."""
    if not raw:
        return None
    description = decode_entities(raw).strip()
    description = _ENGAGEMENT_PREFIX.sub("", description, count=1)
    return _or_none(_unquote(description))
