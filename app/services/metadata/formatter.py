from __future__ import annotations

from app.models.metadata.schemas import MetadataRecord, ParsedMetadata

# Tags used when no detector matches.
FETCHED_FALLBACK_TAG = "general"
UNFETCHED_FALLBACK_TAG = "untitled"


def format_record(url: str, parsed: ParsedMetadata, tag: str | None) -> MetadataRecord:
    """Build the API record; ``metadataFetched`` is derived here and only here."""
    fetched = parsed.has_content()
    if not tag:
        tag = FETCHED_FALLBACK_TAG if fetched else UNFETCHED_FALLBACK_TAG
    return MetadataRecord(
        url=parsed.url or url,
        title=parsed.title if fetched else None,
        description=parsed.description if fetched else None,
        image=parsed.image if fetched else None,
        tag=tag,
        metadata_fetched=fetched,
    )


def degraded_record(url: str, tag: str | None = None) -> MetadataRecord:
    """All-null record for a link whose metadata could not be fetched."""
    return format_record(url, ParsedMetadata(url=url), tag)
