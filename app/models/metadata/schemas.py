from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def _present(value: str | None) -> bool:
    return bool(value and value.strip())


class ParsedMetadata(BaseModel):
    """Preview data produced by an extractor.

    Every field is optional; ``None`` means "not found", never an error.
    ``image`` and ``url`` are absolute when present.
    """

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    image: str | None = None
    url: str | None = None

    def has_content(self) -> bool:
        """True if at least one of title / description / image is non-blank.

        This is the shared check that decides whether an extraction step is
        good enough to stop a fallback chain.
        """
        return _present(self.title) or _present(self.description) or _present(self.image)


class MetadataRecord(BaseModel):
    """API response shape for ``GET /api/metadata``.

    Matches the link record persisted by the mobile client, hence the
    camelCase ``metadataFetched`` on the wire.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str
    title: str | None = None
    description: str | None = None
    image: str | None = None
    tag: str | None = None
    metadata_fetched: bool = Field(default=False, alias="metadataFetched")
