from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from app.models.metadata.schemas import ParsedMetadata


class CacheDocument(BaseModel):
    """Internal representation of a cached extraction result.

    Stored under ``_id = key``; never returned from the API directly.
    """

    key: str
    url: str
    value: ParsedMetadata
    created_at: datetime
    expires_at: datetime
