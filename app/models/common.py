from __future__ import annotations

from pydantic import BaseModel

from app.models.metadata.schemas import MetadataRecord


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
    # Degraded record (all preview fields null) so clients can still save the link.
    record: MetadataRecord | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
