from datetime import datetime, timezone

from fastapi import APIRouter

from app.api.metadata.routes import router as metadata_router
from app.models.common import HealthResponse

router = APIRouter()
router.include_router(metadata_router)


@router.get("/health", tags=["health"], response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc).isoformat())
