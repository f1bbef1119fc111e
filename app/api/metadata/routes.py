from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.models.common import ErrorResponse
from app.models.metadata.schemas import MetadataRecord
from app.services.metadata.service import MetadataService
from app.utils.urls import InvalidInputError
from app.workers.fetcher import FetchTimeoutError, UpstreamFetchError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/metadata", tags=["metadata"])


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


def _get_service(request: Request) -> MetadataService:
    """FastAPI dependency returning the service built in the app lifespan."""
    return request.app.state.metadata_service


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    # Omit unset top-level fields but keep the record's null preview fields.
    content = {
        key: value
        for key, value in body.model_dump(by_alias=True).items()
        if value is not None
    }
    return JSONResponse(status_code=status_code, content=content)


# ---------------------------------------------------------------------------
# GET /api/metadata
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=MetadataRecord,
    response_model_by_alias=True,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Link preview metadata for a URL",
)
async def get_metadata(
    url: str | None = None,
    service: MetadataService = Depends(_get_service),
) -> MetadataRecord | JSONResponse:
    """Extract title, description, image and tag for *url*.

    - **200** — record returned (``metadataFetched`` may still be false)
    - **400** — ``url`` missing or not an http(s) URL
    - **502** — the page could not be fetched; a degraded record is included
    - **504** — the page fetch timed out; a degraded record is included
    - **500** — unexpected failure
    """
    try:
        return await service.get_metadata(url)
    except InvalidInputError as exc:
        return _error(400, ErrorResponse(error="Invalid input", message=str(exc)))
    except FetchTimeoutError as exc:
        logger.warning("GET /api/metadata timed out for %s: %s", url, exc)
        return _error(
            504,
            ErrorResponse(
                error="Request timeout",
                message=str(exc),
                record=service.fallback_record(url.strip()),
            ),
        )
    except UpstreamFetchError as exc:
        logger.warning("GET /api/metadata fetch error for %s: %s", url, exc)
        return _error(
            502,
            ErrorResponse(
                error="Bad gateway",
                message=str(exc),
                record=service.fallback_record(url.strip()),
            ),
        )
    except Exception as exc:
        logger.exception("GET /api/metadata failed for %s", url)
        return _error(
            500,
            ErrorResponse(
                error="Internal server error",
                message=str(exc) if settings.debug else None,
            ),
        )
