from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.router import router
from app.core.config import settings
from app.core.database import DatabaseManager
from app.repositories.metadata.repository import MetadataCacheRepository
from app.services.extractors.registry import build_registry
from app.services.metadata.service import MetadataService
from app.workers.fetcher import HttpFetcher


def _configure_logging() -> None:
    """Configure the ``app`` logger namespace.

    ``logging.basicConfig`` is a no-op when the root logger already has
    handlers (uvicorn installs its own before the lifespan runs), so the
    ``app`` namespace gets its own handler with ``propagate = False``.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    )
    app_log = logging.getLogger("app")
    app_log.setLevel(level)
    if not app_log.handlers:
        app_log.addHandler(handler)
    app_log.propagate = False


_configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # ── Startup ──────────────────────────────────────────────────────
    db = DatabaseManager.from_settings(settings)
    await db.connect()
    fetcher = HttpFetcher.from_settings(settings)

    cache = MetadataCacheRepository.from_db(db)
    await cache.ensure_indexes()

    app.state.db = db
    app.state.fetcher = fetcher
    app.state.metadata_service = MetadataService(build_registry(fetcher, settings), cache)
    yield
    # ── Shutdown ─────────────────────────────────────────────────────
    await fetcher.aclose()
    await db.disconnect()


app = FastAPI(
    title="Link Preview",
    description="Async service that extracts link-preview metadata for URLs.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(router)

