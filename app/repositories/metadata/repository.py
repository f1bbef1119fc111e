from __future__ import annotations

import base64
import logging
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from app.core.collections import CollectionNames
from app.models.metadata.document import CacheDocument
from app.models.metadata.schemas import ParsedMetadata
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

CACHE_TTL = timedelta(hours=24)
KEY_PREFIX = "metadata:"


def cache_key(url: str) -> str:
    """Deterministic cache key for a normalized URL."""
    encoded = base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii")
    return KEY_PREFIX + encoded


def _aware(value: datetime) -> datetime:
    # BSON dates come back naive unless the client is tz_aware.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MetadataCacheRepository(BaseRepository):
    """Key-value cache of extraction results in the ``metadata_cache`` collection.

    Entries expire after ``CACHE_TTL`` through a TTL index on ``expires_at``.
    MongoDB only purges expired documents about once a minute, so ``get``
    checks the expiry too.

    The cache never raises: database or (de)serialization failures are
    logged and behave like a miss (``get``) or a no-op (``set``).
    """

    COLLECTION_NAME = CollectionNames.METADATA_CACHE

    async def ensure_indexes(self) -> None:
        if not self.available():
            return
        try:
            await self._col.create_index("expires_at", expireAfterSeconds=0)
        except PyMongoError as exc:
            logger.warning("Could not create cache TTL index: %s", exc)

    async def get(self, key: str) -> ParsedMetadata | None:
        if not self.available():
            return None
        try:
            raw = await self._col.find_one({"_id": key})
        except PyMongoError as exc:
            logger.warning("Cache lookup failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None

        try:
            document = CacheDocument(key=raw.pop("_id"), **raw)
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            return None

        if _aware(document.expires_at) <= datetime.now(timezone.utc):
            return None
        return document.value

    async def set(
        self, key: str, url: str, value: ParsedMetadata, ttl: timedelta = CACHE_TTL
    ) -> None:
        if not self.available():
            return
        now = datetime.now(timezone.utc)
        try:
            document = CacheDocument(
                key=key, url=url, value=value, created_at=now, expires_at=now + ttl
            )
            payload = document.model_dump(exclude={"key"})
            await self._col.replace_one({"_id": key}, payload, upsert=True)
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning("Could not serialize cache entry %s: %s", key, exc)
        except PyMongoError as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)
