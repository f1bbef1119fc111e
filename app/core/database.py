from __future__ import annotations

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import PyMongoError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.config import Settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """MongoDB connection manager backing the metadata cache.

    One instance is created in the app lifespan and shared by every request.
    The connection is optional: without a URI, or when the server never
    answers the startup ping, the manager stays disconnected and callers
    treat the cache as unavailable.

    Lifecycle::

        manager = DatabaseManager.from_settings(settings)
        await manager.connect()     # call once at startup
        ...
        await manager.disconnect()  # call once at shutdown
    """

    def __init__(
        self,
        uri: str | None,
        db_name: str,
        max_pool_size: int = 10,
        connect_attempts: int = 3,
        connect_timeout_ms: int = 2000,
    ) -> None:
        self._uri = uri
        self._db_name = db_name
        self._max_pool_size = max_pool_size
        self._connect_attempts = max(1, connect_attempts)
        self._connect_timeout_ms = connect_timeout_ms
        self._client: AsyncIOMotorClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> DatabaseManager:
        return cls(
            settings.mongo_uri,
            settings.mongo_db,
            max_pool_size=settings.mongo_max_pool_size,
            connect_attempts=settings.cache_connect_attempts,
            connect_timeout_ms=settings.cache_connect_timeout_ms,
        )

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> bool:
        """Open the Motor client and verify connectivity with a ping.

        The ping is retried with exponential backoff.  Returns ``False``
        (and leaves the manager disconnected) instead of raising when the
        backend is not configured or cannot be reached.
        """
        if not self._uri:
            logger.info("No MongoDB URI configured; metadata cache disabled.")
            return False

        self._client = AsyncIOMotorClient(
            self._uri,
            maxPoolSize=self._max_pool_size,
            serverSelectionTimeoutMS=self._connect_timeout_ms,
            connectTimeoutMS=self._connect_timeout_ms,
        )
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(PyMongoError),
                stop=stop_after_attempt(self._connect_attempts),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    await self._client.admin.command("ping")
        except PyMongoError as exc:
            logger.warning(
                "MongoDB unavailable after %d attempts (%s); metadata cache disabled.",
                self._connect_attempts,
                exc,
            )
            self._client.close()
            self._client = None
            return False

        logger.info("Connected to MongoDB database %r.", self._db_name)
        return True

    async def disconnect(self) -> None:
        """Close the Motor client and release all pooled connections."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Disconnected from MongoDB.")

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        """Return a Motor collection by name from the configured database."""
        if self._client is None:
            raise RuntimeError(
                "DatabaseManager is not connected. Call connect() first."
            )
        return self._client[self._db_name][name]
