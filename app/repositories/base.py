"""Abstract base class for all MongoDB repositories.

Extending for a new collection:
    1. Add the collection name to ``CollectionNames``.
    2. Subclass ``BaseRepository``, set ``COLLECTION_NAME``, and override
       ``ensure_indexes()`` with the indexes your collection needs.
    3. Build the repository in the app lifespan (``main.py``).

MongoDB is optional for this service.  When the ``DatabaseManager`` is not
connected, ``from_db`` hands the repository ``None`` instead of a collection
and ``available()`` is false; subclasses must check it before every query.
"""

from __future__ import annotations

import logging
from abc import ABC
from typing import ClassVar, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection

from app.core.database import DatabaseManager

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseRepository")


class BaseRepository(ABC):
    """Base class that wires a repository to its Motor collection."""

    COLLECTION_NAME: ClassVar[str]

    def __init__(self, collection: AsyncIOMotorCollection | None) -> None:
        self._col = collection

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_db(cls: type[T], db: DatabaseManager) -> T:
        """Instantiate the repository using the ``DatabaseManager``.

        Usage::

            cache = MetadataCacheRepository.from_db(db)
        """
        if not db.is_connected:
            logger.info("%s running without a database.", cls.__name__)
            return cls(None)
        return cls(db.get_collection(cls.COLLECTION_NAME))

    def available(self) -> bool:
        return self._col is not None

    # ------------------------------------------------------------------
    # Index management (override in subclasses)
    # ------------------------------------------------------------------

    async def ensure_indexes(self) -> None:
        """Create collection indexes.  Called once at startup.

        The default is a no-op.  MongoDB skips indexes that already exist.
        """
