"""Database connectivity layer for the Phonebook service."""

from __future__ import annotations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

from phonebook.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Lazily establishes the MongoDB connection used by the repositories."""

    def __init__(self) -> None:
        self.mongodb: Optional[AsyncIOMotorClient] = None
        self.settings: Settings = default_settings

    async def initialize(self, config: Settings | None = None) -> None:
        if config is not None:
            self.settings = config
        logger.info("Initializing Phonebook database manager")
        self.mongodb = AsyncIOMotorClient(str(self.settings.MONGODB_URL))
        logger.info("Database manager initialized")

    async def close(self) -> None:
        logger.info("Closing database connections")
        if self.mongodb is not None:
            self.mongodb.close()
            self.mongodb = None

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self.mongodb is None:
            raise RuntimeError("MongoDB client is not initialized")
        return self.mongodb[self.settings.MONGODB_DATABASE]

    def collection(self, name: str) -> AsyncIOMotorCollection:
        return self.database[name]

    async def ensure_indexes(self) -> None:
        """Index the owner reference used by the per-user person listing."""

        await self.collection(self.settings.PERSONS_COLLECTION).create_index("user")
        logger.info("Ensured index on %s.user", self.settings.PERSONS_COLLECTION)


# Singleton instance used by the application lifespan
database_manager = DatabaseManager()
