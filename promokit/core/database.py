"""
MongoDB connections: async Motor client for the API, sync PyMongo for the worker.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database as PyMongoDatabase

from promokit.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def _client_kwargs(uri: str) -> dict:
    """TLS CA bundle for Atlas / ssl=true connection strings."""
    if "mongodb+srv://" in uri or "ssl=true" in uri.lower():
        return {"tlsCAFile": certifi.where()}
    return {}


class Database:
    """MongoDB database connection manager (API process)."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

    @classmethod
    async def connect(cls):
        """Connect to MongoDB."""
        cls.client = AsyncIOMotorClient(settings.MONGO_URI, **_client_kwargs(settings.MONGO_URI))
        cls.db = cls.client[settings.MONGO_DB_NAME]

        await cls._create_indexes()

        logger.info(f"Connected to MongoDB: {settings.MONGO_DB_NAME}")

    @classmethod
    async def disconnect(cls):
        """Disconnect from MongoDB."""
        if cls.client:
            cls.client.close()
            logger.info("Disconnected from MongoDB")

    @classmethod
    async def _create_indexes(cls):
        """Create indexes used by the job pipeline."""
        await cls.db.jobs.create_index("job_id", unique=True)
        await cls.db.jobs.create_index([("status", ASCENDING), ("updated_at", ASCENDING)])
        await cls.db.promo_items.create_index([("promo_id", ASCENDING), ("sort_order", ASCENDING)])
        await cls.db.assets.create_index([("promo_id", ASCENDING), ("type", ASCENDING), ("created_at", ASCENDING)])
        await cls.db.brand_kits.create_index("account_id", unique=True)

    @classmethod
    def get_collection(cls, name: str):
        """Get a collection by name."""
        return cls.db[name]


@lru_cache
def get_pymongo_client() -> MongoClient:
    return MongoClient(settings.MONGO_URI, **_client_kwargs(settings.MONGO_URI))


def get_pymongo_db() -> PyMongoDatabase:
    """Shared sync database handle for the worker process."""
    return get_pymongo_client()[settings.MONGO_DB_NAME]
