import logging
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.errors import OperationFailure

import config

logger = logging.getLogger(__name__)


def database_name_from_uri(uri: str) -> str:
    """Database named in the URI path, or the default product database"""
    location = uri.split("://")[-1]
    if "/" not in location:
        return config.DEFAULT_DATABASE_NAME
    name = location.split("/", 1)[1].split("?")[0]
    return name or config.DEFAULT_DATABASE_NAME


# Database connection objects with lazy initialization
class DB:
    client: Optional[AsyncIOMotorClient] = None
    db = None
    initialized = False

    @classmethod
    def initialize(cls, uri: Optional[str] = None, db_name: Optional[str] = None):
        """Initialize database connection"""
        if cls.initialized and cls.client is not None:
            return

        mongodb_uri = uri or config.MONGODB_URI
        database_name = db_name or database_name_from_uri(mongodb_uri)

        cls.client = AsyncIOMotorClient(mongodb_uri)
        cls.db = cls.client[database_name]
        cls.initialized = True
        logger.info(f"MongoDB client created for database '{database_name}'")

    @classmethod
    def close(cls):
        if cls.client is not None:
            cls.client.close()
        cls.client = None
        cls.db = None
        cls.initialized = False


# Singleton instance
db = DB()

PRODUCT_INDEXES = [
    IndexModel([("id", ASCENDING)], unique=True),
    IndexModel([("active", ASCENDING), ("category", ASCENDING)]),
    IndexModel([("brand", ASCENDING)]),
    IndexModel([("price", ASCENDING)]),
    IndexModel([("rating", DESCENDING)]),
    IndexModel([("tags", ASCENDING)]),
]


async def init_indexes():
    """
    Create the regular MongoDB indexes used by the local search backend and CRUD lookups.
    The Atlas Search index itself is managed with scripts/setup_atlas_index.py.
    """
    try:
        await db.db[config.PRODUCT_COLLECTION].create_indexes(PRODUCT_INDEXES)
        logger.info("Database indexes initialized successfully")
    except OperationFailure as e:
        # Usually missing privileges or an index that already exists with other options
        logger.warning(f"Error creating indexes: {e}")


async def get_db() -> Any:
    """Get the database instance, initializing if needed"""
    if not db.initialized:
        db.initialize()
    return db.db


async def get_product_collection():
    """Return the products collection"""
    if not db.initialized:
        db.initialize()
    return db.db[config.PRODUCT_COLLECTION]
