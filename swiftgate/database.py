"""
Database connection utilities for MongoDB.
Provides both sync (PyMongo) and async (Motor) connections.
"""

from datetime import datetime
from typing import Any, Dict, Optional

import pymongo
from pymongo.errors import PyMongoError
from bson import ObjectId
from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from swiftgate.config import Settings
from swiftgate.logging_config import get_logger

logger = get_logger("database")

CUSTOMERS = "customers"
EMPLOYEES = "employees"
PAYMENTS = "payments"
TRANSACTIONS = "transactions"
SWIFTS = "swifts"

# Fields that never leave the server.
PRIVATE_FIELDS = ("passwordHash", "promotedTo")


# ======================
# Async MongoDB (Motor) - for FastAPI
# ======================

def create_client(settings: Settings) -> AsyncIOMotorClient:
    """Open the process-wide Motor client. Closed by the app lifespan."""
    return AsyncIOMotorClient(settings.mongo_uri)


def get_db(request: Request) -> AsyncIOMotorDatabase:
    """FastAPI dependency returning the database opened at startup."""
    return request.app.state.db


async def ensure_indexes(db: AsyncIOMotorDatabase):
    """Create the indexes the services rely on."""
    await db[CUSTOMERS].create_index("accountNumber", unique=True)
    await db[TRANSACTIONS].create_index("status")


# ======================
# Sync MongoDB (PyMongo) - for the seeding script
# ======================

def get_mongo_client(settings: Settings) -> Optional[pymongo.MongoClient]:
    """Get a sync MongoDB client, or None when the server is unreachable."""
    try:
        client = pymongo.MongoClient(settings.mongo_uri, serverSelectionTimeoutMS=2000)
        # Check connection
        client.server_info()
        return client
    except PyMongoError:
        logger.exception("MongoDB connection failed")
        return None


# ======================
# Document helpers
# ======================

def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Turn a client supplied id into an ObjectId, or None if it is not one."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _plain(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def serialize(document: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a stored document into a JSON-ready dict.

    ``_id`` becomes ``id``, ObjectIds become strings, datetimes become
    ISO-8601, and private fields are dropped.
    """
    result = {}
    for key, value in document.items():
        if key in PRIVATE_FIELDS:
            continue
        if key == "_id":
            key = "id"
        result[key] = _plain(value)
    return result
