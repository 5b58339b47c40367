"""MongoDB connection helpers for the analytics service.

Environment variables:
  - MONGODB_URI: your Atlas connection string
  - MONGODB_DB: database name (default: carevo)
"""
from __future__ import annotations
import os
import time
from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from pymongo import MongoClient
from pymongo.errors import ServerSelectionTimeoutError, ConnectionFailure
from dotenv import load_dotenv
import logging

load_dotenv()

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_connection_attempts = 0
_max_retries = 3
_retry_delay = 1  # seconds


def _db_name() -> str:
    return os.environ.get("MONGODB_DB", "carevo")


def get_db():
    """
    Get database connection with retry logic and connection validation
    """
    global _client, _connection_attempts

    # Check if existing client is still connected
    if _client is not None:
        try:
            _client.admin.command('ping')
            return _client[_db_name()]
        except Exception:
            logger.warning("Existing MongoDB connection is stale, reconnecting...")
            _client = None

    uri = os.environ.get("MONGODB_URI")
    if not uri:
        uri = "mongodb://localhost:27017"
        logger.info("Using local MongoDB at localhost:27017")

    for attempt in range(_max_retries):
        try:
            _connection_attempts = attempt + 1
            logger.info(f"Attempting MongoDB connection (attempt {_connection_attempts}/{_max_retries})...")

            _client = MongoClient(
                uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                socketTimeoutMS=10000,
                maxPoolSize=50,
                retryWrites=True
            )

            # Verify connection works
            _client.admin.command('ping')

            logger.info(f"Successfully connected to MongoDB database: {_db_name()}")
            return _client[_db_name()]

        except (ServerSelectionTimeoutError, ConnectionFailure) as e:
            logger.error(f"MongoDB connection attempt {_connection_attempts} failed: {str(e)}")
            _client = None

            if attempt < _max_retries - 1:
                wait_time = _retry_delay * (attempt + 1)
                logger.info(f"Retrying in {wait_time} seconds...")
                time.sleep(wait_time)
            else:
                logger.error(f"Failed to connect to MongoDB after {_max_retries} attempts")
                raise RuntimeError(
                    f"Failed to connect to MongoDB after {_max_retries} attempts. "
                    f"Please check your MONGODB_URI environment variable and network connection."
                ) from e

    raise RuntimeError("Failed to establish MongoDB connection")


def to_object_id(value: Any) -> Any:
    """Return an ObjectId for 24-hex strings, otherwise the value unchanged.

    Documents written by the Node services reference users and careers by
    ObjectId, but seeded/test data may use plain string ids.
    """
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def serialize_document(value: Any) -> Any:
    """Make a Mongo document JSON-safe (ObjectId -> str, datetime -> ISO)."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize_document(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_document(v) for v in value]
    return value


def ping_database() -> Dict[str, Any]:
    """Run the ping command against the configured database."""
    return get_db().command('ping')
