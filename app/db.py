import logging
import os
from pathlib import Path
from typing import Optional

import certifi
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import GEOSPHERE

logger = logging.getLogger(__name__)

# Get the project root directory (where .env should be)
project_root = Path(__file__).parent.parent
env_path = project_root / ".env"

# Load .env file from project root
load_dotenv(dotenv_path=env_path)

MONGO_URI = os.getenv("MONGO_URI")
DB_NAME = os.getenv("DB_NAME", "loc8r")
LOCATIONS_COLLECTION = os.getenv("LOCATIONS_COLLECTION", "locations")

# 전역 클라이언트와 DB 핸들
_client: Optional[AsyncIOMotorClient] = None
db: Optional[AsyncIOMotorDatabase] = None


async def ensure_indexes(database: AsyncIOMotorDatabase) -> None:
    """The $geoNear search needs a 2dsphere index on ``coords``."""
    await database[LOCATIONS_COLLECTION].create_index([("coords", GEOSPHERE)])


async def connect(*args, **kwargs):
    """
    Connect to MongoDB and keep the client and database handle in module globals.

    A failed connection is logged and leaves ``db`` unset; requests then get a
    500 from the router dependency instead of the app refusing to start.
    """
    global _client, db
    if not MONGO_URI:
        logger.error(f"MONGO_URI is not set (looked for .env at {env_path}, exists={env_path.exists()})")
        raise ValueError(
            "MONGO_URI is not set in .env file. Please check:\n"
            "   1. Variable name is MONGO_URI (all uppercase)\n"
            "   2. No spaces around the = sign\n"
            "   3. .env file is in the project root directory"
        )

    try:
        # Atlas (mongodb+srv) needs the certifi CA bundle; a local mongod has no TLS.
        tls_options = {"tlsCAFile": certifi.where()} if MONGO_URI.startswith("mongodb+srv://") else {}
        _client = AsyncIOMotorClient(MONGO_URI, **tls_options)
        db = _client[DB_NAME]

        # 연결 테스트
        await db.command("ping")
        await ensure_indexes(db)
        logger.info(f"Connected to MongoDB database '{DB_NAME}'")
    except Exception as e:
        logger.error(f"MongoDB connection failed: {e}")
        _client = None
        db = None


def get_database() -> Optional[AsyncIOMotorDatabase]:
    return db


async def close():
    """MongoDB 연결 종료"""
    global _client, db
    if _client is not None:
        _client.close()
        _client = None
        db = None
        logger.info("MongoDB connection closed")
