"""Create the locations indexes. Run from the project root: python -m scripts.create_indexes"""
import asyncio
import os

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

from app.db import DB_NAME, ensure_indexes

load_dotenv()
MONGO_URI = os.getenv("MONGO_URI")


async def main():
    client = AsyncIOMotorClient(MONGO_URI)
    db = client[DB_NAME]
    await ensure_indexes(db)

    print("Indexes created")
    client.close()


if __name__ == "__main__":
    asyncio.run(main())
