from typing import Optional

import structlog
from bson import ObjectId
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorGridFSBucket
from pymongo import ASCENDING, DESCENDING

from careerconnect.config import settings

logger = structlog.get_logger(__name__)

client = None
db = None

# GridFS buckets for uploaded binaries
BUCKETS = ("resumes", "profile_photos")
fs_buckets = {}


async def connect_to_mongo():
    global client, db, fs_buckets

    if not settings.MONGO_URI:
        raise ValueError("MONGO_URI environment variable is not set! Check your .env file.")

    client = AsyncIOMotorClient(settings.MONGO_URI)
    db = client[settings.DATABASE_NAME]
    fs_buckets = {name: AsyncIOMotorGridFSBucket(db, bucket_name=name) for name in BUCKETS}
    await client.admin.command("ping")
    await ensure_indexes()

    logger.info(
        "mongo_connected",
        database=settings.DATABASE_NAME,
        atlas="mongodb+srv" in settings.MONGO_URI,
    )


async def close_mongo_connection():
    if client:
        client.close()
        logger.info("mongo_closed")


async def ensure_indexes():
    """Create the storage level constraints the services rely on."""
    await db.users.create_index("email", unique=True)
    await db.jobs.create_index([("posted_by", ASCENDING), ("created_at", DESCENDING)])
    await db.applications.create_index(
        [("applicant_id.user", ASCENDING), ("job", ASCENDING)], unique=True
    )
    await db.applications.create_index("employer_id.user")
    # One connection per unordered pair of users
    await db.connections.create_index("pair", unique=True)
    await db.connections.create_index([("recipient", ASCENDING), ("status", ASCENDING)])
    await db.messages.create_index(
        [("sender", ASCENDING), ("receiver", ASCENDING), ("created_at", DESCENDING)]
    )
    await db.quiz_results.create_index([("user", ASCENDING), ("created_at", DESCENDING)])
    await db.notifications.create_index([("user", ASCENDING), ("created_at", DESCENDING)])


def get_fs_bucket(name: str = "resumes"):
    return fs_buckets.get(name)


def get_db():
    return db


def parse_object_id(value, label: str = "ID") -> ObjectId:
    """Turn a path/body id into an ObjectId or answer 400."""
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(str(value)):
        raise HTTPException(status_code=400, detail=f"Invalid {label}")
    return ObjectId(str(value))


def as_object_id(value) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if value and ObjectId.is_valid(str(value)):
        return ObjectId(str(value))
    return None
