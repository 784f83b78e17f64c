from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from plan_api.config import settings, logger

client = AsyncIOMotorClient(settings.MONGO_URI, tz_aware=True)
db = client[settings.DATABASE_NAME]


def get_db() -> AsyncIOMotorDatabase:
    """FastAPI dependency returning the application database."""
    return db


async def ensure_indexes(database) -> None:
    # A plan code is unique per owner; inserts racing past the handler's
    # pre-check fail here with DuplicateKeyError.
    await database.plans.create_index(
        [("owner_id", ASCENDING), ("code", ASCENDING)],
        unique=True,
        name="owner_code_unique",
    )
    logger.info("Ensured indexes on %s.plans", database.name)
