# shidduch/utils/mongo.py
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
import os
import logging
import certifi

logger = logging.getLogger("shidduch.db")

load_dotenv()

MONGODB_URI = os.getenv("MONGODB_URI")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME")

if not MONGODB_URI:
    raise RuntimeError("MONGODB_URI not set in .env")

if not MONGO_DB_NAME:
    raise RuntimeError("MONGO_DB_NAME not set in .env")

# tlsCAFile only matters for Atlas; local mongod ignores it when TLS is off
_tls_kwargs = {"tlsCAFile": certifi.where()} if MONGODB_URI.startswith("mongodb+srv") else {}

client = AsyncIOMotorClient(MONGODB_URI, **_tls_kwargs)
db = client[MONGO_DB_NAME]

# Collection names (one per table of the hosted schema)
CHILD_PROFILES = "child_profiles"
RESUME_LIBRARY = "resume_library"
AI_MATCH_RESULTS = "ai_match_results"
AI_PROFILES = "ai_profiles"
NOTES = "notes"


def get_db():
    """FastAPI dependency; overridden in tests."""
    return db


async def verify_mongo_connection():
    try:
        collections = await db.list_collection_names()
        logger.info("mongo_connected", extra={"db": MONGO_DB_NAME, "collections": len(collections)})
        await ensure_indexes()
    except Exception:
        logger.exception("mongo_connection_failed")
        raise


async def ensure_indexes() -> None:
    """Owner-first compound indexes. Safe to call multiple times."""
    try:
        await db[CHILD_PROFILES].create_index([("user_id", 1), ("created_at", -1)])
        await db[RESUME_LIBRARY].create_index([("user_id", 1), ("uploaded_for", 1), ("created_at", -1)])
        await db[AI_MATCH_RESULTS].create_index([("parent_id", 1), ("created_at", -1)])
        await db[AI_MATCH_RESULTS].create_index("search_id")
        await db[AI_PROFILES].create_index([("parent_id", 1), ("created_at", -1)])
        await db[NOTES].create_index([("user_id", 1), ("resume_id", 1), ("created_at", -1)])
    except Exception as e:  # don't fail app startup if index creation fails
        logger.warning("index_creation_failed", extra={"error": str(e)})
