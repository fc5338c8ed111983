"""
MongoDB connection manager for the marketplace backend.

One Motor client per process, created lazily on first use and reused by
every route. Credentials come from environment variables.

Collections:
    users      auth identities (bcrypt hash + user_metadata)
    sessions   opaque access tokens (normal + password-recovery)
    profiles   public profile rows (visitors, stands, admins)
    cars       vehicle listings
    leads      customer contact requests
"""

import logging
import os

import certifi
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

# Load .env from project root
load_dotenv()

logger = logging.getLogger("database")
logger.setLevel(logging.INFO)

# ────────────────────────────────────────────
# Singleton holder
# ────────────────────────────────────────────
_mongo_client: AsyncIOMotorClient | None = None


def get_mongo_client() -> AsyncIOMotorClient:
    """Return the singleton Motor client, creating it on first call."""
    global _mongo_client
    if _mongo_client is None:
        uri = os.getenv("MONGO_URI")
        if not uri:
            raise RuntimeError("MONGO_URI is not set in environment variables.")
        _mongo_client = AsyncIOMotorClient(
            uri,
            serverSelectionTimeoutMS=30000,
            connectTimeoutMS=30000,
            socketTimeoutMS=60000,
            tlsCAFile=certifi.where(),        # fix SSL on some Python builds
        )
    return _mongo_client


def get_mongo_db():
    """Return the default MongoDB database handle."""
    db_name = os.getenv("MONGO_DB_NAME", "facilitador_car")
    return get_mongo_client()[db_name]


async def ping_mongo() -> bool:
    """Return True if MongoDB responds to a ping."""
    try:
        result = await get_mongo_client().admin.command("ping")
        return result.get("ok") == 1.0
    except Exception as exc:
        logger.warning("ping_mongo failed: %s", exc)
        return False


async def ensure_indexes() -> None:
    """Create the unique indexes the auth and catalog lookups rely on."""
    db = get_mongo_db()
    await db.users.create_index("email", unique=True)
    await db.users.create_index("id", unique=True)
    await db.sessions.create_index("access_token", unique=True)
    await db.profiles.create_index("id", unique=True)
    await db.cars.create_index("id", unique=True)
    await db.cars.create_index("subdomain", sparse=True)
    await db.leads.create_index("id", unique=True)


# ════════════════════════════════════════════
# Cleanup
# ════════════════════════════════════════════

async def close_connections():
    """Gracefully close the database connection."""
    global _mongo_client

    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
