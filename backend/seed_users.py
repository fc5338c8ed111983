"""
Seed the MongoDB `users` and `profiles` collections with demo accounts.

Creates:
  - One administrator (email = FC_ADMIN_EMAIL, role = admin)
  - One approved stand  (stand@demo.pt,   stand_name = "Stand Demo")
  - One pending stand   (pending@demo.pt, stand_name = "Stand Pendente")
  - One visitor         (cliente@demo.pt)

All users share the same demo password: demo@123

Run:
    python -m backend.seed_users
"""

import asyncio
import os
import uuid
from datetime import datetime, timezone

import certifi
from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

from backend.security import ADMIN_EMAIL, hash_password

load_dotenv()

DEMO_PASSWORD = "demo@123"

DEMO_ACCOUNTS = [
    {"email": ADMIN_EMAIL, "full_name": "Administrador", "role": "admin", "status": "approved", "stand_name": None},
    {"email": "stand@demo.pt", "full_name": "Stand Demo", "role": "stand", "status": "approved", "stand_name": "Stand Demo"},
    {"email": "pending@demo.pt", "full_name": "Stand Pendente", "role": "stand", "status": "pending", "stand_name": "Stand Pendente"},
    {"email": "cliente@demo.pt", "full_name": "Cliente Demo", "role": "visitor", "status": "approved", "stand_name": None},
]


def build_documents(accounts: list[dict], password: str) -> tuple[list[dict], list[dict]]:
    """Return (users, profiles) documents for the given demo accounts."""
    now = datetime.now(timezone.utc)
    password_hash = hash_password(password)
    users, profiles = [], []

    for acc in accounts:
        user_id = str(uuid.uuid4())
        users.append({
            "id": user_id,
            "email": acc["email"],
            "password_hash": password_hash,
            "user_metadata": {
                "full_name": acc["full_name"],
                "role": acc["role"],
                "status": acc["status"],
                "stand_name": acc["stand_name"],
            },
            "created_at": now,
            "last_sign_in": None,
        })
        profiles.append({
            "id": user_id,
            "full_name": acc["full_name"],
            "email": acc["email"],
            "role": acc["role"],
            "stand_name": acc["stand_name"],
            "status": acc["status"],
            "created_at": now,
        })
    return users, profiles


async def seed():
    uri = os.getenv("MONGO_URI")
    db_name = os.getenv("MONGO_DB_NAME", "facilitador_car")

    client = AsyncIOMotorClient(
        uri,
        serverSelectionTimeoutMS=30000,
        connectTimeoutMS=30000,
        socketTimeoutMS=60000,
        tlsCAFile=certifi.where(),
    )
    db = client[db_name]

    # ── Drop existing accounts for a clean seed ──
    for name in ("users", "profiles", "sessions"):
        await db[name].drop()
    print("[seed] Dropped users, profiles and sessions collections.")

    users, profiles = build_documents(DEMO_ACCOUNTS, DEMO_PASSWORD)

    # ── Insert ──
    await db.users.insert_many(users)
    await db.profiles.insert_many(profiles)
    print(f"[seed] Inserted {len(users)} users and profiles.")
    for acc in DEMO_ACCOUNTS:
        print(f"       - {acc['role']:<8} {acc['email']} ({acc['status']})")
    print(f"       - Shared password: {DEMO_PASSWORD}")

    # ── Unique indexes ──
    await db.users.create_index("email", unique=True)
    await db.profiles.create_index("id", unique=True)
    print("[seed] Created unique indexes.")

    client.close()
    print("[seed] Done.")


if __name__ == "__main__":
    asyncio.run(seed())
