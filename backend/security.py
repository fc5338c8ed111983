"""
Credential hashing, access-token issuance and the request dependencies that
turn a Bearer token into the calling user.

Tokens are opaque strings stored in the `sessions` collection:
    kind = "session"   normal sign-in, 7-day expiry
    kind = "recovery"  password-reset link, 1-hour expiry, only accepted by
                       the /auth/user endpoints
"""

import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from dotenv import load_dotenv
from fastapi import Depends, Header, HTTPException, status

from backend.database import get_mongo_db

load_dotenv()

logger = logging.getLogger("auth")
logger.setLevel(logging.INFO)

ADMIN_EMAIL = os.getenv("FC_ADMIN_EMAIL", "admin@facilitadorcar.pt").strip().lower()

SESSION_TTL = timedelta(days=7)
RECOVERY_TTL = timedelta(hours=1)

# Metadata keys a caller may never set on their own account
PROTECTED_METADATA = {"role", "status", "stand_name"}
SIGNUP_ROLES = {"visitor", "stand"}


# ────────────────────────────────────────────
# Passwords
# ────────────────────────────────────────────

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


# ────────────────────────────────────────────
# Users
# ────────────────────────────────────────────

def public_user(user: dict) -> dict:
    """Strip storage-only fields from a user document."""
    return {k: v for k, v in user.items() if k not in {"_id", "password_hash"}}


def is_admin(user: dict | None) -> bool:
    """Admin = the configured administrator email, or an admin role claim
    written by the seed script (sign-up can never grant it)."""
    if not user:
        return False
    if (user.get("email") or "").lower() == ADMIN_EMAIL:
        return True
    return (user.get("user_metadata") or {}).get("role") == "admin"


def user_role(user: dict) -> str:
    if is_admin(user):
        return "admin"
    role = (user.get("user_metadata") or {}).get("role")
    return role if role in SIGNUP_ROLES else "visitor"


def signup_metadata(data: dict[str, Any]) -> dict[str, Any]:
    """Normalise the registration metadata: only visitor/stand may be requested,
    stands start pending, everyone else is approved."""
    meta = dict(data)
    role = meta.get("role")
    if role not in SIGNUP_ROLES:
        role = "visitor"
    meta["role"] = role
    meta["status"] = "pending" if role == "stand" else "approved"
    if role != "stand":
        meta["stand_name"] = None
    return meta


# ────────────────────────────────────────────
# Sessions
# ────────────────────────────────────────────

def _as_utc(value: datetime) -> datetime:
    # Mongo hands back naive UTC datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def issue_session(db, user_id: str, kind: str = "session") -> dict:
    ttl = RECOVERY_TTL if kind == "recovery" else SESSION_TTL
    session = {
        "access_token": secrets.token_urlsafe(32),
        "user_id": user_id,
        "kind": kind,
        "expires_at": datetime.now(timezone.utc) + ttl,
    }
    await db.sessions.insert_one(dict(session))
    return session


async def revoke_session(db, token: str) -> None:
    await db.sessions.delete_one({"access_token": token})


def _bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return None


async def _resolve(authorization: str | None, allow_recovery: bool) -> tuple[dict, dict] | None:
    token = _bearer(authorization)
    if not token:
        return None

    db = get_mongo_db()
    session = await db.sessions.find_one({"access_token": token}, {"_id": 0})
    if not session:
        return None
    if _as_utc(session["expires_at"]) < datetime.now(timezone.utc):
        await revoke_session(db, token)
        return None
    if session.get("kind") == "recovery" and not allow_recovery:
        return None

    user = await db.users.find_one({"id": session["user_id"]}, {"_id": 0})
    if not user:
        return None
    return user, session


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )


# ════════════════════════════════════════════
# FastAPI dependencies
# ════════════════════════════════════════════

async def current_session(authorization: str | None = Header(default=None)) -> tuple[dict, dict]:
    """(user, session) for a normal or recovery token; 401 otherwise."""
    resolved = await _resolve(authorization, allow_recovery=True)
    if not resolved:
        raise _unauthenticated()
    return resolved


async def current_user(authorization: str | None = Header(default=None)) -> dict:
    """The calling user for a normal session token; 401 otherwise."""
    resolved = await _resolve(authorization, allow_recovery=False)
    if not resolved:
        raise _unauthenticated()
    return resolved[0]


async def optional_user(authorization: str | None = Header(default=None)) -> dict | None:
    resolved = await _resolve(authorization, allow_recovery=False)
    return resolved[0] if resolved else None


async def admin_user(user: dict = Depends(current_user)) -> dict:
    if not is_admin(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required.")
    return user
