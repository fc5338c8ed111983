"""
Authentication routes.

POST /auth/signup   — create an account (+ session), metadata from the form
POST /auth/token    — password grant, returns a session
POST /auth/logout   — revoke the calling token
GET  /auth/user     — the calling user (normal or recovery token)
PUT  /auth/user     — update password and/or metadata
POST /auth/recover  — issue a password-recovery link
"""

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status

from backend.database import get_mongo_db
from backend.models import (
    RecoverRequest,
    SessionOut,
    SignInRequest,
    SignUpRequest,
    UpdateUserRequest,
    UserOut,
)
from backend.security import (
    PROTECTED_METADATA,
    current_session,
    hash_password,
    issue_session,
    public_user,
    revoke_session,
    signup_metadata,
    verify_password,
)

logger = logging.getLogger("auth")

router = APIRouter(prefix="/auth", tags=["Authentication"])

INVALID_CREDENTIALS = "Invalid login credentials"


def _session_out(session: dict, user: dict) -> SessionOut:
    return SessionOut(
        access_token=session["access_token"],
        expires_at=session["expires_at"],
        user=UserOut(**public_user(user)),
    )


# ── POST /auth/signup ────────────────────────────────

@router.post("/signup", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
async def signup(req: SignUpRequest):
    """Register an email/password identity. Requested role is limited to
    visitor or stand; stands start pending approval."""
    db = get_mongo_db()
    if await db.users.find_one({"email": req.email}, {"_id": 1}):
        raise HTTPException(status_code=400, detail="User already registered")

    now = datetime.now(timezone.utc)
    user = {
        "id": str(uuid.uuid4()),
        "email": req.email,
        "password_hash": hash_password(req.password),
        "user_metadata": signup_metadata(req.data),
        "created_at": now,
        "last_sign_in": now,
    }
    await db.users.insert_one(dict(user))
    session = await issue_session(db, user["id"])
    logger.info("Registered %s as %s", req.email, user["user_metadata"]["role"])
    return _session_out(session, user)


# ── POST /auth/token ─────────────────────────────────

@router.post("/token", response_model=SessionOut)
async def sign_in(req: SignInRequest):
    """Validate email + password and issue a session token."""
    db = get_mongo_db()
    user = await db.users.find_one({"email": req.email}, {"_id": 0})

    if not user or not verify_password(req.password, user.get("password_hash", "")):
        raise HTTPException(status_code=400, detail=INVALID_CREDENTIALS)

    now = datetime.now(timezone.utc)
    await db.users.update_one({"id": user["id"]}, {"$set": {"last_sign_in": now}})
    await db.profiles.update_one({"id": user["id"]}, {"$set": {"last_sign_in": now}})
    user["last_sign_in"] = now

    session = await issue_session(db, user["id"])
    return _session_out(session, user)


# ── POST /auth/logout ────────────────────────────────

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(authorization: str | None = Header(default=None)):
    """Revoke the presented token. Unknown tokens are not an error."""
    if authorization and authorization.lower().startswith("bearer "):
        await revoke_session(get_mongo_db(), authorization[7:].strip())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── GET /auth/user ───────────────────────────────────

@router.get("/user", response_model=UserOut)
async def get_user(resolved: tuple[dict, dict] = Depends(current_session)):
    user, _ = resolved
    return UserOut(**public_user(user))


# ── PUT /auth/user ───────────────────────────────────

@router.put("/user", response_model=UserOut)
async def update_user(req: UpdateUserRequest, resolved: tuple[dict, dict] = Depends(current_session)):
    """Change password and/or merge metadata. A recovery token may only change
    the password, and is consumed by doing so."""
    user, session = resolved
    db = get_mongo_db()
    updates: dict = {}

    if req.data:
        if session.get("kind") == "recovery":
            raise HTTPException(status_code=403, detail="Recovery session can only change the password.")
        meta = dict(user.get("user_metadata") or {})
        meta.update({k: v for k, v in req.data.items() if k not in PROTECTED_METADATA})
        updates["user_metadata"] = meta

    if req.password:
        updates["password_hash"] = hash_password(req.password)

    if updates:
        await db.users.update_one({"id": user["id"]}, {"$set": updates})
        user.update(updates)

    if session.get("kind") == "recovery" and req.password:
        await revoke_session(db, session["access_token"])

    return UserOut(**public_user(user))


# ── POST /auth/recover ───────────────────────────────

@router.post("/recover")
async def recover(req: RecoverRequest):
    """Issue a one-hour recovery token for the email, if it exists.

    Always answers 200 so the endpoint cannot be used to probe accounts.
    The link is written to the log; delivering it is the mail relay's job.
    """
    db = get_mongo_db()
    user = await db.users.find_one({"email": req.email}, {"_id": 0, "id": 1})
    if user:
        session = await issue_session(db, user["id"], kind="recovery")
        link = f"{req.redirect_to.rstrip('/')}/?access_token={session['access_token']}&type=recovery"
        logger.info("Password recovery link for %s: %s", req.email, link)
    return {"message": "If the address exists, a recovery email has been sent."}
