"""
Profiles API — public dealer directory plus owner/admin maintenance.

Endpoints:
    GET   /profiles              → list (filters: role, status)
    GET   /profiles/{id}         → single profile
    POST  /profiles              → owner creates their own row after sign-up
    PATCH /profiles/{id}         → owner edits own fields; admin edits anything
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from backend.database import get_mongo_db
from backend.models import Profile, ProfileCreate, ProfileUpdate
from backend.security import current_user, is_admin, user_role

router = APIRouter(prefix="/profiles", tags=["Profiles"])

# Fields only an administrator may change
ADMIN_FIELDS = {"status", "role"}


@router.get("", response_model=list[Profile])
async def list_profiles(role: Optional[str] = None, status: Optional[str] = None):
    """Newest first. The stands directory asks for role=stand&status=approved."""
    db = get_mongo_db()
    query: dict = {}
    if role:
        query["role"] = role
    if status:
        query["status"] = status
    cursor = db.profiles.find(query, {"_id": 0}).sort("created_at", -1)
    return await cursor.to_list(length=1000)


@router.get("/{profile_id}", response_model=Profile)
async def get_profile(profile_id: str):
    db = get_mongo_db()
    profile = await db.profiles.find_one({"id": profile_id}, {"_id": 0})
    if not profile:
        raise HTTPException(status_code=404, detail=f"Profile {profile_id} not found.")
    return profile


@router.post("", response_model=Profile, status_code=201)
async def create_profile(req: ProfileCreate, user: dict = Depends(current_user)):
    """Insert the caller's own profile row. Role and status mirror what the
    auth service granted, never what the payload claims."""
    if req.id != user["id"]:
        raise HTTPException(status_code=403, detail="Profiles can only be created for yourself.")

    db = get_mongo_db()
    if await db.profiles.find_one({"id": req.id}, {"_id": 1}):
        raise HTTPException(status_code=409, detail="Profile already exists.")

    meta = user.get("user_metadata") or {}
    role = user_role(user)
    profile = {
        "id": user["id"],
        "full_name": req.full_name,
        "email": user["email"],
        "role": role,
        "stand_name": ((req.stand_name or "").strip() or None) if role == "stand" else None,
        "status": meta.get("status", "pending" if role == "stand" else "approved"),
        "created_at": datetime.now(timezone.utc),
    }
    await db.profiles.insert_one(dict(profile))
    return profile


@router.patch("/{profile_id}", response_model=Profile)
async def update_profile(profile_id: str, req: ProfileUpdate, user: dict = Depends(current_user)):
    admin = is_admin(user)
    if profile_id != user["id"] and not admin:
        raise HTTPException(status_code=403, detail="Not allowed to edit this profile.")

    changes = req.model_dump(exclude_unset=True)
    if not admin and ADMIN_FIELDS & changes.keys():
        raise HTTPException(status_code=403, detail="Only administrators can change role or status.")

    db = get_mongo_db()
    profile = await db.profiles.find_one({"id": profile_id}, {"_id": 0})
    if not profile:
        raise HTTPException(status_code=404, detail=f"Profile {profile_id} not found.")

    # Leads are routed by stand name: it is frozen once the stand is approved
    if not admin and "stand_name" in changes and profile.get("status") != "pending":
        raise HTTPException(status_code=403, detail="Stand name can only be changed while pending approval.")

    if changes:
        await db.profiles.update_one({"id": profile_id}, {"$set": changes})
        profile.update(changes)

        # Keep the auth metadata in step with an approval decision
        if "status" in changes:
            await db.users.update_one(
                {"id": profile_id},
                {"$set": {"user_metadata.status": changes["status"]}},
            )
    return profile
