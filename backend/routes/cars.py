"""
Cars API — the public vehicle catalog and dealer stock management.

Endpoints:
    GET    /cars                 → catalog (filters: active, user_id, stand_name,
                                   subdomain, category, fuel, q, limit)
    GET    /cars/{id}            → single listing
    POST   /cars                 → approved stand or admin creates a listing
    PATCH  /cars/{id}            → owner or admin edits; only admin sets `verified`
    DELETE /cars/{id}            → owner or admin removes
"""

import re
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from backend.database import get_mongo_db
from backend.models import Car, CarCreate, CarUpdate
from backend.security import current_user, is_admin, user_role

router = APIRouter(prefix="/cars", tags=["Cars"])

PRIVATE_SELLER = "Particular"


# ────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────

def _sanitize_subdomain(value: str | None) -> str | None:
    if not value:
        return None
    value = re.sub(r"\s+", "-", value.strip().lower())
    value = re.sub(r"[^\w-]", "", value)
    return value or None


async def _load_owned(db, car_id: str, user: dict) -> dict:
    car = await db.cars.find_one({"id": car_id}, {"_id": 0})
    if not car:
        raise HTTPException(status_code=404, detail=f"Car {car_id} not found.")
    if car.get("user_id") != user["id"] and not is_admin(user):
        raise HTTPException(status_code=403, detail="Not allowed to change this listing.")
    return car


# ════════════════════════════════════════════
# GET /cars
# ════════════════════════════════════════════

@router.get("", response_model=list[Car])
async def list_cars(
    active: Optional[bool] = None,
    user_id: Optional[str] = None,
    stand_name: Optional[str] = None,
    subdomain: Optional[str] = None,
    category: Optional[str] = None,
    fuel: Optional[str] = None,
    q: Optional[str] = None,
    limit: int = 200,
):
    """Newest first. `stand_name` matches case-insensitively; `q` searches
    brand and model."""
    db = get_mongo_db()
    query: dict = {}
    if active is not None:
        query["active"] = active
    if user_id:
        query["user_id"] = user_id
    if stand_name:
        query["stand_name"] = {"$regex": f"^{re.escape(stand_name.strip())}$", "$options": "i"}
    if subdomain:
        query["subdomain"] = subdomain
    if category:
        query["category"] = category
    if fuel:
        query["fuel"] = fuel
    if q:
        pattern = {"$regex": re.escape(q.strip()), "$options": "i"}
        query["$or"] = [{"brand": pattern}, {"model": pattern}]

    cursor = db.cars.find(query, {"_id": 0}).sort("created_at", -1).limit(max(1, min(limit, 500)))
    return await cursor.to_list(length=500)


@router.get("/{car_id}", response_model=Car)
async def get_car(car_id: str):
    db = get_mongo_db()
    car = await db.cars.find_one({"id": car_id}, {"_id": 0})
    if not car:
        raise HTTPException(status_code=404, detail=f"Car {car_id} not found.")
    return car


# ════════════════════════════════════════════
# POST /cars
# ════════════════════════════════════════════

@router.post("", response_model=Car, status_code=201)
async def create_car(req: CarCreate, user: dict = Depends(current_user)):
    """Only active dealers publish listings: a stand whose profile is approved,
    or an administrator."""
    db = get_mongo_db()
    profile = await db.profiles.find_one({"id": user["id"]}, {"_id": 0}) or {}
    meta = user.get("user_metadata") or {}

    if not is_admin(user):
        if user_role(user) != "stand":
            raise HTTPException(status_code=403, detail="Only stands can publish listings.")
        if profile.get("status") != "approved":
            raise HTTPException(status_code=403, detail="Stand account is not approved yet.")

    stand_name = (profile.get("stand_name") or meta.get("stand_name") or "").strip() or PRIVATE_SELLER
    car = req.model_dump()
    car.update({
        "id": str(uuid.uuid4()),
        "subdomain": _sanitize_subdomain(req.subdomain),
        "image": req.images[0],
        "stand_name": stand_name,
        "user_id": user["id"],
        "verified": False,
        "active": True,
        "created_at": datetime.now(timezone.utc),
    })
    await db.cars.insert_one(dict(car))
    return car


# ════════════════════════════════════════════
# PATCH / DELETE /cars/{id}
# ════════════════════════════════════════════

@router.patch("/{car_id}", response_model=Car)
async def update_car(car_id: str, req: CarUpdate, user: dict = Depends(current_user)):
    db = get_mongo_db()
    car = await _load_owned(db, car_id, user)

    changes = req.model_dump(exclude_unset=True)
    if "verified" in changes and not is_admin(user):
        raise HTTPException(status_code=403, detail="Only administrators can verify listings.")
    if "subdomain" in changes:
        changes["subdomain"] = _sanitize_subdomain(changes["subdomain"])
    if changes.get("images"):
        changes["image"] = changes["images"][0]

    if changes:
        await db.cars.update_one({"id": car_id}, {"$set": changes})
        car.update(changes)
    return car


@router.delete("/{car_id}", status_code=204)
async def delete_car(car_id: str, user: dict = Depends(current_user)):
    db = get_mongo_db()
    await _load_owned(db, car_id, user)
    await db.cars.delete_one({"id": car_id})
    return Response(status_code=204)
