"""
Leads API — anonymous contact requests, read back by dealers and admins.

Endpoints:
    POST  /leads          → public insert (lead form, support widget)
    GET   /leads          → admin: all leads; stand: leads for own stand name
    PATCH /leads/{id}     → admin or owning stand updates the status
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from backend.database import get_mongo_db
from backend.models import Lead, LeadCreate, LeadStatusUpdate
from backend.security import current_user, is_admin, user_role

logger = logging.getLogger("leads")
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/leads", tags=["Leads"])

PRIVATE_SELLER = "Particular"


async def _own_stand(db, user: dict) -> str:
    """Stand name whose leads the caller may handle; empty unless the caller
    is a stand with an approved profile. Only the profile row counts: its
    name is the one the administrator approved."""
    if user_role(user) != "stand":
        return ""
    profile = await db.profiles.find_one({"id": user["id"]}, {"_id": 0}) or {}
    if profile.get("status") != "approved":
        return ""
    return (profile.get("stand_name") or "").strip()


def _same_stand(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


@router.post("", response_model=Lead, status_code=201)
async def create_lead(req: LeadCreate):
    """Anyone may leave a lead. The target stand is taken from the car when one
    is referenced, otherwise from the payload, falling back to "Particular"."""
    db = get_mongo_db()
    stand_name = (req.stand_name or "").strip()

    if req.car_id:
        car = await db.cars.find_one({"id": req.car_id}, {"_id": 0, "stand_name": 1})
        if not car:
            raise HTTPException(status_code=404, detail=f"Car {req.car_id} not found.")
        stand_name = (car.get("stand_name") or "").strip() or stand_name

    lead = {
        "id": str(uuid.uuid4()),
        "customer_name": req.customer_name.strip(),
        "customer_email": req.customer_email,
        "customer_phone": req.customer_phone.strip(),
        "car_id": req.car_id,
        "stand_name": stand_name or PRIVATE_SELLER,
        "message": req.message,
        "status": "Pendente",
        "created_at": datetime.now(timezone.utc),
    }
    await db.leads.insert_one(dict(lead))
    logger.info("Lead %s recorded for stand %r", lead["id"], lead["stand_name"])
    return lead


@router.get("", response_model=list[Lead])
async def list_leads(stand_name: Optional[str] = None, user: dict = Depends(current_user)):
    """Admins see everything (optionally filtered); stands only see their own."""
    db = get_mongo_db()
    query: dict = {}

    if is_admin(user):
        if stand_name:
            query["stand_name"] = {"$regex": f"^{re.escape(stand_name.strip())}$", "$options": "i"}
    else:
        own = await _own_stand(db, user)
        if not own:
            return []
        query["stand_name"] = {"$regex": f"^{re.escape(own)}$", "$options": "i"}

    cursor = db.leads.find(query, {"_id": 0}).sort("created_at", -1)
    return await cursor.to_list(length=1000)


@router.patch("/{lead_id}", response_model=Lead)
async def update_lead_status(lead_id: str, req: LeadStatusUpdate, user: dict = Depends(current_user)):
    db = get_mongo_db()
    lead = await db.leads.find_one({"id": lead_id}, {"_id": 0})
    if not lead:
        raise HTTPException(status_code=404, detail=f"Lead {lead_id} not found.")

    if not is_admin(user):
        own = await _own_stand(db, user)
        if not own or not _same_stand(own, lead["stand_name"]):
            raise HTTPException(status_code=403, detail="Not allowed to change this lead.")

    await db.leads.update_one({"id": lead_id}, {"$set": {"status": req.status}})
    lead["status"] = req.status
    return lead
