"""
Health check endpoint.
Returns UP / DOWN status for MongoDB.
"""

from fastapi import APIRouter
from backend.database import ping_mongo
from backend.models import HealthStatus

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check():
    """Ping the database and report its status."""
    mongo_ok = await ping_mongo()
    return HealthStatus(mongodb="UP" if mongo_ok else "DOWN")
