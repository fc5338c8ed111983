"""
FastAPI application entry point — the marketplace's hosted backend.

- Enables CORS for the Streamlit client (localhost:8501)
- Registers auth, profiles, cars and leads routes
- Creates indexes on startup, closes the Mongo client on shutdown

Run:  uvicorn backend.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.database import close_connections, ensure_indexes
from backend.routes import auth, cars, health, leads, profiles

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("main")


# ── Lifespan (startup + shutdown) ─────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: make sure lookup indexes exist.
    Shutdown: close the database connection cleanly."""
    try:
        await ensure_indexes()
    except Exception as exc:
        logger.warning("Index creation skipped: %s", exc)
    yield
    await close_connections()


# ── App instance ──────────────────────────────────────
app = FastAPI(
    title="Facilitador Car – Marketplace API",
    version="0.1.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],           # tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ────────────────────────────────────────────
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(profiles.router)
app.include_router(cars.router)
app.include_router(leads.router)


@app.get("/", tags=["Root"])
async def root():
    """Minimal root endpoint to confirm the API is running."""
    return {"status": "ok", "message": "Backend is running."}
