"""
HTTP client helpers for the marketplace data endpoints.
All frontend ↔ backend data traffic (cars, profiles, leads) goes through here;
auth traffic goes through frontend.auth_client.

Functions raise requests.exceptions.RequestException (HTTPError included) on
failure; views turn that into a message with `error_message`.
"""

import os
import requests
from dotenv import load_dotenv

load_dotenv()

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")
TIMEOUT = 10  # seconds


def _headers(token: str | None) -> dict:
    return {"Authorization": f"Bearer {token}"} if token else {}


def _request(method: str, path: str, token: str | None = None, payload: dict | None = None,
             params: dict | None = None):
    """Send a request to the backend and return decoded JSON (None on 204)."""
    resp = requests.request(
        method,
        f"{BACKEND_URL}{path}",
        json=payload,
        params={k: v for k, v in (params or {}).items() if v is not None},
        headers=_headers(token),
        timeout=TIMEOUT,
    )
    resp.raise_for_status()
    if resp.status_code == 204 or not resp.content:
        return None
    return resp.json()


def error_message(exc: Exception) -> str:
    """Backend `detail` text for an HTTPError, the exception text otherwise."""
    response = getattr(exc, "response", None)
    if response is not None:
        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = None
        if detail:
            return detail if isinstance(detail, str) else str(detail)
    return str(exc)


# ── Health ────────────────────────────

def get_health() -> dict:
    """GET /health → {mongodb: UP/DOWN}"""
    return _request("GET", "/health")


# ── Cars ──────────────────────────────

def list_cars(**filters) -> list[dict]:
    """GET /cars — filters: active, user_id, stand_name, subdomain, category, fuel, q, limit"""
    return _request("GET", "/cars", params=filters)


def get_car(car_id: str) -> dict | None:
    """GET /cars/{id} — None when the listing does not exist."""
    try:
        return _request("GET", f"/cars/{car_id}")
    except requests.exceptions.HTTPError as exc:
        if exc.response is not None and exc.response.status_code == 404:
            return None
        raise


def find_car_by_subdomain(slug: str) -> dict | None:
    cars = list_cars(subdomain=slug, active=True, limit=1)
    return cars[0] if cars else None


def create_car(token: str, payload: dict) -> dict:
    return _request("POST", "/cars", token=token, payload=payload)


def update_car(token: str, car_id: str, changes: dict) -> dict:
    return _request("PATCH", f"/cars/{car_id}", token=token, payload=changes)


def delete_car(token: str, car_id: str) -> None:
    _request("DELETE", f"/cars/{car_id}", token=token)


# ── Profiles ──────────────────────────

def list_profiles(role: str | None = None, status: str | None = None) -> list[dict]:
    return _request("GET", "/profiles", params={"role": role, "status": status})


def get_profile(profile_id: str) -> dict | None:
    try:
        return _request("GET", f"/profiles/{profile_id}")
    except requests.exceptions.HTTPError as exc:
        if exc.response is not None and exc.response.status_code == 404:
            return None
        raise


def create_profile(token: str, payload: dict) -> dict:
    return _request("POST", "/profiles", token=token, payload=payload)


def update_profile(token: str, profile_id: str, changes: dict) -> dict:
    return _request("PATCH", f"/profiles/{profile_id}", token=token, payload=changes)


# ── Leads ─────────────────────────────

def create_lead(payload: dict) -> dict:
    """POST /leads — public, no token needed."""
    return _request("POST", "/leads", payload=payload)


def list_leads(token: str, stand_name: str | None = None) -> list[dict]:
    return _request("GET", "/leads", token=token, params={"stand_name": stand_name})


def update_lead_status(token: str, lead_id: str, status: str) -> dict:
    return _request("PATCH", f"/leads/{lead_id}", token=token, payload={"status": status})
