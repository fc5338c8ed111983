import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from backend import database
from backend.security import ADMIN_EMAIL


@pytest.fixture
def client(monkeypatch):
    # In-memory Mongo; the lifespan (index creation) is not run
    monkeypatch.setattr(database, "_mongo_client", AsyncMongoMockClient())
    from backend.main import app
    return TestClient(app)


def signup(client, email, password="secret123", **data):
    res = client.post("/auth/signup", json={"email": email, "password": password, "data": data})
    assert res.status_code == 201, res.text
    return res.json()


def auth(session: dict) -> dict:
    return {"Authorization": f"Bearer {session['access_token']}"}


@pytest.fixture
def admin(client):
    return signup(client, ADMIN_EMAIL, "admin-pass")


@pytest.fixture
def approved_stand(client, admin):
    """A stand account with its profile row, approved by the administrator."""
    session = signup(client, "stand@demo.pt", role="stand", stand_name="Stand Demo", full_name="Dono")
    res = client.post("/profiles", headers=auth(session), json={
        "id": session["user"]["id"],
        "full_name": "Dono",
        "email": "stand@demo.pt",
        "stand_name": "Stand Demo",
    })
    assert res.status_code == 201, res.text
    res = client.patch(f"/profiles/{session['user']['id']}", headers=auth(admin), json={"status": "approved"})
    assert res.status_code == 200, res.text
    return session


CAR = {
    "brand": "BMW",
    "model": "Série 3",
    "year": 2019,
    "price": 25000,
    "mileage": 80000,
    "fuel": "Diesel",
    "transmission": "Automático",
    "category": "Sedan",
    "location": "Lisboa",
    "images": ["https://img.example/1.jpg", "https://img.example/2.jpg"],
}
