from conftest import CAR, auth, signup


def _publish(client, session, **overrides):
    res = client.post("/cars", headers=auth(session), json={**CAR, **overrides})
    assert res.status_code == 201, res.text
    return res.json()


# ── Profiles ──────────────────────────

def test_profile_role_comes_from_account(client):
    session = signup(client, "v@demo.pt")
    res = client.post("/profiles", headers=auth(session), json={
        "id": session["user"]["id"], "email": "v@demo.pt", "role": "admin", "status": "approved",
    })
    assert res.status_code == 201, res.text
    assert res.json()["role"] == "visitor"


def test_profile_only_for_self(client):
    a = signup(client, "a@demo.pt")
    res = client.post("/profiles", headers=auth(a), json={"id": "someone-else", "email": "a@demo.pt"})
    assert res.status_code == 403


def test_stand_cannot_approve_itself(client):
    session = signup(client, "s@demo.pt", role="stand", stand_name="S")
    client.post("/profiles", headers=auth(session), json={"id": session["user"]["id"], "email": "s@demo.pt"})
    res = client.patch(f"/profiles/{session['user']['id']}", headers=auth(session), json={"status": "approved"})
    assert res.status_code == 403


def test_approval_syncs_user_metadata(client, approved_stand):
    res = client.get("/auth/user", headers=auth(approved_stand))
    assert res.json()["user_metadata"]["status"] == "approved"
    stands = client.get("/profiles", params={"role": "stand", "status": "approved"}).json()
    assert [p["stand_name"] for p in stands] == ["Stand Demo"]


# ── Cars ──────────────────────────────

def test_visitor_cannot_publish(client):
    session = signup(client, "v@demo.pt")
    res = client.post("/cars", headers=auth(session), json=CAR)
    assert res.status_code == 403
    assert res.json()["detail"] == "Only stands can publish listings."


def test_pending_stand_cannot_publish(client):
    session = signup(client, "p@demo.pt", role="stand", stand_name="Pendente Lda")
    client.post("/profiles", headers=auth(session), json={"id": session["user"]["id"], "email": "p@demo.pt"})
    res = client.post("/cars", headers=auth(session), json=CAR)
    assert res.status_code == 403
    assert res.json()["detail"] == "Stand account is not approved yet."


def test_approved_stand_publishes(client, approved_stand):
    car = _publish(client, approved_stand, subdomain="BMW Serie 3!")
    assert car["stand_name"] == "Stand Demo"
    assert car["image"] == CAR["images"][0]
    assert car["verified"] is False
    assert car["active"] is True
    assert car["subdomain"] == "bmw-serie-3"

    found = client.get("/cars", params={"subdomain": "bmw-serie-3"}).json()
    assert [c["id"] for c in found] == [car["id"]]


def test_car_filters(client, approved_stand):
    _publish(client, approved_stand)
    _publish(client, approved_stand, brand="Renault", model="Clio", category="Hatchback", fuel="Gasolina")

    assert len(client.get("/cars", params={"stand_name": "stand demo"}).json()) == 2
    assert [c["brand"] for c in client.get("/cars", params={"q": "clio"}).json()] == ["Renault"]
    assert [c["brand"] for c in client.get("/cars", params={"fuel": "Diesel"}).json()] == ["BMW"]


def test_too_many_images_rejected(client, approved_stand):
    res = client.post("/cars", headers=auth(approved_stand), json={**CAR, "images": ["x"] * 11})
    assert res.status_code == 422


def test_only_admin_verifies(client, admin, approved_stand):
    car = _publish(client, approved_stand)
    res = client.patch(f"/cars/{car['id']}", headers=auth(approved_stand), json={"verified": True})
    assert res.status_code == 403
    res = client.patch(f"/cars/{car['id']}", headers=auth(admin), json={"verified": True})
    assert res.status_code == 200
    assert res.json()["verified"] is True


def test_other_user_cannot_delete(client, approved_stand):
    car = _publish(client, approved_stand)
    other = signup(client, "other@demo.pt")
    assert client.delete(f"/cars/{car['id']}", headers=auth(other)).status_code == 403
    assert client.delete(f"/cars/{car['id']}", headers=auth(approved_stand)).status_code == 204
    assert client.get(f"/cars/{car['id']}").status_code == 404


# ── Leads ─────────────────────────────

def test_lead_goes_to_car_stand(client, approved_stand):
    car = _publish(client, approved_stand)
    res = client.post("/leads", json={
        "customer_name": "Rui", "customer_email": "RUI@mail.pt", "car_id": car["id"], "stand_name": "Outro",
    })
    assert res.status_code == 201, res.text
    lead = res.json()
    assert lead["stand_name"] == "Stand Demo"
    assert lead["status"] == "Pendente"
    assert lead["customer_email"] == "rui@mail.pt"


def test_lead_without_stand_is_private_seller(client):
    res = client.post("/leads", json={"customer_name": "Rui", "customer_email": "rui@mail.pt"})
    assert res.json()["stand_name"] == "Particular"


def test_lead_for_missing_car(client):
    res = client.post("/leads", json={"customer_name": "Rui", "customer_email": "rui@mail.pt", "car_id": "nope"})
    assert res.status_code == 404


def test_leads_visibility(client, admin, approved_stand):
    car = _publish(client, approved_stand)
    client.post("/leads", json={"customer_name": "A", "customer_email": "a@mail.pt", "car_id": car["id"]})
    client.post("/leads", json={"customer_name": "B", "customer_email": "b@mail.pt", "stand_name": "SUPORTE CENTRAL"})
    visitor = signup(client, "v@demo.pt")

    assert client.get("/leads").status_code == 401
    assert client.get("/leads", headers=auth(visitor)).json() == []
    assert [l["customer_name"] for l in client.get("/leads", headers=auth(approved_stand)).json()] == ["A"]
    assert len(client.get("/leads", headers=auth(admin)).json()) == 2
    support = client.get("/leads", headers=auth(admin), params={"stand_name": "suporte central"}).json()
    assert [l["customer_name"] for l in support] == ["B"]


def test_lead_status_update(client, approved_stand):
    car = _publish(client, approved_stand)
    lead = client.post("/leads", json={"customer_name": "A", "customer_email": "a@mail.pt", "car_id": car["id"]}).json()
    other = signup(client, "x@demo.pt")

    assert client.patch(f"/leads/{lead['id']}", headers=auth(other), json={"status": "Vendido"}).status_code == 403
    assert client.patch(f"/leads/{lead['id']}", headers=auth(approved_stand), json={"status": "Aberto"}).status_code == 422
    res = client.patch(f"/leads/{lead['id']}", headers=auth(approved_stand), json={"status": "Contactado"})
    assert res.status_code == 200
    assert res.json()["status"] == "Contactado"


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["mongodb"] in {"UP", "DOWN"}


def _lead_for(client, stand_session):
    car = _publish(client, stand_session)
    res = client.post("/leads", json={"customer_name": "Ana", "customer_email": "ana@x.pt", "car_id": car["id"]})
    return res.json()


def test_visitor_cannot_take_over_stand_leads(client, approved_stand):
    lead = _lead_for(client, approved_stand)
    visitor = signup(client, "v@demo.pt")
    client.post("/profiles", headers=auth(visitor), json={"id": visitor["user"]["id"], "email": "v@demo.pt"})

    res = client.put("/auth/user", headers=auth(visitor), json={"data": {"stand_name": "Stand Demo"}})
    assert res.status_code == 200
    assert res.json()["user_metadata"]["stand_name"] is None
    res = client.patch(f"/profiles/{visitor['user']['id']}", headers=auth(visitor), json={"stand_name": "Stand Demo"})
    assert res.status_code == 403

    assert client.get("/leads", headers=auth(visitor)).json() == []
    res = client.patch(f"/leads/{lead['id']}", headers=auth(visitor), json={"status": "Vendido"})
    assert res.status_code == 403


def test_pending_stand_with_same_name_sees_nothing(client, approved_stand):
    lead = _lead_for(client, approved_stand)
    copycat = signup(client, "copy@demo.pt", role="stand", stand_name="Stand Demo")
    client.post("/profiles", headers=auth(copycat), json={
        "id": copycat["user"]["id"], "email": "copy@demo.pt", "stand_name": "Stand Demo",
    })

    assert client.get("/leads", headers=auth(copycat)).json() == []
    res = client.patch(f"/leads/{lead['id']}", headers=auth(copycat), json={"status": "Vendido"})
    assert res.status_code == 403


def test_other_approved_stand_sees_only_its_own(client, admin, approved_stand):
    lead = _lead_for(client, approved_stand)
    other = signup(client, "norte@demo.pt", role="stand", stand_name="Auto Norte")
    client.post("/profiles", headers=auth(other), json={
        "id": other["user"]["id"], "email": "norte@demo.pt", "stand_name": "Auto Norte",
    })
    client.patch(f"/profiles/{other['user']['id']}", headers=auth(admin), json={"status": "approved"})

    assert client.get("/leads", headers=auth(other)).json() == []
    res = client.patch(f"/leads/{lead['id']}", headers=auth(other), json={"status": "Vendido"})
    assert res.status_code == 403


def test_stand_name_frozen_after_approval(client, approved_stand):
    res = client.patch(f"/profiles/{approved_stand['user']['id']}", headers=auth(approved_stand),
                       json={"stand_name": "Outro Nome"})
    assert res.status_code == 403

    pending = signup(client, "p@demo.pt", role="stand", stand_name="Rascunho")
    client.post("/profiles", headers=auth(pending), json={
        "id": pending["user"]["id"], "email": "p@demo.pt", "stand_name": "Rascunho",
    })
    res = client.patch(f"/profiles/{pending['user']['id']}", headers=auth(pending), json={"stand_name": "Final"})
    assert res.status_code == 200
    assert res.json()["stand_name"] == "Final"
