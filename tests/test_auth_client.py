"""AuthClient against the real backend app (in-memory Mongo)."""

import json

import pytest

from frontend.auth_client import TOKEN_KEY, AuthApiError, AuthClient, AuthEvent
from frontend.roles import Role
from frontend.session import AuthState, SessionResolver
from frontend.storage import DictStorage


@pytest.fixture
def auth_client(client):
    return AuthClient("http://testserver", storage=DictStorage(), http=client)


def test_sign_up_stores_token_and_emits(auth_client):
    events = []
    auth_client.on_auth_state_change(lambda event, session: events.append(event))

    session = auth_client.sign_up("novo@demo.pt", "secret123", {"full_name": "Novo"})
    assert auth_client.access_token == session.access_token
    assert auth_client.storage.get_item(TOKEN_KEY) == session.access_token
    assert events == [AuthEvent.SIGNED_IN]

    remote = auth_client.get_session()
    assert remote.user.email == "novo@demo.pt"
    assert remote.user.role_claim == "visitor"


def test_api_errors_carry_detail(auth_client):
    with pytest.raises(AuthApiError) as exc:
        auth_client.sign_in_with_password("ninguem@demo.pt", "secret123")
    assert exc.value.message == "Invalid login credentials"
    assert exc.value.status == 400


def test_sign_out_revokes_and_emits(auth_client, client):
    session = auth_client.sign_up("out@demo.pt", "secret123")
    events = []
    sub = auth_client.on_auth_state_change(lambda event, s: events.append(event))

    auth_client.sign_out()
    assert events == [AuthEvent.SIGNED_OUT]
    assert auth_client.access_token is None
    res = client.get("/auth/user", headers={"Authorization": f"Bearer {session.access_token}"})
    assert res.status_code == 401

    sub.unsubscribe()
    assert not sub.active


def test_rejected_token_is_forgotten(auth_client):
    auth_client.storage.set_item(TOKEN_KEY, "stale-token")
    assert auth_client.get_session() is None
    assert auth_client.storage.get_item(TOKEN_KEY) is None


def test_update_user_metadata(auth_client):
    auth_client.sign_up("meta@demo.pt", "secret123", {"full_name": "Antigo"})
    updated = auth_client.update_user(data={"full_name": "Novo"})
    assert updated.user_metadata["full_name"] == "Novo"


def test_resolver_over_real_backend(auth_client):
    state = AuthState()
    resolver = SessionResolver(state, auth_client, auth_client.storage, DictStorage())
    resolver.start()
    assert not state.is_logged_in

    resolver.register("stand@novo.pt", "secret123", "Dono", Role.STAND, "Auto Novo")
    assert state.role is Role.STAND

    resolver.sign_out()
    assert not state.is_logged_in

    assert resolver.login("stand@novo.pt", "secret123") is Role.STAND


class _CannedResponse:
    status_code = 200

    def __init__(self, body: bytes):
        self.content = body
        self.text = body.decode()

    def json(self):
        return json.loads(self.content)


class _CannedHttp:
    def __init__(self, body: bytes):
        self.body = body

    def request(self, method, url, **kwargs):
        return _CannedResponse(self.body)


def test_user_payload_without_id_is_an_api_error():
    storage = DictStorage({TOKEN_KEY: "tok"})
    client = AuthClient("http://backend", storage=storage, http=_CannedHttp(b'{"email": "x@demo.pt"}'))
    with pytest.raises(AuthApiError) as exc:
        client.get_session()
    assert "Malformed" in exc.value.message


def test_resolver_survives_payload_without_id():
    storage = DictStorage({TOKEN_KEY: "tok"})
    client = AuthClient("http://backend", storage=storage, http=_CannedHttp(b'{"email": "x@demo.pt"}'))
    state = AuthState()
    SessionResolver(state, client, storage, DictStorage()).start()
    assert not state.loading
    assert not state.is_logged_in
