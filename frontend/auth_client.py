"""
Client for the backend's /auth endpoints.

Mirrors what a hosted-auth SDK gives a browser app:
  - sign in / sign up / sign out / current session / update user
  - password-reset requests and recovery-link sessions
  - an auth-state channel: `on_auth_state_change(cb)` returns a Subscription,
    and every state change is pushed to the callbacks as (event, session)

The access token is kept in memory and mirrored into the given storage under
TOKEN_KEY, so a restarted client can pick the session back up.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

import requests
from dotenv import load_dotenv

from frontend.storage import DictStorage

load_dotenv()

logger = logging.getLogger("auth_client")
logger.setLevel(logging.INFO)

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")
TIMEOUT = 15  # seconds

TOKEN_KEY = "fc-auth-token"


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class AuthError(Exception):
    """Base class for everything the auth client raises."""


class AuthApiError(AuthError):
    """The backend answered with an error; `message` is its detail text."""

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.message = message
        self.status = status


class AuthTransportError(AuthError):
    """The backend could not be reached."""


@dataclass(frozen=True)
class RemoteUser:
    id: str
    email: str
    user_metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def role_claim(self):
        return (self.user_metadata or {}).get("role")

    @classmethod
    def from_json(cls, data: dict) -> "RemoteUser":
        """Raises KeyError / TypeError on a payload without an `id`."""
        return cls(
            id=data["id"],
            email=data.get("email", ""),
            user_metadata=data.get("user_metadata") or {},
        )


@dataclass(frozen=True)
class RemoteSession:
    access_token: str
    user: RemoteUser
    expires_at: Optional[str] = None


AuthCallback = Callable[[AuthEvent, Optional[RemoteSession]], None]


class Subscription:
    def __init__(self, listeners: list, callback: AuthCallback):
        self._listeners = listeners
        self._callback = callback

    @property
    def active(self) -> bool:
        return self._callback in self._listeners

    def unsubscribe(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


def _error_detail(resp) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    detail = data.get("detail") if isinstance(data, dict) else None
    if isinstance(detail, list):
        return "; ".join(str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in detail)
    return str(detail) if detail else f"HTTP {resp.status_code}"


def _user_from(data, path: str) -> RemoteUser:
    try:
        return RemoteUser.from_json(data)
    except (KeyError, TypeError, AttributeError) as exc:
        raise AuthApiError(f"Malformed user payload from {path}", 200) from exc


class AuthClient:
    def __init__(self, base_url: str = BACKEND_URL, storage=None, http=None, timeout: int = TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.storage = storage if storage is not None else DictStorage()
        self.timeout = timeout
        self._http = http if http is not None else requests.Session()
        self._listeners: list[AuthCallback] = []
        self._access_token: Optional[str] = None

    # ── transport ─────────────────────────────────────

    def _request(self, method: str, path: str, payload: Optional[dict] = None, token: Optional[str] = None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            resp = self._http.request(
                method,
                f"{self.base_url}{path}",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise AuthTransportError(f"Cannot reach backend: {exc}") from exc

        if resp.status_code >= 400:
            raise AuthApiError(_error_detail(resp), resp.status_code)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise AuthApiError(f"Malformed response from {path}", resp.status_code) from exc

    # ── token bookkeeping ─────────────────────────────

    @property
    def access_token(self) -> Optional[str]:
        if self._access_token is None:
            self._access_token = self.storage.get_item(TOKEN_KEY)
        return self._access_token

    def _store(self, data: dict) -> RemoteSession:
        if not isinstance(data, dict) or not data.get("access_token"):
            raise AuthApiError("Malformed session payload", 200)
        session = RemoteSession(
            access_token=data["access_token"],
            user=_user_from(data.get("user"), "session"),
            expires_at=str(data.get("expires_at") or "") or None,
        )
        self._access_token = session.access_token
        self.storage.set_item(TOKEN_KEY, session.access_token)
        return session

    def _forget(self) -> None:
        self._access_token = None
        self.storage.remove_item(TOKEN_KEY)

    # ── auth-state channel ────────────────────────────

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self._listeners, callback)

    def _emit(self, event: AuthEvent, session: Optional[RemoteSession]) -> None:
        for callback in list(self._listeners):
            try:
                callback(event, session)
            except Exception:
                logger.exception("Auth listener failed on %s", event.value)

    # ── operations ────────────────────────────────────

    def sign_in_with_password(self, email: str, password: str) -> RemoteSession:
        data = self._request("POST", "/auth/token", {"email": email, "password": password})
        session = self._store(data)
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    def sign_up(self, email: str, password: str, data: Optional[dict] = None) -> RemoteSession:
        payload = {"email": email, "password": password, "data": data or {}}
        session = self._store(self._request("POST", "/auth/signup", payload))
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    def sign_out(self) -> None:
        """Drop the local token, tell listeners, then revoke it remotely.
        A failing remote call still leaves the client signed out."""
        token = self.access_token
        self._forget()
        try:
            if token:
                self._request("POST", "/auth/logout", token=token)
        finally:
            self._emit(AuthEvent.SIGNED_OUT, None)

    def get_session(self) -> Optional[RemoteSession]:
        """Validate the stored token. None when there is no token or the
        backend rejects it; transport failures propagate."""
        token = self.access_token
        if not token:
            return None
        try:
            data = self._request("GET", "/auth/user", token=token)
        except AuthApiError as exc:
            if exc.status == 401:
                self._forget()
                return None
            raise
        return RemoteSession(access_token=token, user=_user_from(data, "/auth/user"))

    def get_user(self) -> Optional[RemoteUser]:
        session = self.get_session()
        return session.user if session else None

    def update_user(self, password: Optional[str] = None, data: Optional[dict] = None) -> RemoteUser:
        token = self.access_token
        if not token:
            raise AuthApiError("Not authenticated", 401)
        payload: dict = {}
        if password:
            payload["password"] = password
        if data:
            payload["data"] = data
        user = _user_from(self._request("PUT", "/auth/user", payload, token=token), "/auth/user")
        self._emit(AuthEvent.USER_UPDATED, RemoteSession(access_token=token, user=user))
        return user

    def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        self._request("POST", "/auth/recover", {"email": email, "redirect_to": redirect_to})

    def set_session(self, access_token: str, recovery: bool = False) -> RemoteSession:
        """Adopt a token handed over out of band (password-recovery link)."""
        data = self._request("GET", "/auth/user", token=access_token)
        session = self._store({"access_token": access_token, "user": data})
        self._emit(AuthEvent.PASSWORD_RECOVERY if recovery else AuthEvent.SIGNED_IN, session)
        return session
