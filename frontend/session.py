"""
Session resolution — decides who the current user is and which role they hold.

Sources, in order of precedence:
    1. the remote session held by the auth service
    2. the `fc_session` record in local storage (admin bypass, admin login)

The result lives in an AuthState container owned by the composition root
(`frontend/runtime.py`); the resolver is the only writer. Auth events from the
client keep it current for the lifetime of the browser session:

    SIGNED_IN  (with a user) → role from metadata, admin-email override
    SIGNED_OUT               → visitor, logged out
    anything else            → ignored

The administrator-email override is applied at every entry point (initial
check, auth event, explicit login) from the raw claim each time.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from frontend.auth_client import AuthApiError, AuthError, AuthEvent, RemoteSession, RemoteUser
from frontend.policy import check_bypass_credentials, is_admin_email, resolve_role
from frontend.roles import Role, parse_role
from frontend.storage import (
    SESSION_CACHE_KEY,
    CorruptCacheError,
    read_cached_session,
    write_cached_session,
)

logger = logging.getLogger("session")
logger.setLevel(logging.INFO)

ADMIN_ONLY_MESSAGE = "Acesso restrito a administradores."


class SessionSource(str, Enum):
    REMOTE = "remote"
    LOCAL_CACHE = "local_cache"


@dataclass(frozen=True)
class Session:
    identity: Optional[str]
    email: Optional[str]
    role: Role
    source: SessionSource
    issued_at: float


class AuthState:
    """The one live Session for this browser session, or none."""

    def __init__(self):
        self.session: Optional[Session] = None
        self.loading = True

    @property
    def role(self) -> Role:
        return self.session.role if self.session else Role.VISITOR

    @property
    def is_logged_in(self) -> bool:
        return self.session is not None

    def set(self, session: Session) -> None:
        self.session = session

    def clear(self) -> None:
        self.session = None

    def __repr__(self):
        return f"AuthState(role={self.role.value}, is_logged_in={self.is_logged_in})"


class AdminAccessDenied(AuthApiError):
    def __init__(self, message: str = ADMIN_ONLY_MESSAGE):
        super().__init__(message, 403)


class SessionResolver:
    def __init__(
        self,
        state: AuthState,
        auth,
        local_storage,
        session_storage,
        bypass: Callable[[str, str], bool] = check_bypass_credentials,
        clock: Callable[[], float] = time.time,
    ):
        self.state = state
        self.auth = auth
        self.local_storage = local_storage
        self.session_storage = session_storage
        self._bypass = bypass
        self._clock = clock
        self._subscription = None

    # ── lifecycle ─────────────────────────────────────

    def start(self) -> AuthState:
        """Initial resolution, then subscribe to auth events (once)."""
        self.resolve_initial()
        if self._subscription is None:
            self._subscription = self.auth.on_auth_state_change(self._on_auth_event)
        return self.state

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    # ── resolution ────────────────────────────────────

    def resolve_initial(self) -> AuthState:
        """Remote session if the auth service has one, else the local cache.

        Remote failures are logged and treated as "no remote session". A
        corrupt cache record is deleted and resolves to a logged-out visitor.
        """
        try:
            remote = self.auth.get_session()
        except AuthError as exc:
            logger.warning("Remote session check failed: %s", exc)
            remote = None

        if remote is not None:
            self._adopt_remote(remote.user)
        else:
            self._restore_from_cache()

        self.state.loading = False
        return self.state

    def _restore_from_cache(self) -> None:
        try:
            cached = read_cached_session(self.local_storage)
        except CorruptCacheError as exc:
            logger.info("Discarding cached session: %s", exc)
            self.local_storage.remove_item(SESSION_CACHE_KEY)
            cached = None

        if cached is None:
            self.state.clear()
            return

        issued_at = cached.timestamp / 1000 if cached.timestamp is not None else self._clock()
        self.state.set(Session(
            identity=cached.email,
            email=cached.email,
            role=resolve_role(cached.role, cached.email),
            source=SessionSource.LOCAL_CACHE,
            issued_at=issued_at,
        ))

    def _adopt_remote(self, user: RemoteUser, fallback_claim=None) -> Role:
        claim = user.role_claim or fallback_claim
        role = resolve_role(claim, user.email)
        self.state.set(Session(
            identity=user.id,
            email=user.email,
            role=role,
            source=SessionSource.REMOTE,
            issued_at=self._clock(),
        ))
        return role

    def _adopt_bypass(self, email: str) -> Role:
        cached = write_cached_session(self.local_storage, email, Role.ADMIN,
                                      timestamp=int(self._clock() * 1000))
        self.state.set(Session(
            identity=cached.email,
            email=cached.email,
            role=Role.ADMIN,
            source=SessionSource.LOCAL_CACHE,
            issued_at=cached.timestamp / 1000,
        ))
        logger.warning("Administrator bypass login used for %s", email)
        return Role.ADMIN

    def _on_auth_event(self, event: AuthEvent, session: Optional[RemoteSession]) -> None:
        if event == AuthEvent.SIGNED_IN and session is not None and session.user is not None:
            self._adopt_remote(session.user)
        elif event == AuthEvent.SIGNED_OUT:
            self.state.clear()

    # ── explicit user actions ─────────────────────────

    def login(self, email: str, password: str, requested_role: Role = Role.VISITOR) -> Role:
        """General login form. Bypass pair first, then the auth service.

        AuthApiError from the service propagates to the form untouched; the
        current Session is not modified in that case.
        """
        email = email.strip()
        if self._bypass(email, password):
            return self._adopt_bypass(email)

        remote = self.auth.sign_in_with_password(email, password)
        return self._adopt_remote(remote.user, fallback_claim=requested_role.value)

    def register(
        self,
        email: str,
        password: str,
        full_name: str,
        role: Role = Role.VISITOR,
        stand_name: Optional[str] = None,
    ) -> RemoteSession:
        role = parse_role(role)
        if role is Role.ADMIN:
            role = Role.VISITOR
        is_stand = role is Role.STAND
        metadata = {
            "full_name": full_name,
            "stand_name": stand_name if is_stand else None,
            "role": role.value,
            "status": "pending" if is_stand else "approved",
        }
        remote = self.auth.sign_up(email.strip(), password, metadata)
        self._adopt_remote(remote.user, fallback_claim=role.value)
        return remote

    def admin_login(self, email: str, password: str) -> Role:
        """Admin login form. Only the administrator email or an admin role
        claim gets through; success is also recorded in the local cache."""
        email = email.strip()
        if self._bypass(email, password):
            return self._adopt_bypass(email)

        remote = self.auth.sign_in_with_password(email, password)
        user = remote.user
        if not is_admin_email(user.email) and parse_role(user.role_claim) is not Role.ADMIN:
            raise AdminAccessDenied()

        write_cached_session(self.local_storage, user.email, Role.ADMIN,
                             timestamp=int(self._clock() * 1000))
        self.state.set(Session(
            identity=user.id,
            email=user.email,
            role=Role.ADMIN,
            source=SessionSource.REMOTE,
            issued_at=self._clock(),
        ))
        return Role.ADMIN

    def sign_out(self) -> None:
        """Wipe local and session storage, then end the remote session.

        The remote call may fail; that is logged and the user is signed out
        locally regardless.
        """
        self.local_storage.clear()
        self.session_storage.clear()
        try:
            self.auth.sign_out()
        except AuthError as exc:
            logger.error("Remote sign-out failed: %s", exc)
        self.state.clear()
