"""
Route authorization — render or redirect, decided per navigation.

Every path maps to one access kind. The check is a pure function of
(is_logged_in, role): it performs no I/O and nothing is cached, so a role
change is picked up by the next navigation.

Access is role-exact, not hierarchical: ADMIN reaches the dealer dashboard
and ad editing, but NOT the ad-creation form, which is reserved for dealers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
from urllib.parse import unquote, urlsplit

from frontend.roles import Role

HOME_PATH = "/"
LOGIN_PATH = "/login"
ADMIN_LOGIN_PATH = "/admin/login"


class Access(Enum):
    PUBLIC = "public"
    STAND_OR_ADMIN = "stand_or_admin"
    STAND_ONLY = "stand_only"
    ADMIN_ONLY = "admin_only"
    AUTHENTICATED = "authenticated"


def can_access(access: Access, is_logged_in: bool, role: Role) -> bool:
    if access is Access.PUBLIC:
        return True
    if not is_logged_in:
        return False
    if access is Access.STAND_OR_ADMIN:
        return role in (Role.STAND, Role.ADMIN)
    if access is Access.STAND_ONLY:
        return role is Role.STAND
    if access is Access.ADMIN_ONLY:
        return role is Role.ADMIN
    return access is Access.AUTHENTICATED


def redirect_for(access: Access) -> str:
    return ADMIN_LOGIN_PATH if access is Access.ADMIN_ONLY else LOGIN_PATH


@dataclass(frozen=True)
class RouteRule:
    name: str
    pattern: str
    access: Access = Access.PUBLIC

    def match(self, path: str) -> Optional[dict[str, str]]:
        """Return captured `:params` when `path` fits the pattern, else None."""
        want = [p for p in self.pattern.split("/") if p]
        got = [p for p in path.split("/") if p]
        if len(want) != len(got):
            return None
        params: dict[str, str] = {}
        for w, g in zip(want, got):
            if w.startswith(":"):
                params[w[1:]] = unquote(g)
            elif w != g:
                return None
        return params


ROUTES: tuple[RouteRule, ...] = (
    # public catalog
    RouteRule("home", "/"),
    RouteRule("listings", "/veiculos"),
    RouteRule("car_detail", "/veiculos/:id"),
    RouteRule("vanity", "/v/:slug"),
    RouteRule("about", "/sobre"),
    RouteRule("stands", "/stands"),
    RouteRule("stand_detail", "/stand/:standName"),
    # dealer area
    RouteRule("dashboard", "/dashboard", Access.STAND_OR_ADMIN),
    RouteRule("create_ad", "/anunciar", Access.STAND_ONLY),
    RouteRule("edit_ad", "/editar-anuncio/:id", Access.STAND_OR_ADMIN),
    # admin area
    RouteRule("admin", "/admin", Access.ADMIN_ONLY),
    # customer area
    RouteRule("user_area", "/cliente", Access.AUTHENTICATED),
    RouteRule("edit_profile", "/cliente/editar", Access.AUTHENTICATED),
    # auth surfaces
    RouteRule("admin_login", ADMIN_LOGIN_PATH),
    RouteRule("login", LOGIN_PATH),
    RouteRule("register", "/registo"),
    RouteRule("forgot_password", "/esqueci-senha"),
    RouteRule("reset_password", "/redefinir-senha"),
)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    route: Optional[str] = None
    params: dict[str, str] = field(default_factory=dict)
    redirect_to: Optional[str] = None


def normalize_path(path: Optional[str]) -> str:
    """'/veiculos/?x=1' → '/veiculos'; empty → '/'."""
    path = urlsplit(path or "").path or HOME_PATH
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or HOME_PATH
    return path


def find_route(path: str) -> tuple[Optional[RouteRule], dict[str, str]]:
    for rule in ROUTES:
        params = rule.match(path)
        if params is not None:
            return rule, params
    return None, {}


def authorize(path: Optional[str], state) -> Decision:
    """Decide for `path` given a resolved state exposing `is_logged_in` and
    `role`. Unknown paths redirect to the public root."""
    path = normalize_path(path)
    rule, params = find_route(path)
    if rule is None:
        return Decision(allowed=False, redirect_to=HOME_PATH)
    if can_access(rule.access, state.is_logged_in, state.role):
        return Decision(allowed=True, route=rule.name, params=params)
    return Decision(allowed=False, route=rule.name, params=params, redirect_to=redirect_for(rule.access))
