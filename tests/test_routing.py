from types import SimpleNamespace

import pytest

from frontend.roles import Role
from frontend.routing import ROUTES, authorize, normalize_path


def state(role=Role.VISITOR, logged_in=True):
    return SimpleNamespace(is_logged_in=logged_in, role=role)


ANON = state(logged_in=False)
VISITOR = state(Role.VISITOR)
STAND = state(Role.STAND)
ADMIN = state(Role.ADMIN)


@pytest.mark.parametrize("path", [
    "/", "/veiculos", "/veiculos/abc", "/v/bmw-serie-3", "/sobre", "/stands",
    "/stand/stand-demo", "/login", "/registo", "/admin/login", "/esqueci-senha", "/redefinir-senha",
])
def test_public_paths_open_to_anyone(path):
    assert authorize(path, ANON).allowed


@pytest.mark.parametrize("path, who, allowed, redirect", [
    ("/dashboard", ANON, False, "/login"),
    ("/dashboard", VISITOR, False, "/login"),
    ("/dashboard", STAND, True, None),
    ("/dashboard", ADMIN, True, None),
    ("/editar-anuncio/c1", VISITOR, False, "/login"),
    ("/editar-anuncio/c1", ADMIN, True, None),
    ("/anunciar", STAND, True, None),
    ("/anunciar", ADMIN, False, "/login"),
    ("/anunciar", ANON, False, "/login"),
    ("/admin", ADMIN, True, None),
    ("/admin", STAND, False, "/admin/login"),
    ("/admin", ANON, False, "/admin/login"),
    ("/cliente", VISITOR, True, None),
    ("/cliente", STAND, True, None),
    ("/cliente/editar", ANON, False, "/login"),
])
def test_guarded_paths(path, who, allowed, redirect):
    decision = authorize(path, who)
    assert decision.allowed is allowed
    assert decision.redirect_to == redirect


def test_unknown_path_redirects_home():
    decision = authorize("/nao-existe/ainda", ADMIN)
    assert not decision.allowed
    assert decision.redirect_to == "/"


def test_params_captured():
    decision = authorize("/stand/stand%20demo", ANON)
    assert decision.route == "stand_detail"
    assert decision.params == {"standName": "stand demo"}

    decision = authorize("/editar-anuncio/abc-123/", STAND)
    assert decision.route == "edit_ad"
    assert decision.params == {"id": "abc-123"}


def test_role_change_seen_on_next_navigation():
    who = state(Role.VISITOR)
    assert not authorize("/dashboard", who).allowed
    who.role = Role.STAND
    assert authorize("/dashboard", who).allowed


@pytest.mark.parametrize("raw, expected", [
    (None, "/"),
    ("", "/"),
    ("veiculos", "/veiculos"),
    ("/veiculos/", "/veiculos"),
    ("/veiculos?x=1", "/veiculos"),
])
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


def test_route_names_unique():
    names = [r.name for r in ROUTES]
    assert len(names) == len(set(names))
