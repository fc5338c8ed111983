"""
Composition root for one browser session.

Builds the AuthState container, the storages, the auth client and the
session resolver on the first script run and keeps them in st.session_state;
later runs reuse them. Also owns navigation (the `p` query parameter) and
the sign-out teardown.

The browser is identified by the `sid` query parameter, a random id minted
on first visit and carried through every navigation. Local storage is one
file per `sid`, so it survives reloads of that browser and nothing else.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import streamlit as st
from dotenv import load_dotenv

from frontend.auth_client import BACKEND_URL, AuthClient
from frontend.routing import HOME_PATH, normalize_path
from frontend.session import AuthState, SessionResolver
from frontend.storage import DictStorage, JsonFileStorage, browser_storage, is_browser_id, new_browser_id

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("runtime")

STORAGE_DIR = Path(os.getenv("FC_STORAGE_DIR", ".fc_storage"))
SITE_URL = os.getenv("FC_SITE_URL", "http://localhost:8501")

RUNTIME_KEY = "fc_runtime"
SESSION_STORAGE_KEY = "fc_session_storage"
BROWSER_PARAM = "sid"
FAVORITES_KEY = "favorites"


@dataclass
class Runtime:
    state: AuthState
    auth: AuthClient
    resolver: SessionResolver
    local_storage: JsonFileStorage
    session_storage: DictStorage

    @property
    def token(self) -> str | None:
        return self.auth.access_token


def build_runtime(
    storage_dir: str | Path,
    browser_id: str,
    session_mapping: dict,
    base_url: str = BACKEND_URL,
    http=None,
) -> Runtime:
    """Wire one browser's state, storages, auth client and resolver, and
    resolve its session."""
    local_storage = browser_storage(storage_dir, browser_id)
    session_storage = DictStorage(session_mapping)
    state = AuthState()
    auth = AuthClient(base_url, storage=local_storage, http=http)
    resolver = SessionResolver(state, auth, local_storage, session_storage)

    rt = Runtime(state, auth, resolver, local_storage, session_storage)
    resolver.start()
    return rt


def browser_id() -> str:
    """This browser's id from `?sid=`, minting one on first visit."""
    sid = st.query_params.get(BROWSER_PARAM)
    if not is_browser_id(sid):
        sid = new_browser_id()
        st.query_params[BROWSER_PARAM] = sid
    return sid


def get_runtime() -> Runtime:
    """Return this browser session's Runtime, building and starting it once."""
    rt = st.session_state.get(RUNTIME_KEY)
    if rt is not None:
        return rt

    rt = build_runtime(STORAGE_DIR, browser_id(), st.session_state.setdefault(SESSION_STORAGE_KEY, {}))
    st.session_state[RUNTIME_KEY] = rt
    logger.info("Session resolved: %r", rt.state)
    return rt


# ── Navigation ────────────────────────────────────────

def current_path() -> str:
    return normalize_path(st.query_params.get("p", HOME_PATH))


def page_link(path: str) -> str:
    """Relative URL for `path` that keeps this browser's id."""
    return f"?p={normalize_path(path)}&{BROWSER_PARAM}={browser_id()}"


def navigate(path: str) -> None:
    """Switch to `path` and rerun the script. Only the browser id survives."""
    sid = browser_id()
    st.query_params.clear()
    st.query_params["p"] = normalize_path(path)
    st.query_params[BROWSER_PARAM] = sid
    st.rerun()


def logout() -> None:
    """Sign out, drop this browser session's runtime and land on the root.

    The resolver clears local + session storage before the remote call, so
    nothing role-bearing survives into the next run.
    """
    rt = st.session_state.get(RUNTIME_KEY)
    if rt is not None:
        rt.resolver.sign_out()
        rt.resolver.close()
    for key in list(st.session_state.keys()):
        del st.session_state[key]
    navigate(HOME_PATH)


# ── Favorites (session storage) ───────────────────────

def get_favorites(rt: Runtime) -> list[str]:
    raw = rt.session_storage.get_item(FAVORITES_KEY)
    return [f for f in raw.split(",") if f] if raw else []


def toggle_favorite(rt: Runtime, car_id: str) -> None:
    favorites = get_favorites(rt)
    if car_id in favorites:
        favorites.remove(car_id)
    else:
        favorites.append(car_id)
    rt.session_storage.set_item(FAVORITES_KEY, ",".join(favorites))
