"""
Streamlit entry point — session resolution, route guarding and page dispatch.

Flow on every script run:
  1. Build (once) or reuse the Runtime; the first build resolves the session.
  2. A password-recovery link switches to the reset page.
  3. The current path (`?p=`) is authorized against the resolved state;
     a denied path redirects, an allowed one renders its page.

Run:  streamlit run frontend/app.py
"""

import sys
from pathlib import Path

# Ensure project root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import streamlit as st

# ── Page config (must be first Streamlit call) ────────
st.set_page_config(
    page_title="Facilitador Car",
    page_icon="🚗",
    layout="wide",
)

from frontend.ads import show_create_ad, show_edit_ad
from frontend.admin_dashboard import show_admin_dashboard
from frontend.catalog import show_about, show_car_detail, show_home, show_listings, show_vanity
from frontend.login import (
    handle_recovery_link,
    show_admin_login,
    show_forgot_password,
    show_login,
    show_register,
    show_reset_password,
)
from frontend.navbar import show_navbar
from frontend.routing import authorize
from frontend.runtime import current_path, get_runtime, navigate
from frontend.stand_dashboard import show_stand_dashboard
from frontend.stands import show_stand_detail, show_stands
from frontend.user_area import show_edit_profile, show_user_area

PAGES = {
    "home": show_home,
    "listings": show_listings,
    "car_detail": show_car_detail,
    "vanity": show_vanity,
    "about": show_about,
    "stands": show_stands,
    "stand_detail": show_stand_detail,
    "dashboard": show_stand_dashboard,
    "create_ad": show_create_ad,
    "edit_ad": show_edit_ad,
    "admin": show_admin_dashboard,
    "user_area": show_user_area,
    "edit_profile": show_edit_profile,
    "admin_login": show_admin_login,
    "login": show_login,
    "register": show_register,
    "forgot_password": show_forgot_password,
    "reset_password": show_reset_password,
}

rt = get_runtime()

if handle_recovery_link(rt):
    navigate("/redefinir-senha")

if rt.state.loading:
    st.info("A carregar...")
    st.stop()

show_navbar(rt)

decision = authorize(current_path(), rt.state)
if not decision.allowed:
    navigate(decision.redirect_to)

PAGES[decision.route](rt, **decision.params)
