"""
Sidebar navigation: role-aware links, backend health and the support widget.
"""

import requests
import streamlit as st

from frontend import api_client
from frontend.roles import Role
from frontend.runtime import Runtime, logout, navigate

SUPPORT_STAND = "SUPORTE CENTRAL"
SUPPORT_PREFIX = "[SUPORTE CENTRAL] "

PUBLIC_LINKS = [
    ("Início", "/"),
    ("Veículos", "/veiculos"),
    ("Stands", "/stands"),
    ("Sobre", "/sobre"),
]


def links_for(is_logged_in: bool, role: Role) -> list[tuple[str, str]]:
    """Sidebar entries for the resolved state."""
    links = list(PUBLIC_LINKS)
    if not is_logged_in:
        return links + [("Entrar", "/login"), ("Criar conta", "/registo")]
    if role is Role.ADMIN:
        links += [("Administração", "/admin"), ("Dashboard Stand", "/dashboard")]
    elif role is Role.STAND:
        links += [("Dashboard", "/dashboard"), ("Novo anúncio", "/anunciar")]
    links.append(("A minha conta", "/cliente"))
    return links


def support_lead(name: str, email: str, message: str) -> dict:
    return {
        "customer_name": name.strip(),
        "customer_email": email.strip().lower(),
        "stand_name": SUPPORT_STAND,
        "message": SUPPORT_PREFIX + message.strip(),
    }


def show_navbar(rt: Runtime):
    sb = st.sidebar
    sb.markdown("### 🚗 Facilitador Car")

    session = rt.state.session
    if session:
        sb.markdown(f"**Sessão:** {session.email or ''}")
        sb.markdown(f"**Perfil:** {rt.state.role.value}")
    sb.divider()

    for label, path in links_for(rt.state.is_logged_in, rt.state.role):
        if sb.button(label, key=f"nav-{path}", width="stretch"):
            navigate(path)

    if rt.state.is_logged_in:
        sb.divider()
        if sb.button("Terminar sessão", width="stretch"):
            logout()

    sb.divider()
    _health(sb)
    _support_widget(sb)


def _health(sb):
    try:
        status = api_client.get_health().get("mongodb", "DOWN")
    except requests.exceptions.RequestException:
        status = "DOWN"
    sb.caption(f"Serviço: {'🟢' if status == 'UP' else '🔴'} {status}")


def _support_widget(sb):
    with sb.expander("Precisa de ajuda?"):
        with st.form("support_form", clear_on_submit=True):
            name = st.text_input("Nome")
            email = st.text_input("E-mail")
            message = st.text_area("Mensagem")
            submitted = st.form_submit_button("Enviar")
        if submitted:
            if not name.strip() or not email.strip() or not message.strip():
                st.error("Preencha todos os campos.")
                return
            try:
                api_client.create_lead(support_lead(name, email, message))
            except requests.exceptions.RequestException as e:
                st.error(api_client.error_message(e))
                return
            st.success("Mensagem enviada. Responderemos brevemente.")
