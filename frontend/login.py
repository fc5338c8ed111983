"""
Streamlit auth surfaces.

    /login            general login (bypass pair honoured)
    /registo          registration (visitor or stand)
    /admin/login      administrator login
    /esqueci-senha    password-reset request
    /redefinir-senha  new password, valid inside a recovery session

All credential checks go through the SessionResolver; failures from the auth
service are shown verbatim, except "Invalid login credentials" which gets a
friendlier text.
"""

import requests
import streamlit as st

from frontend import api_client
from frontend.auth_client import AuthApiError, AuthError
from frontend.roles import Role
from frontend.runtime import SITE_URL, Runtime, navigate, page_link
from frontend.utils import password_strength, validate_new_password

INVALID_CREDENTIALS = "Invalid login credentials"

LANDING_BY_ROLE = {
    Role.ADMIN: "/admin",
    Role.STAND: "/dashboard",
    Role.VISITOR: "/cliente",
}


def _friendly(exc: AuthError, fallback: str = "Dados incorretos. Verifique e-mail e senha.") -> str:
    if isinstance(exc, AuthApiError) and exc.message == INVALID_CREDENTIALS:
        return fallback
    return str(exc)


def _header(title: str, subtitle: str = ""):
    st.markdown(f"## {title}")
    if subtitle:
        st.caption(subtitle)


# ═══════════════════════════════════════════════════════
# LOGIN
# ═══════════════════════════════════════════════════════

def show_login(rt: Runtime):
    """Render the login page and handle authentication."""
    _header("Entrar", "Aceda à sua conta Facilitador Car")

    with st.form("login_form"):
        email = st.text_input("E-mail", placeholder="email@exemplo.com")
        password = st.text_input("Palavra-passe", type="password")
        submitted = st.form_submit_button("Entrar", width="stretch")

    if submitted:
        if not email or not password:
            st.error("Preencha o e-mail e a palavra-passe.")
            return
        try:
            role = rt.resolver.login(email, password)
        except AuthError as exc:
            st.error(_friendly(exc))
            return
        navigate(LANDING_BY_ROLE[role])

    c1, c2, c3 = st.columns(3)
    if c1.button("Criar conta"):
        navigate("/registo")
    if c2.button("Esqueci-me da palavra-passe"):
        navigate("/esqueci-senha")
    if c3.button("Acesso Administrativo"):
        navigate("/admin/login")


# ═══════════════════════════════════════════════════════
# REGISTER
# ═══════════════════════════════════════════════════════

def show_register(rt: Runtime):
    _header("Criar conta", "Cliente particular ou stand profissional")

    account_type = st.radio(
        "Tipo de conta",
        [Role.VISITOR, Role.STAND],
        format_func=lambda r: "Cliente" if r is Role.VISITOR else "Stand profissional",
        horizontal=True,
    )

    with st.form("register_form"):
        name = st.text_input("Nome completo")
        stand_name = st.text_input("Nome do stand") if account_type is Role.STAND else ""
        email = st.text_input("E-mail")
        password = st.text_input("Palavra-passe", type="password")
        submitted = st.form_submit_button("Registar", width="stretch")

    if not submitted:
        if st.button("Já tenho conta"):
            navigate("/login")
        return

    if not name or not email or not password:
        st.error("Preencha todos os campos.")
        return
    if account_type is Role.STAND and not stand_name.strip():
        st.error("Indique o nome do stand.")
        return

    try:
        remote = rt.resolver.register(email, password, name, account_type, stand_name.strip() or None)
    except AuthError as exc:
        st.error(_friendly(exc))
        return

    try:
        api_client.create_profile(remote.access_token, {
            "id": remote.user.id,
            "full_name": name,
            "email": remote.user.email,
            "role": account_type.value,
            "stand_name": stand_name.strip() or None,
            "status": "pending" if account_type is Role.STAND else "approved",
        })
    except requests.exceptions.RequestException as exc:
        st.warning(f"Conta criada, mas o perfil não foi guardado: {api_client.error_message(exc)}")

    navigate(LANDING_BY_ROLE[rt.state.role])


# ═══════════════════════════════════════════════════════
# ADMIN LOGIN
# ═══════════════════════════════════════════════════════

def show_admin_login(rt: Runtime):
    _header("Painel de Controlo", "Acesso Administrativo Reservado")

    with st.form("admin_login_form"):
        email = st.text_input("Email Admin", placeholder="admin@facilitadorcar.pt")
        password = st.text_input("Senha", type="password")
        submitted = st.form_submit_button("Entrar no Sistema", width="stretch")

    if submitted:
        try:
            rt.resolver.admin_login(email, password)
        except AuthError as exc:
            st.error(_friendly(exc, "Acesso negado. Credenciais inválidas."))
            return
        navigate("/admin")

    if st.button("Voltar ao site"):
        navigate("/")


# ═══════════════════════════════════════════════════════
# PASSWORD RESET
# ═══════════════════════════════════════════════════════

def show_forgot_password(rt: Runtime):
    _header("Recuperar palavra-passe", "Enviamos um link de recuperação para o seu e-mail")

    with st.form("forgot_form"):
        email = st.text_input("E-mail", placeholder="email@exemplo.com")
        submitted = st.form_submit_button("Enviar link", width="stretch")

    if submitted:
        try:
            rt.auth.reset_password_for_email(email.strip(), redirect_to=SITE_URL)
        except AuthError as exc:
            st.error(str(exc))
            return
        st.success("Verifique a sua caixa de correio.")

    if st.button("Voltar ao Login"):
        navigate("/login")


def handle_recovery_link(rt: Runtime) -> bool:
    """Consume `?access_token=...&type=recovery` from a reset email.
    Returns True when the page should switch to the reset form."""
    params = st.query_params
    if params.get("type") != "recovery" or not params.get("access_token"):
        return False
    try:
        rt.auth.set_session(params["access_token"], recovery=True)
    except AuthError:
        st.session_state["recovery_error"] = True
    return True


def show_reset_password(rt: Runtime):
    _header("Nova palavra-passe", "Defina a sua nova palavra-passe")

    if st.session_state.pop("recovery_error", False) or rt.auth.access_token is None:
        st.error("Sessão expirada ou link inválido.")
        return

    with st.form("reset_form"):
        password = st.text_input("Nova palavra-passe", type="password")
        confirm = st.text_input("Confirmar Palavra-passe", type="password")
        submitted = st.form_submit_button("Guardar", width="stretch")

    if password:
        st.progress(password_strength(password) / 3)

    if submitted:
        problem = validate_new_password(password, confirm)
        if problem:
            st.error(problem)
            return
        try:
            rt.auth.update_user(password=password)
        except AuthError as exc:
            st.error(str(exc))
            return
        st.success("Palavra-passe atualizada. Já pode entrar.")
        st.markdown(f"[Ir para o Login]({page_link('/login')})")
