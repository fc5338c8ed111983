"""
Client area (/cliente) and profile editor (/cliente/editar) for any
signed-in user.
"""

import requests
import streamlit as st

from frontend import api_client
from frontend.auth_client import AuthError
from frontend.catalog import car_grid
from frontend.runtime import Runtime, get_favorites, logout, navigate
from frontend.utils import validate_new_password


def show_user_area(rt: Runtime):
    session = rt.state.session
    st.title("A minha conta")
    st.caption(session.email if session else "")

    c1, c2 = st.columns(2)
    if c1.button("Editar perfil"):
        navigate("/cliente/editar")
    if c2.button("Terminar sessão"):
        logout()

    st.divider()
    st.subheader("Favoritos")
    favorites = get_favorites(rt)
    if not favorites:
        st.info("Ainda não guardou veículos.")
        return

    cars = []
    for car_id in favorites:
        try:
            car = api_client.get_car(car_id)
        except requests.exceptions.RequestException:
            continue
        if car:
            cars.append(car)
    car_grid(rt, cars, key_prefix="fav")


def show_edit_profile(rt: Runtime):
    st.title("Editar perfil")

    try:
        user = rt.auth.get_user()
    except AuthError as e:
        st.error(str(e))
        return
    if user is None:
        st.info("O perfil só pode ser editado com uma sessão iniciada no serviço.")
        return

    try:
        profile = api_client.get_profile(user.id) or {}
    except requests.exceptions.RequestException as e:
        st.error(api_client.error_message(e))
        return

    with st.form("profile_form"):
        full_name = st.text_input("Nome completo", value=profile.get("full_name") or user.user_metadata.get("full_name", ""))
        phone = st.text_input("Telemóvel", value=profile.get("phone") or "")
        location = st.text_input("Localidade", value=profile.get("location") or "")
        st.markdown("**Alterar palavra-passe** (opcional)")
        password = st.text_input("Nova palavra-passe", type="password")
        confirm = st.text_input("Confirmar", type="password")
        submitted = st.form_submit_button("Guardar", width="stretch")

    if not submitted:
        if st.button("Voltar"):
            navigate("/cliente")
        return

    if password:
        problem = validate_new_password(password, confirm)
        if problem:
            st.error(problem)
            return

    try:
        rt.auth.update_user(password=password or None, data={"full_name": full_name.strip()})
        if profile:
            api_client.update_profile(rt.token, user.id, {
                "full_name": full_name.strip(),
                "phone": phone.strip(),
                "location": location.strip(),
            })
    except AuthError as e:
        st.error(str(e))
        return
    except requests.exceptions.RequestException as e:
        st.error(api_client.error_message(e))
        return
    st.success("Perfil atualizado.")
