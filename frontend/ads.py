"""
Ad editor — publish a new listing (/anunciar) and edit an existing one
(/editar-anuncio/<id>).

Publishing needs an approved stand profile; the backend enforces the same
rule, this page only saves the round-trip.
"""

import requests
import streamlit as st

from frontend import api_client
from frontend.auth_client import AuthError
from frontend.roles import Role
from frontend.runtime import Runtime, navigate
from frontend.utils import MAX_AD_IMAGES, parse_price, sanitize_subdomain

FUELS = ["Gasolina", "Diesel", "Elétrico", "Híbrido"]
TRANSMISSIONS = ["Automático", "Manual"]
CATEGORIES = ["SUV", "Sedan", "Coupe", "Hatchback", "Utilitário"]


def parse_image_urls(text: str) -> list[str]:
    """One URL per line; blanks dropped."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def validate_ad(values: dict) -> str | None:
    if not values["brand"] or not values["model"]:
        return "Indique a marca e o modelo."
    if not values["images"]:
        return "Adicione pelo menos uma imagem."
    if len(values["images"]) > MAX_AD_IMAGES:
        return f"Máximo de {MAX_AD_IMAGES} imagens por anúncio."
    return None


def _index(options: list[str], value) -> int:
    return options.index(value) if value in options else 0


def _ad_form(key: str, car: dict | None = None) -> dict | None:
    """Render the listing form; returns the payload once submitted."""
    car = car or {}
    with st.form(key):
        c1, c2 = st.columns(2)
        brand = c1.text_input("Marca", value=car.get("brand", ""))
        model = c2.text_input("Modelo", value=car.get("model", ""))
        c1, c2, c3 = st.columns(3)
        year = c1.number_input("Ano", min_value=1900, max_value=2100, value=int(car.get("year") or 2020))
        price = c2.text_input("Preço (€)", value=str(car.get("price") or ""))
        mileage = c3.number_input("Quilómetros", min_value=0, value=int(car.get("mileage") or 0), step=1000)
        c1, c2, c3 = st.columns(3)
        fuel = c1.selectbox("Combustível", FUELS, index=_index(FUELS, car.get("fuel")))
        transmission = c2.selectbox("Caixa", TRANSMISSIONS, index=_index(TRANSMISSIONS, car.get("transmission")))
        category = c3.selectbox("Categoria", CATEGORIES, index=_index(CATEGORIES, car.get("category")))
        location = st.text_input("Localização", value=car.get("location", ""))
        subdomain = st.text_input("Link personalizado (/v/...)", value=car.get("subdomain") or "")
        description = st.text_area("Descrição", value=car.get("description", ""))
        images = st.text_area(
            f"Imagens (um URL por linha, máx. {MAX_AD_IMAGES})",
            value="\n".join(car.get("images") or []),
        )
        submitted = st.form_submit_button("Guardar anúncio", width="stretch")

    if not submitted:
        return None
    return {
        "brand": brand.strip(),
        "model": model.strip(),
        "year": int(year),
        "price": parse_price(price),
        "mileage": int(mileage),
        "fuel": fuel,
        "transmission": transmission,
        "category": category,
        "location": location.strip(),
        "description": description.strip(),
        "subdomain": sanitize_subdomain(subdomain) or None,
        "images": parse_image_urls(images),
    }


def show_create_ad(rt: Runtime):
    st.title("Novo anúncio")

    try:
        user = rt.auth.get_user()
    except AuthError as e:
        st.error(str(e))
        return
    if user is None:
        navigate("/login")

    try:
        profile = api_client.get_profile(user.id)
    except requests.exceptions.RequestException as e:
        st.error(api_client.error_message(e))
        return
    if rt.state.role is not Role.ADMIN and (profile or {}).get("status") != "approved":
        navigate("/dashboard")

    values = _ad_form("create_ad")
    if values is None:
        return
    problem = validate_ad(values)
    if problem:
        st.error(problem)
        return
    try:
        api_client.create_car(rt.token, values)
    except requests.exceptions.RequestException as e:
        st.error(f"Erro ao publicar: {api_client.error_message(e)}")
        return
    navigate("/dashboard")


def show_edit_ad(rt: Runtime, id: str):
    st.title("Editar anúncio")
    try:
        car = api_client.get_car(id)
    except requests.exceptions.RequestException as e:
        st.error(api_client.error_message(e))
        return
    if not car:
        st.warning("Anúncio não encontrado.")
        return

    active = st.toggle("Anúncio ativo", value=car.get("active", True))
    if active != car.get("active", True):
        try:
            api_client.update_car(rt.token, id, {"active": active})
        except requests.exceptions.RequestException as e:
            st.error(api_client.error_message(e))
        else:
            st.rerun()

    values = _ad_form(f"edit_ad_{id}", car)
    if values is None:
        if st.button("Voltar ao dashboard"):
            navigate("/dashboard")
        return
    problem = validate_ad(values)
    if problem:
        st.error(problem)
        return
    try:
        api_client.update_car(rt.token, id, values)
    except requests.exceptions.RequestException as e:
        st.error(f"Erro ao guardar: {api_client.error_message(e)}")
        return
    navigate("/dashboard")
